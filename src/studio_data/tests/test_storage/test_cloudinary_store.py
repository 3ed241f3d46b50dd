"""CloudinaryObjectStore against a monkeypatched SDK; nothing leaves the process."""

import cloudinary
import cloudinary.api
import cloudinary.uploader
import pytest
from cloudinary.exceptions import Error as CloudinaryError
from cloudinary.exceptions import NotFound

from studio_data.exceptions import StorageError
from studio_data.storage.cloudinary_store import CloudinaryObjectStore, split_key


@pytest.fixture
def store() -> CloudinaryObjectStore:
    return CloudinaryObjectStore("demo", "key", "secret", max_retries=3, retry_base_delay=0)


def test_split_key():
    assert split_key("photos", "g1/1700_Kona.JPG") == ("photos/g1/1700_Kona", "jpg")
    assert split_key("thumbnails", "noext") == ("thumbnails/noext", "")


async def test_upload_retries_then_succeeds(store, monkeypatch):
    calls = []

    def flaky_upload(data, **kwargs):
        calls.append(kwargs)
        if len(calls) < 3:
            raise CloudinaryError("temporarily unavailable")
        return {"bytes": len(data)}

    monkeypatch.setattr(cloudinary.uploader, "upload", flaky_upload)

    key = await store.upload("photos", "g1/1_a.jpg", b"\xff\xd8\xff", "image/jpeg")

    assert key == "g1/1_a.jpg"
    assert len(calls) == 3
    assert calls[0]["public_id"] == "photos/g1/1_a"
    assert calls[0]["overwrite"] is False
    assert calls[0]["cloud_name"] == "demo"


async def test_upload_gives_up_with_storage_error(store, monkeypatch):
    def broken(data, **kwargs):
        raise CloudinaryError("still down")

    monkeypatch.setattr(cloudinary.uploader, "upload", broken)

    with pytest.raises(StorageError) as info:
        await store.upload("photos", "g1/1_a.jpg", b"x", "image/jpeg")
    assert info.value.operation == "upload"


async def test_signed_url_for_missing_object(store, monkeypatch):
    def missing(public_id, **kwargs):
        raise NotFound("Resource not found")

    monkeypatch.setattr(cloudinary.api, "resource", missing)

    with pytest.raises(StorageError) as info:
        await store.create_signed_url("photos", "g1/1_a.jpg", 60)
    assert info.value.operation == "download"


async def test_signed_url_expires(store, monkeypatch):
    monkeypatch.setattr(cloudinary.api, "resource", lambda public_id, **kwargs: {"public_id": public_id})

    url = await store.create_signed_url("photos", "g1/1_a.jpg", 60)

    assert "expires_at=" in url


async def test_public_url(store):
    url = await store.get_public_url("photos", "g1/1_a.jpg")
    assert url.startswith("https://res.cloudinary.com/demo/image/upload/")
    assert url.endswith("photos/g1/1_a.jpg")


async def test_remove_maps_keys_to_public_ids(store, monkeypatch):
    seen = {}

    def delete_resources(public_ids, **kwargs):
        seen["ids"] = public_ids
        return {"deleted": {pid: "deleted" for pid in public_ids}}

    monkeypatch.setattr(cloudinary.api, "delete_resources", delete_resources)

    await store.remove("photos", ["g1/1_a.jpg", "g1/2_b.png"])
    assert seen["ids"] == ["photos/g1/1_a", "photos/g1/2_b"]


async def test_remove_nothing_is_a_no_op(store, monkeypatch):
    monkeypatch.setattr(cloudinary.api, "delete_resources", lambda *a, **k: pytest.fail("should not be called"))
    await store.remove("photos", [])


async def test_public_url_failure_is_storage_error(store, monkeypatch):
    def broken(self, **options):
        raise ValueError("bad transformation")

    monkeypatch.setattr(cloudinary.CloudinaryImage, "build_url", broken)

    with pytest.raises(StorageError) as info:
        await store.get_public_url("photos", "g1/1_a.jpg")
    assert info.value.operation == "download"
    assert isinstance(info.value.cause, ValueError)
