"""End-to-end flows across the gallery and photo repositories."""

from studio_data.core.result import is_failure, is_success, unwrap
from studio_data.exceptions import ConflictError, FileUploadError
from studio_data.schemas import PhotoFile

from ..test_fixtures.repository_fixtures import JPEG_HEADER

TWO_MB = 2 * 1024 * 1024


async def test_wedding_gallery_flow(gallery_repository, photo_repository, object_store):
    """
    Behavior:
      - create "Kona Wedding" -> photo_count 0
      - a second gallery with the same slug -> conflict
      - upload a 2MB JPEG -> storage key set, width 0 until enrichment
      - update_photo_count -> 1
    """
    first = await gallery_repository.create({"title": "Kona Wedding", "slug": "kona-wedding", "category": "wedding"})
    assert is_success(first)
    assert first.value.photo_count == 0

    second = await gallery_repository.create({"title": "Kona Again", "slug": "kona-wedding", "category": "wedding"})
    assert isinstance(second.error, ConflictError)

    file = PhotoFile(filename="first-dance.jpg", content=JPEG_HEADER + b"\x00" * (TWO_MB - len(JPEG_HEADER)), content_type="image/jpeg")
    photo = await photo_repository.upload({"gallery_id": first.value.id, "title": "First dance"}, file)
    assert is_success(photo)
    assert photo.value.storage_key
    assert photo.value.width == 0
    assert photo.value.file_size == TWO_MB

    counted = unwrap(await gallery_repository.update_photo_count(first.value.id))
    assert counted.photo_count == 1


async def test_slugs_stay_unique_across_creates_and_updates(gallery_repository, create_gallery):
    a = await create_gallery(slug="alpha")
    b = await create_gallery(slug="beta")

    assert is_failure(await gallery_repository.update(b.id, {"slug": "alpha"}))
    assert is_success(await gallery_repository.update(a.id, {"slug": "gamma"}))
    assert is_success(await gallery_repository.update(b.id, {"slug": "alpha"}))

    slugs = [g.slug for g in unwrap(await gallery_repository.find_all())]
    assert sorted(slugs) == ["alpha", "gamma"]


async def test_rejected_upload_writes_nothing(photo_repository, created_gallery, object_store):
    file = PhotoFile(filename="notes.txt", content=b"just text", content_type="text/plain")

    result = await photo_repository.upload({"gallery_id": created_gallery.id, "title": "Notes"}, file)

    assert isinstance(result.error, FileUploadError)
    assert unwrap(await photo_repository.find_by_gallery(created_gallery.id)) == []
    assert object_store.objects == {}
