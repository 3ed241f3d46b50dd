import json

from studio_data.exceptions import (
    ConflictError,
    DatabaseError,
    FileUploadError,
    NotFoundError,
    StorageError,
    ValidationError,
    to_domain_error,
    to_storage_error,
)


class TestPayloads:
    """
    Behavior:
      - Each error renders to a JSON-serializable payload carrying a stable code.
      - The original cause never appears in the payload.
    """

    def test_not_found(self):
        err = NotFoundError("Gallery", "kona-wedding")
        assert err.code == "not_found"
        assert err.identifier == "kona-wedding"
        assert err.to_payload() == {"detail": "Gallery with id 'kona-wedding' not found", "code": "not_found"}
        assert err.http_status() == 404

    def test_validation_lists_field_errors(self):
        err = ValidationError("Validation failed", {"slug": ["bad pattern"], "title": ["too short"]})
        payload = err.to_payload()

        assert payload["code"] == "validation_error"
        assert sorted(payload["fields"]) == ["slug", "title"]
        assert payload["errors"]["slug"] == ["bad pattern"]
        assert err.http_status() == 422

    def test_conflict_names_field_and_hides_cause(self):
        cause = RuntimeError("duplicate key value violates unique constraint uq_galleries_slug")
        err = ConflictError("Gallery with slug 'x' already exists", field="slug", cause=cause)
        payload = err.to_payload()

        assert err.field == "slug"
        assert payload["fields"] == ["slug"]
        assert "uq_galleries_slug" not in json.dumps(payload)
        assert err.__cause__ is cause

    def test_storage_records_operation(self):
        err = StorageError("delete", "simulated")
        assert err.operation == "delete"
        assert err.to_payload()["details"] == {"operation": "delete"}

    def test_file_upload_reason_drives_status(self):
        assert FileUploadError("too big", reason="size").http_status() == 413
        assert FileUploadError("wrong type", reason="type").http_status() == 400
        assert FileUploadError("x").reason == "other"

    def test_str_includes_code_and_fields(self):
        text = str(ConflictError("exists", field="slug"))
        assert "code: conflict" in text
        assert "fields: slug" in text


class TestToDomainError:
    def test_domain_error_unchanged(self):
        err = NotFoundError("Photo", 1)
        assert to_domain_error(err) is err

    def test_anything_else_becomes_database_error(self):
        cause = OSError("connection reset")
        err = to_domain_error(cause)
        assert isinstance(err, DatabaseError)
        assert err.cause is cause
        assert "connection reset" not in err.message


class TestToStorageError:
    def test_sdk_exception_becomes_storage_error(self):
        cause = ConnectionError("socket closed")
        err = to_storage_error("delete", "Failed to remove objects")(cause)
        assert isinstance(err, StorageError)
        assert err.operation == "delete"
        assert err.cause is cause
        assert err.http_status() == 500

    def test_domain_error_unchanged(self):
        err = StorageError("upload", "Object already exists")
        assert to_storage_error("delete", "ignored")(err) is err
