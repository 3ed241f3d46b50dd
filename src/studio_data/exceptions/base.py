"""
Domain error taxonomy.

These are the only error types a repository ever hands back to presentation code
(inside a `Failure`). Store- or SDK-specific exceptions are translated into one of
them at the boundary (see `mapper.py`), so callers can branch on the kind without
knowing anything about SQLAlchemy, asyncpg or the object store SDK.
"""

from typing import Any, Callable, Iterable, Literal, Mapping

StorageOperation = Literal["upload", "download", "delete"]
FileUploadReason = Literal["size", "type", "corrupt", "other"]


class DomainError(Exception):
    """
    Base class for every domain error.

    - message: human-friendly message (safe to show to clients)
    - code: canonical short code (e.g. 'not_found', 'conflict') used by clients
    - fields: optional list of field names related to the error (e.g. ['slug'])
    - details: optional structured detail for callers (never raw DB messages)
    - cause: the original exception, kept for logs only
    """

    code: str = "domain_error"

    # Map canonical code -> default HTTP status, for callers that render errors over HTTP.
    CODE_TO_STATUS = {
        "not_found": 404,
        "validation_error": 422,
        "conflict": 409,
        "database_error": 500,
        "storage_error": 500,
        "file_upload_error": 400,
    }

    def __init__(
        self,
        message: str,
        *,
        fields: Iterable[str] | None = None,
        details: Mapping[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.details: dict[str, Any] = dict(details) if details else {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        parts.append(f"code: {self.code}")
        return f"{self.message} ({'; '.join(parts)})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"

    def to_payload(self) -> dict:
        """
        Return a JSON-serializable dict suitable for responses.

        Standard shape:
            {
                "detail": "A human-friendly message",
                "code": "conflict",
                "fields": ["slug"],           # optional
                "details": {...},             # optional
            }
        The `cause` is intentionally left out.
        """
        payload: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.fields:
            payload["fields"] = list(self.fields)
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def http_status(self) -> int:
        return self.CODE_TO_STATUS.get(self.code, 500)


class NotFoundError(DomainError):
    """The requested entity does not exist."""

    code = "not_found"

    def __init__(self, entity_name: str, identifier: Any):
        super().__init__(f"{entity_name} with id '{identifier}' not found")
        self.entity_name = entity_name
        self.identifier = str(identifier)


class ValidationError(DomainError):
    """Input failed shape/constraint checks before any remote call was made."""

    code = "validation_error"

    def __init__(self, message: str, fields: Mapping[str, list[str]] | None = None):
        self.field_errors: dict[str, list[str]] = {k: list(v) for k, v in (fields or {}).items()}
        super().__init__(message, fields=list(self.field_errors) or None)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.field_errors:
            payload["errors"] = self.field_errors
        return payload


class ConflictError(DomainError):
    """A uniqueness constraint (e.g. gallery slug) would be violated."""

    code = "conflict"

    def __init__(self, message: str, field: str | None = None, *, cause: BaseException | None = None):
        super().__init__(message, fields=[field] if field else None, cause=cause)
        self.field = field


class DatabaseError(DomainError):
    """The relational store reported a failure."""

    code = "database_error"

    def __init__(self, message: str, cause: BaseException | None = None, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, cause=cause)


class StorageError(DomainError):
    """The object store reported a failure for upload, download or delete."""

    code = "storage_error"

    def __init__(self, operation: StorageOperation, message: str, cause: BaseException | None = None):
        super().__init__(message, details={"operation": operation}, cause=cause)
        self.operation = operation


class FileUploadError(DomainError):
    """A file failed local validation (type/size) before upload was attempted."""

    code = "file_upload_error"

    def __init__(self, message: str, reason: FileUploadReason = "other", cause: BaseException | None = None):
        super().__init__(message, details={"reason": reason}, cause=cause)
        self.reason = reason

    def http_status(self) -> int:
        return 413 if self.reason == "size" else 400


def to_domain_error(exc: BaseException) -> DomainError:
    """
    Coerce any exception into the taxonomy.

    Domain errors pass through unchanged; anything else is an unexpected store
    failure and is wrapped as a `DatabaseError` with the original kept as cause.
    """
    if isinstance(exc, DomainError):
        return exc
    return DatabaseError("Unexpected data access failure", cause=exc)


def to_storage_error(operation: StorageOperation, message: str) -> Callable[[BaseException], DomainError]:
    """
    Error mapper for calls that only touch the object store.

    Domain errors pass through; anything else becomes `StorageError(operation, message)`.
    """
    def convert(exc: BaseException) -> DomainError:
        if isinstance(exc, DomainError):
            return exc
        return StorageError(operation, message, cause=exc)

    return convert


__all__ = [
    "DomainError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DatabaseError",
    "StorageError",
    "FileUploadError",
    "StorageOperation",
    "FileUploadReason",
    "to_domain_error",
    "to_storage_error",
]
