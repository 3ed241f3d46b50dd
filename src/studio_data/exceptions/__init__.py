# studio_data/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py                    # Domain errors handed back inside a Failure
# │   ├── integrity_classifier.py    # Which constraint kind an IntegrityError is
# │   └── mapper.py                  # SQLAlchemy errors -> domain errors (db_error_handler)

from .base import (
    ConflictError,
    DatabaseError,
    DomainError,
    FileUploadError,
    FileUploadReason,
    NotFoundError,
    StorageError,
    StorageOperation,
    ValidationError,
    to_domain_error,
    to_storage_error,
)
from .mapper import db_error_handler, map_integrity_error

__all__ = [
    "DomainError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DatabaseError",
    "StorageError",
    "FileUploadError",
    "FileUploadReason",
    "StorageOperation",
    "to_domain_error",
    "to_storage_error",
    "db_error_handler",
    "map_integrity_error",
]
