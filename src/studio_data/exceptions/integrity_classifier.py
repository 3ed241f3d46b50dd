"""
Classification of SQLAlchemy `IntegrityError`s.

The classifier only answers "what kind of constraint failed, and which one"; turning
that into a domain error is the mapper's job.
"""

import logging
from enum import Enum

from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class ConstraintKind(str, Enum):
    UNIQUE = "unique"
    NOT_NULL = "not_null"
    FOREIGN_KEY = "foreign_key"
    CHECK = "check"
    UNKNOWN = "unknown"


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    CHECK_VIOLATION = "23514"


PGCODE_KIND_MAP = {
    PostgresErrorCodes.UNIQUE_VIOLATION.value: ConstraintKind.UNIQUE,
    PostgresErrorCodes.NOT_NULL_VIOLATION.value: ConstraintKind.NOT_NULL,
    PostgresErrorCodes.FOREIGN_KEY_VIOLATION.value: ConstraintKind.FOREIGN_KEY,
    PostgresErrorCodes.CHECK_VIOLATION.value: ConstraintKind.CHECK,
}

_MESSAGE_KEYWORDS = (
    (ConstraintKind.UNIQUE, ("unique constraint", "unique failed", "unique violation", "duplicate")),
    (ConstraintKind.NOT_NULL, ("not null constraint", "not null", "null value in column")),
    (ConstraintKind.FOREIGN_KEY, ("foreign key constraint", "foreign key", "is not present in table")),
    (ConstraintKind.CHECK, ("check constraint", "check failed")),
)


def _pgcode_of(orig) -> str | None:
    # psycopg exposes `pgcode`, asyncpg exposes `sqlstate` (wrapped by SQLAlchemy's adapter)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _constraint_name_of(orig) -> str | None:
    diag = getattr(orig, "diag", None)
    if diag is not None:
        return getattr(diag, "constraint_name", None)
    return getattr(orig, "constraint_name", None)


def _classify_from_postgres_diag(orig) -> tuple[ConstraintKind | None, str | None]:
    pgcode = _pgcode_of(orig)
    if not pgcode:
        return None, None

    constraint_name = _constraint_name_of(orig)
    kind = PGCODE_KIND_MAP.get(pgcode)
    if kind is not None:
        logger.debug("integrity.postgres_diag", extra={"pgcode": pgcode, "constraint_name": constraint_name})
        return kind, constraint_name

    logger.warning("integrity.unknown_pgcode", extra={"pgcode": pgcode, "constraint_name": constraint_name})
    return ConstraintKind.UNKNOWN, constraint_name


def _classify_from_generic_message(msg: str) -> ConstraintKind:
    """Fallback for SQLite and other drivers that only give us a message."""
    normalized = (msg or "").lower()
    for kind, keywords in _MESSAGE_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return kind

    logger.warning("integrity.unknown_message", extra={"message_snippet": normalized[:200]})
    return ConstraintKind.UNKNOWN


def classify_integrity_error(exc: IntegrityError) -> tuple[ConstraintKind, str | None]:
    """
    Classify an IntegrityError.

    Returns:
        (kind, constraint_name) where constraint_name is only known for Postgres drivers.
    """
    orig = exc.orig

    kind, constraint_name = _classify_from_postgres_diag(orig)
    if kind is not None:
        return kind, constraint_name

    return _classify_from_generic_message(str(orig) if orig is not None else str(exc)), None


__all__ = ["ConstraintKind", "PostgresErrorCodes", "classify_integrity_error"]
