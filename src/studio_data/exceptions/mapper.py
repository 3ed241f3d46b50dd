import re
import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .base import ConflictError, DatabaseError, DomainError
from .integrity_classifier import ConstraintKind, classify_integrity_error

logger = logging.getLogger(__name__)

# -----------------------
# Column extraction helpers
# -----------------------

_PG_NOT_NULL = re.compile(r'null value in column "(?P<col>[^"]+)"', re.IGNORECASE)
_PG_KEY = re.compile(r"key \((?P<cols>[^)]+)\)=", re.IGNORECASE)
_SQLITE_FAILED = re.compile(r"(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>[^\n\[]+)", re.IGNORECASE)
# naming convention in database/base.py: uq_<table>_<column>, ix_<table>_<column>
_CONSTRAINT_NAME = re.compile(r"^(?:uq|ix)_(?P<table>[a-z]+?)_(?P<col>[a-z_]+)$")


def extract_columns(exc: IntegrityError, constraint_name: str | None = None) -> list[str] | None:
    """
    Best-effort extraction of the offending column names.

    Postgres:
        'null value in column "slug" ...', 'DETAIL:  Key (slug)=(kona) already exists.'
    SQLite:
        'UNIQUE constraint failed: galleries.slug'
    Falls back to parsing the constraint name produced by our naming convention.
    """
    orig = exc.orig
    msg = str(orig) if orig is not None else str(exc)

    m = _PG_NOT_NULL.search(msg)
    if m:
        return [m.group("col")]

    m = _PG_KEY.search(msg)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    m = _SQLITE_FAILED.search(msg)
    if m:
        return [c.split(".")[-1].strip() for c in re.split(r",\s*", m.group("cols").strip())]

    if constraint_name:
        m = _CONSTRAINT_NAME.match(constraint_name)
        if m:
            return [m.group("col")]

    return None


# -----------------------
# Mapper
# -----------------------

def map_integrity_error(exc: IntegrityError, model_name: str | None = None) -> DomainError:
    """
    Translate an IntegrityError into a domain error.

    Unique violations become `ConflictError` naming the first offending column; every
    other constraint kind is a `DatabaseError` with a sanitized message.
    """
    kind, constraint_name = classify_integrity_error(exc)
    columns = extract_columns(exc, constraint_name)
    model_part = model_name or "Record"

    if kind is ConstraintKind.UNIQUE:
        # expected client-level scenario, INFO is enough
        logger.info(
            "mapper.conflict_detected",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        field = columns[0] if columns else None
        if field:
            return ConflictError(f"{model_part} with this {field} already exists", field=field, cause=exc)
        return ConflictError(f"{model_part} already exists (unique constraint)", cause=exc)

    if kind is ConstraintKind.NOT_NULL:
        logger.info("mapper.not_null_violation", extra={"model": model_part, "fields": columns})
        detail = f": {', '.join(columns)}" if columns else ""
        return DatabaseError(f"Missing required field for {model_part}{detail}", cause=exc, fields=columns)

    if kind is ConstraintKind.FOREIGN_KEY:
        logger.info("mapper.foreign_key_violation", extra={"model": model_part, "fields": columns})
        return DatabaseError(f"{model_part} references a missing entity", cause=exc, fields=columns)

    if kind is ConstraintKind.CHECK:
        # Raw DB text stays at DEBUG only
        logger.debug("mapper.check_constraint_failure", extra={"model": model_part, "raw": str(exc.orig)})
        return DatabaseError(f"{model_part} business rule violated (check constraint)", cause=exc)

    logger.warning("mapper.unknown_integrity_error", extra={"model": model_part, "constraint": constraint_name})
    return DatabaseError(f"{model_part} database integrity error", cause=exc)


async def _safe_rollback(db: AsyncSession, model_name: str | None) -> None:
    try:
        await db.rollback()
    except Exception:
        logger.exception("mapper.rollback_failed", extra={"model": model_name})


# -----------------------
# Async context manager to DRY error handling in repositories
# -----------------------
@asynccontextmanager
async def db_error_handler(db: AsyncSession, model_name: str | None = None):
    """
    Usage:
        async with db_error_handler(session, "Gallery"):
            ... DB ops that may raise ...

    Rolls back on error and re-raises as a domain error. Domain errors raised inside the
    block (e.g. a NotFoundError) pass through after the rollback.
    """
    try:
        yield
    except DomainError:
        await _safe_rollback(db, model_name)
        raise
    except IntegrityError as exc:
        await _safe_rollback(db, model_name)
        raise map_integrity_error(exc, model_name) from exc
    except SQLAlchemyError as exc:
        await _safe_rollback(db, model_name)
        logger.error("mapper.database_error", extra={"model": model_name, "error_type": type(exc).__name__})
        raise DatabaseError(f"Failed to operate on {model_name or 'database'}", cause=exc) from exc
    except Exception as exc:
        await _safe_rollback(db, model_name)
        logger.exception("mapper.unexpected_error", extra={"model": model_name})
        raise DatabaseError(f"Failed to operate on {model_name or 'database'}", cause=exc) from exc


__all__ = ["db_error_handler", "map_integrity_error", "extract_columns"]
