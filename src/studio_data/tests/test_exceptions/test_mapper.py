"""Integrity error classification and mapping, using hand-built driver errors."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from studio_data.exceptions import ConflictError, DatabaseError, NotFoundError
from studio_data.exceptions.integrity_classifier import ConstraintKind, classify_integrity_error
from studio_data.exceptions.mapper import db_error_handler, extract_columns, map_integrity_error


class FakePgError(Exception):
    """Looks enough like an asyncpg/psycopg error for the classifier."""

    def __init__(self, message: str, sqlstate: str, constraint_name: str | None = None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.constraint_name = constraint_name


def integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO galleries ...", {}, orig)


class FakeSession:
    def __init__(self):
        self.rolled_back = 0

    async def rollback(self):
        self.rolled_back += 1


class TestClassifier:
    def test_postgres_sqlstate_wins(self):
        exc = integrity_error(FakePgError("duplicate key", "23505", "uq_galleries_slug"))
        assert classify_integrity_error(exc) == (ConstraintKind.UNIQUE, "uq_galleries_slug")

    def test_unknown_sqlstate(self):
        exc = integrity_error(FakePgError("odd", "23P01"))
        assert classify_integrity_error(exc)[0] is ConstraintKind.UNKNOWN

    @pytest.mark.parametrize(
        "message, kind",
        [
            ("UNIQUE constraint failed: galleries.slug", ConstraintKind.UNIQUE),
            ("NOT NULL constraint failed: photos.url", ConstraintKind.NOT_NULL),
            ("FOREIGN KEY constraint failed", ConstraintKind.FOREIGN_KEY),
            ("CHECK constraint failed: positive_size", ConstraintKind.CHECK),
            ("something else entirely", ConstraintKind.UNKNOWN),
        ],
    )
    def test_sqlite_messages(self, message, kind):
        assert classify_integrity_error(integrity_error(Exception(message))) == (kind, None)


class TestExtractColumns:
    def test_postgres_detail(self):
        exc = integrity_error(Exception('duplicate key value\nDETAIL:  Key (slug)=(kona-wedding) already exists.'))
        assert extract_columns(exc) == ["slug"]

    def test_postgres_not_null(self):
        exc = integrity_error(Exception('null value in column "title" violates not-null constraint'))
        assert extract_columns(exc) == ["title"]

    def test_sqlite_message(self):
        assert extract_columns(integrity_error(Exception("UNIQUE constraint failed: galleries.slug"))) == ["slug"]

    def test_constraint_name_fallback(self):
        assert extract_columns(integrity_error(Exception("nope")), "uq_galleries_slug") == ["slug"]

    def test_nothing_to_go_on(self):
        assert extract_columns(integrity_error(Exception("nope"))) is None


class TestMapIntegrityError:
    def test_unique_violation_is_conflict_on_column(self):
        err = map_integrity_error(integrity_error(Exception("UNIQUE constraint failed: galleries.slug")), "Gallery")
        assert isinstance(err, ConflictError)
        assert err.field == "slug"
        assert "UNIQUE" not in err.message

    def test_foreign_key_is_database_error(self):
        err = map_integrity_error(integrity_error(Exception("FOREIGN KEY constraint failed")), "Photo")
        assert isinstance(err, DatabaseError)
        assert err.code == "database_error"


class TestDbErrorHandler:
    async def test_domain_error_passes_through_after_rollback(self):
        session = FakeSession()
        with pytest.raises(NotFoundError):
            async with db_error_handler(session, "Gallery"):
                raise NotFoundError("Gallery", "g")
        assert session.rolled_back == 1

    async def test_integrity_error_is_mapped(self):
        session = FakeSession()
        with pytest.raises(ConflictError) as info:
            async with db_error_handler(session, "Gallery"):
                raise integrity_error(Exception("UNIQUE constraint failed: galleries.slug"))
        assert info.value.field == "slug"
        assert session.rolled_back == 1

    async def test_other_sqlalchemy_errors_become_database_error(self):
        session = FakeSession()
        with pytest.raises(DatabaseError) as info:
            async with db_error_handler(session, "Inquiry"):
                raise OperationalError("SELECT 1", {}, Exception("server closed the connection"))
        assert isinstance(info.value.cause, OperationalError)

    async def test_clean_block_does_not_roll_back(self):
        session = FakeSession()
        async with db_error_handler(session, "Gallery"):
            pass
        assert session.rolled_back == 0
