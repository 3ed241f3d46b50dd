"""Shared repository plumbing, exercised through a bare BaseRepository over galleries."""

import logging
import uuid

import pytest

from studio_data.core.result import Failure, failure, is_failure, success
from studio_data.exceptions import DatabaseError, NotFoundError
from studio_data.models import GalleryRecord
from studio_data.repositories.base_repository import BaseRepository
from studio_data.schemas import GalleryCategory, UpdateGalleryInput


@pytest.fixture
def base_repo(session_factory) -> BaseRepository[GalleryRecord]:
    repo = BaseRepository(GalleryRecord, session_factory)
    repo.entity_name = "Gallery"
    return repo


class TestRun:
    async def test_success_value(self, base_repo):
        async def work():
            return "done"

        assert (await base_repo._run("noop", work)).value == "done"

    async def test_expected_error_logged_at_info(self, base_repo, caplog):
        async def work():
            async with base_repo.transaction() as session:
                return await base_repo._get_or_raise(session, uuid.uuid4())

        with caplog.at_level(logging.INFO):
            result = await base_repo._run("find_by_id", work)

        assert isinstance(result.error, NotFoundError)
        record = next(r for r in caplog.records if r.getMessage() == "repo.find_by_id.not_found")
        assert record.levelno == logging.INFO
        assert record.model == "Gallery"

    async def test_unexpected_error_becomes_database_error(self, base_repo, caplog):
        async def work():
            raise RuntimeError("socket closed")

        result = await base_repo._run("find_all", work)

        assert isinstance(result.error, DatabaseError)
        assert isinstance(result.error.cause, RuntimeError)
        assert any(r.getMessage() == "repo.find_all.failed" and r.levelno == logging.ERROR for r in caplog.records)


class TestTransaction:
    async def test_rolls_back_on_error(self, base_repo, session_factory):
        async def work():
            async with base_repo.transaction() as session:
                session.add(GalleryRecord(title="T", slug="t", category=GalleryCategory.WEDDING))
                await session.flush()
                raise NotFoundError("Gallery", "boom")

        assert is_failure(await base_repo._run("create", work))

        async def count():
            async with base_repo.transaction() as session:
                return await base_repo._count(session)

        assert (await base_repo._run("count", count)).value == 0


class TestChanges:
    def test_only_set_fields(self):
        data = UpdateGalleryInput(title="New")
        assert BaseRepository._changes(data) == {"title": "New"}

    def test_none_kept_only_for_nullable(self):
        data = UpdateGalleryInput(title=None, cover_photo_id=None)
        assert BaseRepository._changes(data) == {}
        assert BaseRepository._changes(data, nullable=("cover_photo_id",)) == {"cover_photo_id": None}


class TestSequential:
    async def test_all_succeed(self, base_repo):
        ids = [uuid.uuid4() for _ in range(3)]

        async def step(index, entity_id):
            return success(None)

        outcome = (await base_repo._sequential("reorder", ids, step)).value
        assert outcome.ok
        assert outcome.succeeded == tuple(ids)

    async def test_continues_and_reports(self, base_repo):
        ids = [uuid.uuid4() for _ in range(3)]
        visited = []

        async def step(index, entity_id):
            visited.append(index)
            if index == 1:
                return failure(NotFoundError("Gallery", entity_id))
            return success(None)

        result = await base_repo._sequential("reorder", ids, step)

        assert visited == [0, 1, 2]
        assert isinstance(result, Failure)
        assert result.error.details == {
            "succeeded": [str(ids[0]), str(ids[2])],
            "failed": {str(ids[1]): "not_found"},
        }
