"""
Core pytest configuration for the entire test suite.

Only the database setup shared by every test lives here. Domain fixtures
(repositories, sample payloads, the in-memory object store) are in
`test_fixtures/repository_fixtures.py` and imported at the bottom of this module so
they are available everywhere.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator

# -------------------------------
# Early logging tuning
# -------------------------------
# Silence noisy third-party loggers before they are imported.
NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "asyncio",
    "aiosqlite",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from studio_data import models  # noqa: F401 - registers the records on Base.metadata
from studio_data.core.logging.builder import setup_logging
from studio_data.database.base import Base
from studio_data.database.session import create_engine_from_url, create_session_factory

from .test_fixtures.settings_fixtures import TEST_DATABASE_URL, make_test_settings


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """
    Install the package logging configuration for the whole session.

    pytest re-attaches its capture handler for every test phase, so `caplog`
    keeps working after dictConfig replaced the root handlers.
    """
    setup_logging(make_test_settings())
    yield


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------


@pytest.fixture()
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    A fresh schema per test.

    In-memory SQLite lives as long as its connection, so the engine keeps exactly
    one (StaticPool) and every session of the test sees the same database.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_engine_from_url(
            TEST_DATABASE_URL, poolclass=StaticPool, connect_args={"check_same_thread": False}
        )
    else:
        engine = create_engine_from_url(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """The factory repositories open their per-operation sessions from."""
    return create_session_factory(async_engine)


# Repository test fixtures
from .test_fixtures.repository_fixtures import (  # noqa: E402,F401
    create_gallery,
    create_inquiry,
    created_gallery,
    gallery_repository,
    inquiry_repository,
    jpeg_file,
    object_store,
    photo_repository,
    sample_gallery_data,
    sample_inquiry_data,
    upload_photo,
)
