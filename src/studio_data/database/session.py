from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..config.settings import Settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_from_url(url: str, *, echo: bool = False, **kwargs: Any) -> AsyncEngine:
    """
    Build the AsyncEngine.

    SQLite gets `PRAGMA foreign_keys=ON` on every connection so `ON DELETE SET NULL`
    behaves as it does on Postgres.
    """
    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=echo, **kwargs)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,  # connection health checks
        **kwargs,
    )


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    return create_engine_from_url(settings.DATABASE_URL, echo=settings.SQLALCHEMY_ECHO)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: records are converted to domain models after commit
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
