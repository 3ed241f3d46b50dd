"""
Base repository class providing the plumbing shared by the store-backed repositories.

Each public repository method is one unit of work against the relational store:

    return await self._run("create", work)

`work` is an async function that opens its own session through `transaction()`,
raises domain errors on the expected failure paths, and returns a domain value.
`_run` is the single place where the exception turns into a `Failure`, so no native
SQLAlchemy (or SDK) exception ever leaves a repository method.

Model-specific repositories inherit from this class and add their own queries.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Generic, Iterable, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.result import Failure, Result, failure, success, try_catch
from ..database.base import Base
from ..exceptions.base import DomainError, NotFoundError, to_domain_error
from ..exceptions.mapper import db_error_handler
from ..schemas.common import BatchOutcome

# Type variable for the record class
ModelType = TypeVar("ModelType", bound=Base)
T = TypeVar("T")

logger = logging.getLogger(__name__)

# expected, client-level failures: logged at INFO without a stack trace
_EXPECTED_CODES = {"not_found", "validation_error", "conflict", "file_upload_error"}


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository.

    Type Parameters:
        ModelType: The SQLAlchemy record class this repository manages.
    """

    entity_name: str = "Record"

    def __init__(self, model: Type[ModelType], session_factory: async_sessionmaker[AsyncSession]):
        """
        Args:
            model: The SQLAlchemy record class (not an instance), used to build
                `select(self.model)` and friends.
            session_factory: Factory for short-lived sessions. Every operation opens
                its own session and commits it; no transaction spans two calls.
        """
        self.model = model
        self.session_factory = session_factory

    # =================================================================================================================
    # Unit of work
    # =================================================================================================================

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Open a session, yield it, commit on success.

        Any error inside the block rolls back and is re-raised as a domain error by
        `db_error_handler` (unique violation -> ConflictError, anything else from the
        store -> DatabaseError, domain errors unchanged).
        """
        async with self.session_factory() as session:
            async with db_error_handler(session, self.entity_name):
                yield session
                await session.commit()

    async def _run(
        self,
        operation: str,
        work: Callable[[], Awaitable[T]],
        map_error: Callable[[BaseException], DomainError] = to_domain_error,
    ) -> Result[T, DomainError]:
        """
        Execute `work`, turning any raised exception into a logged `Failure`.

        `map_error` defaults to `to_domain_error`; object-store calls pass
        `to_storage_error(...)` so an SDK exception is reported as a StorageError.
        """
        start = time.perf_counter()
        result = await try_catch(work, map_error)
        duration_ms = int((time.perf_counter() - start) * 1000)

        if isinstance(result, Failure):
            self._log_failure(operation, result.error, duration_ms)
        else:
            logger.debug(
                f"repo.{operation}.success",
                extra={"model": self.entity_name, "operation": operation, "duration_ms": duration_ms},
            )
        return result

    def _log_failure(self, operation: str, error: DomainError, duration_ms: int) -> None:
        extra = {
            "model": self.entity_name,
            "operation": operation,
            "error_code": error.code,
            "fields": error.fields,
            "duration_ms": duration_ms,
        }
        if error.code in _EXPECTED_CODES:
            logger.info(f"repo.{operation}.{error.code}", extra=extra)
        else:
            logger.error(f"repo.{operation}.failed", extra=extra, exc_info=error.cause or error)

    # =================================================================================================================
    # Query helpers (raise; only called from inside `work`)
    # =================================================================================================================

    async def _get(self, session: AsyncSession, entity_id: UUID) -> ModelType | None:
        result = await session.execute(select(self.model).where(self.model.id == entity_id))
        return result.scalar_one_or_none()

    async def _get_or_raise(self, session: AsyncSession, entity_id: UUID) -> ModelType:
        entity = await self._get(session, entity_id)
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)
        return entity

    async def _find_one_by(self, session: AsyncSession, field: str, value: Any) -> ModelType | None:
        result = await session.execute(select(self.model).where(getattr(self.model, field) == value).limit(1))
        return result.scalar_one_or_none()

    async def _count(self, session: AsyncSession, *conditions, model: type[Base] | None = None) -> int:
        """Row count of `model` (defaults to this repository's record class)."""
        query = select(func.count()).select_from(model or self.model)
        if conditions:
            query = query.where(*conditions)
        return int((await session.execute(query)).scalar_one())

    async def _update_fields(self, session: AsyncSession, entity_id: UUID, values: dict[str, Any]) -> ModelType:
        """Load, assign, flush and refresh. Raises NotFoundError when the row is gone."""
        entity = await self._get_or_raise(session, entity_id)
        for key, value in values.items():
            setattr(entity, key, value)
        await session.flush()
        await session.refresh(entity)
        return entity

    async def _delete_entity(self, session: AsyncSession, entity_id: UUID) -> ModelType:
        entity = await self._get_or_raise(session, entity_id)
        await session.delete(entity)
        await session.flush()
        return entity

    # Notes:
    #   `flush()` + `refresh()` before returning: the caller gets `updated_at` and any
    #   column default as stored, and the record can be converted to a domain value
    #   after commit because sessions are created with expire_on_commit=False.

    def _apply_equals(self, query: Select, equals: dict[str, Any]) -> Select:
        """Add `column == value` for every non-None filter value."""
        for field, value in equals.items():
            if value is not None:
                query = query.where(getattr(self.model, field) == value)
        return query

    def _apply_order(
        self,
        query: Select,
        order_by: str | None,
        direction: str | None,
        default_field: str,
        default_direction: str = "asc",
    ) -> Select:
        """
        Order by `order_by` (falls back to `default_field`), then by id so pages are stable.

        Field names are restricted by the filter schemas (Literal types), so `getattr` is
        only ever called with a mapped column name.
        """
        column = getattr(self.model, order_by or default_field)
        if (direction or default_direction) == "desc":
            query = query.order_by(column.desc())
        else:
            query = query.order_by(column.asc())
        return query.order_by(self.model.id)

    @staticmethod
    def _apply_page(query: Select, limit: int | None, offset: int | None) -> Select:
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query

    @staticmethod
    def _changes(data, nullable: Iterable[str] = ()) -> dict[str, Any]:
        """
        Fields the caller actually set on a partial update input.

        An explicit `None` is kept only for nullable columns (e.g. clearing a cover
        photo); for every other column it means "leave unchanged".
        """
        nullable = set(nullable)
        values: dict[str, Any] = {}
        for field in data.model_fields_set:
            value = getattr(data, field)
            if value is None and field not in nullable:
                continue
            values[field] = value
        return values

    # =================================================================================================================
    # Sequential batches
    # =================================================================================================================

    async def _sequential(
        self,
        operation: str,
        ids: Sequence[UUID],
        step: Callable[[int, UUID], Awaitable[Result[Any, DomainError]]],
    ) -> Result[BatchOutcome, DomainError]:
        """
        Run `step(index, id)` for each id, one after the other, without stopping on failure.

        Returns:
            Success(BatchOutcome) when every step succeeded. Otherwise Failure of the first
            step error, with `details["succeeded"]`/`details["failed"]` listing ids, so the
            caller can reconcile the partial result. Completed steps are not undone.
        """
        succeeded: list[UUID] = []
        failed: dict[UUID, DomainError] = {}

        for index, entity_id in enumerate(ids):
            result = await step(index, entity_id)
            if isinstance(result, Failure):
                failed[entity_id] = result.error
            else:
                succeeded.append(entity_id)

        outcome = BatchOutcome(succeeded=tuple(succeeded), failed=failed)
        if outcome.ok:
            logger.info(
                f"repo.{operation}.success",
                extra={"model": self.entity_name, "operation": operation, "count": len(succeeded)},
            )
            return success(outcome)

        logger.warning(
            f"repo.{operation}.partial_failure",
            extra={"model": self.entity_name, "operation": operation, **outcome.summary()},
        )
        first_error = next(iter(failed.values()))
        first_error.details.update(outcome.summary())
        return failure(first_error)
