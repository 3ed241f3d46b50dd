"""
Inquiry repository for contact and booking requests.

InquiryRepository extends BaseRepository with status and type filters, free-text
search, triage updates that stamp response and resolution times, and stats.
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.result import Result, is_failure, success
from ..exceptions.base import DomainError
from ..models import InquiryRecord
from ..models.enums import InquiryStatus, InquiryType
from ..schemas import (
    CreateInquiryInput,
    Inquiry,
    InquiryFilters,
    InquiryStats,
    UpdateInquiryInput,
    ensure_utc,
)
from ..validators.schemas import validate
from .base_repository import BaseRepository
from .interfaces import IInquiryRepository

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "email", "subject", "message")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class InquiryRepository(BaseRepository[InquiryRecord], IInquiryRepository):
    """
    Store-backed inquiry repository.

    Creating an inquiry only guarantees the row exists; sending the notification
    email is somebody else's job.
    """

    entity_name = "Inquiry"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(InquiryRecord, session_factory)

    async def _list(self, operation: str, query) -> Result[list[Inquiry], DomainError]:
        async def work() -> list[Inquiry]:
            async with self.transaction() as session:
                rows = await session.execute(query)
                return [Inquiry.model_validate(r) for r in rows.scalars().all()]

        return await self._run(operation, work)

    # =================================================================================================================
    # Reads
    # =================================================================================================================

    async def find_by_id(self, inquiry_id: UUID) -> Result[Inquiry, DomainError]:
        async def work() -> Inquiry:
            async with self.transaction() as session:
                return Inquiry.model_validate(await self._get_or_raise(session, inquiry_id))

        return await self._run("find_by_id", work)

    async def find_all(self, filters: InquiryFilters | dict | None = None) -> Result[list[Inquiry], DomainError]:
        """
        Filter by status/type/source and a submitted_at range (both bounds inclusive).
        Newest first unless `order_by`/`order_direction` say otherwise.
        """
        validated = validate(InquiryFilters, filters)
        if is_failure(validated):
            return validated
        criteria = validated.value

        query = self._apply_equals(
            select(InquiryRecord),
            {"status": criteria.status, "inquiry_type": criteria.inquiry_type, "source": criteria.source},
        )
        if criteria.date_from is not None:
            query = query.where(InquiryRecord.submitted_at >= criteria.date_from)
        if criteria.date_to is not None:
            query = query.where(InquiryRecord.submitted_at <= criteria.date_to)
        query = self._apply_order(query, criteria.order_by, criteria.order_direction, "submitted_at", "desc")
        query = self._apply_page(query, criteria.limit, criteria.offset)

        return await self._list("find_all", query)

    async def find_by_status(self, status: InquiryStatus | str) -> Result[list[Inquiry], DomainError]:
        return await self.find_all({"status": status})

    async def find_by_type(self, inquiry_type: InquiryType | str) -> Result[list[Inquiry], DomainError]:
        return await self.find_all({"inquiry_type": inquiry_type})

    async def search(self, query: str) -> Result[list[Inquiry], DomainError]:
        term = (query or "").strip()
        statement = select(InquiryRecord)
        if term:
            pattern = f"%{_escape_like(term)}%"
            statement = statement.where(
                or_(*(getattr(InquiryRecord, field).ilike(pattern, escape="\\") for field in SEARCH_FIELDS))
            )
        statement = statement.order_by(InquiryRecord.submitted_at.desc(), InquiryRecord.id)
        return await self._list("search", statement)

    # =================================================================================================================
    # Writes
    # =================================================================================================================

    async def create(self, data: CreateInquiryInput | dict) -> Result[Inquiry, DomainError]:
        validated = validate(CreateInquiryInput, data)
        if is_failure(validated):
            return validated
        payload = validated.value

        async def work() -> Inquiry:
            async with self.transaction() as session:
                record = InquiryRecord(
                    name=payload.name,
                    email=str(payload.email),
                    phone=payload.phone,
                    subject=payload.subject,
                    message=payload.message,
                    inquiry_type=payload.inquiry_type,
                    status=InquiryStatus.NEW,
                    source=payload.source,
                    metadata_=payload.metadata.to_storage(),
                )
                session.add(record)
                await session.flush()
                await session.refresh(record)
                logger.info(
                    "inquiry.create.success",
                    extra={"inquiry_id": str(record.id), "inquiry_type": record.inquiry_type.value},
                )
                return Inquiry.model_validate(record)

        return await self._run("create", work)

    async def update(self, inquiry_id: UUID, data: UpdateInquiryInput | dict) -> Result[Inquiry, DomainError]:
        """
        Status/timestamp bookkeeping.

        Moving to `responded` or `resolved` without an explicit timestamp stamps
        `responded_at`/`resolved_at` with the current time, unless one is already stored.
        An explicit `None` clears a timestamp. No transition is refused.
        """
        validated = validate(UpdateInquiryInput, data)
        if is_failure(validated):
            return validated
        values = self._changes(validated.value, nullable=("responded_at", "resolved_at"))

        async def work() -> Inquiry:
            async with self.transaction() as session:
                record = await self._get_or_raise(session, inquiry_id)
                now = datetime.now(timezone.utc)
                status = values.get("status")
                if status == InquiryStatus.RESPONDED and "responded_at" not in values and record.responded_at is None:
                    values["responded_at"] = now
                if status == InquiryStatus.RESOLVED and "resolved_at" not in values and record.resolved_at is None:
                    values["resolved_at"] = now
                record = await self._update_fields(session, inquiry_id, values)
                return Inquiry.model_validate(record)

        return await self._run("update", work)

    async def mark_as_read(self, inquiry_id: UUID) -> Result[Inquiry, DomainError]:
        return await self.update(inquiry_id, {"status": InquiryStatus.READ})

    async def mark_as_spam(self, inquiry_id: UUID) -> Result[Inquiry, DomainError]:
        return await self.update(inquiry_id, {"status": InquiryStatus.SPAM})

    async def delete(self, inquiry_id: UUID) -> Result[None, DomainError]:
        async def work() -> None:
            async with self.transaction() as session:
                await self._delete_entity(session, inquiry_id)

        return await self._run("delete", work)

    # =================================================================================================================
    # Stats
    # =================================================================================================================

    async def get_stats(self, now: datetime | None = None) -> Result[InquiryStats, DomainError]:
        """
        Counts computed in one pass over all rows.

        Windows start at UTC midnight of `now` (today), 7 days before that (week) and
        30 days before that (month). `average_response_time` is in hours over the
        inquiries that have a `responded_at`.
        """
        now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        week_start = today - timedelta(days=7)
        month_start = today - timedelta(days=30)

        async def load() -> list[Inquiry]:
            async with self.transaction() as session:
                rows = await session.execute(select(InquiryRecord))
                return [Inquiry.model_validate(r) for r in rows.scalars().all()]

        loaded = await self._run("get_stats", load)
        if is_failure(loaded):
            return loaded

        by_status = {status: 0 for status in InquiryStatus}
        by_type = {kind: 0 for kind in InquiryType}
        today_count = week_count = month_count = 0
        response_hours: list[float] = []

        for inquiry in loaded.value:
            by_status[inquiry.status] += 1
            by_type[inquiry.inquiry_type] += 1
            if inquiry.submitted_at >= today:
                today_count += 1
            if inquiry.submitted_at >= week_start:
                week_count += 1
            if inquiry.submitted_at >= month_start:
                month_count += 1
            if inquiry.responded_at is not None:
                response_hours.append((inquiry.responded_at - inquiry.submitted_at).total_seconds() / 3600)

        average = round(sum(response_hours) / len(response_hours), 2) if response_hours else None

        return success(
            InquiryStats(
                total=len(loaded.value),
                by_status=by_status,
                by_type=by_type,
                average_response_time=average,
                today_count=today_count,
                week_count=week_count,
                month_count=month_count,
            )
        )
