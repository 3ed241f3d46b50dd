"""
Gallery repository for gallery-specific store operations.

GalleryRepository extends BaseRepository with slug lookups and slug checks,
summaries for listing pages, ordering, and the photo_count refresh.
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.result import Result, is_failure, success
from ..exceptions.base import ConflictError, DomainError, NotFoundError, to_storage_error
from ..models import GalleryRecord, PhotoRecord
from ..models.enums import GalleryCategory
from ..schemas import (
    BatchOutcome,
    CreateGalleryInput,
    Gallery,
    GalleryFilters,
    GalleryPhoto,
    GallerySummary,
    GalleryWithPhotos,
    UpdateGalleryInput,
)
from ..storage.base import ObjectStore
from ..validators.schemas import validate
from .base_repository import BaseRepository
from .interfaces import IGalleryRepository

logger = logging.getLogger(__name__)


class GalleryRepository(BaseRepository[GalleryRecord], IGalleryRepository):
    """
    Store-backed gallery repository.

    Slug uniqueness is enforced by the unique index on `galleries.slug`; the
    `is_slug_available` check in `create`/`update` only saves a round trip in the
    common case and produces the same `ConflictError(field="slug")`.
    """

    entity_name = "Gallery"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        object_store: ObjectStore | None = None,
        photo_bucket: str = "photos",
    ):
        super().__init__(GalleryRecord, session_factory)
        # only used to remove blobs when a gallery is deleted together with its photos
        self.object_store = object_store
        self.photo_bucket = photo_bucket

    # =================================================================================================================
    # Reads
    # =================================================================================================================

    async def find_by_id(self, gallery_id: UUID) -> Result[Gallery, DomainError]:
        async def work() -> Gallery:
            async with self.transaction() as session:
                return Gallery.model_validate(await self._get_or_raise(session, gallery_id))

        return await self._run("find_by_id", work)

    async def find_by_slug(self, slug: str) -> Result[Gallery, DomainError]:
        async def work() -> Gallery:
            async with self.transaction() as session:
                record = await self._find_one_by(session, "slug", slug)
                if record is None:
                    raise NotFoundError(self.entity_name, slug)
                return Gallery.model_validate(record)

        return await self._run("find_by_slug", work)

    async def find_by_id_with_photos(self, gallery_id: UUID) -> Result[GalleryWithPhotos, DomainError]:
        async def work() -> GalleryWithPhotos:
            async with self.transaction() as session:
                record = await self._get_or_raise(session, gallery_id)
                rows = await session.execute(
                    select(PhotoRecord)
                    .where(PhotoRecord.gallery_id == gallery_id)
                    .order_by(PhotoRecord.display_order.asc(), PhotoRecord.id)
                )
                photos = [GalleryPhoto.model_validate(photo) for photo in rows.scalars().all()]
                return GalleryWithPhotos(**Gallery.model_validate(record).model_dump(), photos=photos)

        return await self._run("find_by_id_with_photos", work)

    def _filtered_query(self, query, filters: GalleryFilters):
        query = self._apply_equals(query, {"category": filters.category, "is_published": filters.is_published})
        query = self._apply_order(query, filters.order_by, filters.order_direction, default_field="display_order")
        return self._apply_page(query, filters.limit, filters.offset)

    async def find_all(self, filters: GalleryFilters | dict | None = None) -> Result[list[Gallery], DomainError]:
        validated = validate(GalleryFilters, filters)
        if is_failure(validated):
            return validated
        criteria = validated.value

        async def work() -> list[Gallery]:
            async with self.transaction() as session:
                rows = await session.execute(self._filtered_query(select(GalleryRecord), criteria))
                return [Gallery.model_validate(r) for r in rows.scalars().all()]

        return await self._run("find_all", work)

    async def find_all_summaries(
        self, filters: GalleryFilters | dict | None = None
    ) -> Result[list[GallerySummary], DomainError]:
        validated = validate(GalleryFilters, filters)
        if is_failure(validated):
            return validated
        criteria = validated.value

        async def work() -> list[GallerySummary]:
            # cover_photo_id is a weak reference: outer join, a missing photo yields a null URL
            query = select(GalleryRecord, PhotoRecord.url).outerjoin(
                PhotoRecord, PhotoRecord.id == GalleryRecord.cover_photo_id
            )
            async with self.transaction() as session:
                rows = await session.execute(self._filtered_query(query, criteria))
                return [
                    GallerySummary(
                        id=record.id,
                        title=record.title,
                        slug=record.slug,
                        category=record.category,
                        cover_photo_url=cover_url,
                        photo_count=record.photo_count,
                        is_published=record.is_published,
                    )
                    for record, cover_url in rows.all()
                ]

        return await self._run("find_all_summaries", work)

    async def find_by_category(self, category: GalleryCategory | str) -> Result[list[Gallery], DomainError]:
        return await self.find_all({"category": category, "is_published": True})

    # =================================================================================================================
    # Writes
    # =================================================================================================================

    async def _slug_taken(self, session: AsyncSession, slug: str, exclude_id: UUID | None = None) -> bool:
        query = select(GalleryRecord.id).where(GalleryRecord.slug == slug)
        if exclude_id is not None:
            query = query.where(GalleryRecord.id != exclude_id)
        return (await session.execute(query.limit(1))).first() is not None

    def _slug_conflict(self, slug: str) -> ConflictError:
        return ConflictError(f"Gallery with slug '{slug}' already exists", field="slug")

    async def create(self, data: CreateGalleryInput | dict) -> Result[Gallery, DomainError]:
        """
        Validate, check the slug, insert with photo_count 0.

        Returns:
            Success(Gallery) or Failure(ValidationError | ConflictError | DatabaseError).
            A conflict found by the pre-check issues no insert.
        """
        validated = validate(CreateGalleryInput, data)
        if is_failure(validated):
            return validated
        payload = validated.value

        async def work() -> Gallery:
            async with self.transaction() as session:
                if await self._slug_taken(session, payload.slug):
                    raise self._slug_conflict(payload.slug)

                record = GalleryRecord(**payload.model_dump(), photo_count=0)
                session.add(record)
                await session.flush()
                await session.refresh(record)

                logger.info("gallery.create.success", extra={"gallery_id": str(record.id), "slug": record.slug})
                return Gallery.model_validate(record)

        return await self._run("create", work)

    async def update(self, gallery_id: UUID, data: UpdateGalleryInput | dict) -> Result[Gallery, DomainError]:
        validated = validate(UpdateGalleryInput, data)
        if is_failure(validated):
            return validated
        values = self._changes(validated.value, nullable=("cover_photo_id",))

        async def work() -> Gallery:
            async with self.transaction() as session:
                if "slug" in values and await self._slug_taken(session, values["slug"], exclude_id=gallery_id):
                    raise self._slug_conflict(values["slug"])
                record = await self._update_fields(session, gallery_id, values)
                return Gallery.model_validate(record)

        return await self._run("update", work)

    async def delete(self, gallery_id: UUID, delete_photos: bool = False) -> Result[None, DomainError]:
        """
        Delete a gallery.

        Args:
            delete_photos: True deletes the owned photo rows in the same transaction and
                then removes their blobs (best effort, failures are logged). False keeps
                the photo rows and detaches them (`gallery_id` set to NULL); their blobs
                stay in the object store.

        Returns:
            Success(None), or Failure(NotFoundError) when the gallery does not exist.
        """
        async def work() -> list[str]:
            async with self.transaction() as session:
                await self._get_or_raise(session, gallery_id)
                owned = PhotoRecord.gallery_id == gallery_id

                storage_keys: list[str] = []
                if delete_photos:
                    storage_keys = list((await session.execute(select(PhotoRecord.storage_key).where(owned))).scalars())
                    await session.execute(delete(PhotoRecord).where(owned))
                else:
                    await session.execute(update(PhotoRecord).where(owned).values(gallery_id=None))

                await session.execute(delete(GalleryRecord).where(GalleryRecord.id == gallery_id))
                logger.info(
                    "gallery.delete.success",
                    extra={"gallery_id": str(gallery_id), "delete_photos": delete_photos, "photos": len(storage_keys)},
                )
                return storage_keys

        result = await self._run("delete", work)
        if is_failure(result):
            return result

        if result.value and self.object_store is not None:
            try:
                await self.object_store.remove(self.photo_bucket, result.value)
            except Exception as exc:
                error = to_storage_error("delete", "Failed to remove objects")(exc)
                logger.warning(
                    "gallery.delete.storage_failed",
                    extra={"gallery_id": str(gallery_id), "keys": len(result.value), "error": error.message},
                    exc_info=exc,
                )
        return success(None)

    async def is_slug_available(self, slug: str, exclude_id: UUID | None = None) -> Result[bool, DomainError]:
        async def work() -> bool:
            async with self.transaction() as session:
                return not await self._slug_taken(session, slug, exclude_id)

        return await self._run("is_slug_available", work)

    async def update_photo_count(self, gallery_id: UUID) -> Result[Gallery, DomainError]:
        """
        Recount the photos owned by the gallery and store the number.

        Not called automatically: after an upload, move or delete the caller refreshes
        every gallery involved.
        """
        async def work() -> Gallery:
            async with self.transaction() as session:
                count = await self._count(session, PhotoRecord.gallery_id == gallery_id, model=PhotoRecord)
                record = await self._update_fields(session, gallery_id, {"photo_count": count})
                logger.debug("gallery.photo_count.updated", extra={"gallery_id": str(gallery_id), "count": count})
                return Gallery.model_validate(record)

        return await self._run("update_photo_count", work)

    async def reorder(self, gallery_ids: Sequence[UUID]) -> Result[BatchOutcome, DomainError]:
        """Set display_order to each id's position, one independent write per id."""

        async def step(index: int, gallery_id: UUID):
            async def work() -> None:
                async with self.transaction() as session:
                    await self._update_fields(session, gallery_id, {"display_order": index})

            return await self._run("reorder_item", work)

        return await self._sequential("reorder", list(gallery_ids), step)
