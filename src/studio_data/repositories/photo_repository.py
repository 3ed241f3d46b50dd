"""
Photo repository: photo rows plus their blobs in the object store.
"""

import logging
import time
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.result import Failure, Result, failure, is_failure, is_success, success, try_catch
from ..exceptions.base import DomainError, NotFoundError, StorageError, to_storage_error
from ..models import GalleryRecord, PhotoRecord
from ..models.enums import UploadStatus
from ..schemas import (
    BatchOutcome,
    MovePhotoInput,
    Photo,
    PhotoFile,
    PhotoFilters,
    UpdatePhotoInput,
    UploadPhotoInput,
    UploadProgress,
)
from ..storage.base import ObjectStore
from ..validators.file_validators import MAX_FILE_SIZE, sanitize_filename, validate_image_file
from ..validators.schemas import validate
from .base_repository import BaseRepository
from .interfaces import IPhotoRepository, ProgressCallback

logger = logging.getLogger(__name__)

THUMBNAIL_PREFIX = "thumbnails"


def build_storage_key(gallery_id: UUID, filename: str, now_ms: int | None = None) -> str:
    """`{gallery_id}/{epoch_ms}_{sanitized name}`"""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"{gallery_id}/{now_ms}_{sanitize_filename(filename)}"


class PhotoRepository(BaseRepository[PhotoRecord], IPhotoRepository):
    """
    Store-backed photo repository.

    A photo is two things: a blob in the object store (under `storage_key`) and a row
    in `photos`. They are written by separate calls, never atomically:

    - upload: blob first, then row; a failed row insert removes the blob again.
    - delete: row lookup, blob removal (failure logged, not fatal), row delete.
    """

    entity_name = "Photo"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        object_store: ObjectStore,
        *,
        photo_bucket: str = "photos",
        thumbnail_bucket: str = "thumbnails",
        signed_url_expires_in: int = 3600,
        max_upload_bytes: int = MAX_FILE_SIZE,
        allowed_mime_types: Sequence[str] | None = None,
    ):
        super().__init__(PhotoRecord, session_factory)
        self.object_store = object_store
        self.photo_bucket = photo_bucket
        self.thumbnail_bucket = thumbnail_bucket
        self.signed_url_expires_in = signed_url_expires_in
        self.max_upload_bytes = max_upload_bytes
        self.allowed_mime_types = tuple(allowed_mime_types) if allowed_mime_types else None

    # =================================================================================================================
    # Reads
    # =================================================================================================================

    async def find_by_id(self, photo_id: UUID) -> Result[Photo, DomainError]:
        async def work() -> Photo:
            async with self.transaction() as session:
                return Photo.model_validate(await self._get_or_raise(session, photo_id))

        return await self._run("find_by_id", work)

    async def _find(self, operation: str, criteria: PhotoFilters, default_order: str, default_direction: str):
        query = self._apply_equals(
            select(PhotoRecord), {"gallery_id": criteria.gallery_id, "is_published": criteria.is_published}
        )
        query = self._apply_order(query, criteria.order_by, criteria.order_direction, default_order, default_direction)
        query = self._apply_page(query, criteria.limit, criteria.offset)

        async def work() -> list[Photo]:
            async with self.transaction() as session:
                rows = await session.execute(query)
                return [Photo.model_validate(r) for r in rows.scalars().all()]

        return await self._run(operation, work)

    async def find_by_gallery(
        self, gallery_id: UUID, filters: PhotoFilters | dict | None = None
    ) -> Result[list[Photo], DomainError]:
        validated = validate(PhotoFilters, filters)
        if is_failure(validated):
            return validated
        criteria = validated.value.model_copy(update={"gallery_id": gallery_id})
        return await self._find("find_by_gallery", criteria, "display_order", "asc")

    async def find_all(self, filters: PhotoFilters | dict | None = None) -> Result[list[Photo], DomainError]:
        validated = validate(PhotoFilters, filters)
        if is_failure(validated):
            return validated
        return await self._find("find_all", validated.value, "uploaded_at", "desc")

    # =================================================================================================================
    # Upload
    # =================================================================================================================

    def _report(self, on_progress: ProgressCallback | None, progress: UploadProgress) -> None:
        """Progress is advisory: a failing callback never changes the upload outcome."""
        if on_progress is None:
            return
        try:
            on_progress(progress)
        except Exception:
            logger.warning(
                "photo.upload.progress_callback_failed",
                extra={"file_name": progress.file_name, "status": progress.status.value},
                exc_info=True,
            )

    async def upload(
        self,
        data: UploadPhotoInput | dict,
        file: PhotoFile | dict,
        on_progress: ProgressCallback | None = None,
    ) -> Result[Photo, DomainError]:
        """
        Store a new photo.

        Steps:
            1. validate the input, then the file (type, size, signature): no remote call
               is made when either fails
            2. check the target gallery exists
            3. upload the blob under a fresh storage key and resolve its public URL
            4. insert the row (width/height 0 until enrichment, thumbnail = photo URL)

        Args:
            data: Upload input (gallery id, title, ...).
            file: The file content and declared mime type, as a `PhotoFile` or a mapping
                with `filename`, `content` and `content_type`.
            on_progress: Optional callback receiving `UploadProgress` snapshots.

        Returns:
            Success(Photo), or Failure(ValidationError | FileUploadError | NotFoundError |
            StorageError | DatabaseError).
        """
        validated = validate(UploadPhotoInput, data)
        if is_failure(validated):
            return validated
        payload = validated.value

        parsed = validate(PhotoFile, file)
        if is_failure(parsed):
            return parsed
        file = parsed.value

        checked = validate_image_file(file, max_size=self.max_upload_bytes, allowed_types=self.allowed_mime_types)
        if is_failure(checked):
            logger.info(
                "photo.upload.rejected",
                extra={"file_name": file.filename, "reason": checked.error.reason, "size": file.size},
            )
            return checked

        def progress(status: UploadStatus, sent: int, photo_id: UUID | None = None) -> None:
            self._report(
                on_progress,
                UploadProgress(
                    photo_id=photo_id, file_name=file.filename, bytes_uploaded=sent, total_bytes=file.size, status=status
                ),
            )

        progress(UploadStatus.PENDING, 0)

        async def check_gallery() -> None:
            async with self.transaction() as session:
                if await session.get(GalleryRecord, payload.gallery_id) is None:
                    raise NotFoundError("Gallery", payload.gallery_id)

        gallery_check = await self._run("upload", check_gallery)
        if is_failure(gallery_check):
            progress(UploadStatus.FAILED, 0)
            return gallery_check

        storage_key = build_storage_key(payload.gallery_id, file.filename)
        progress(UploadStatus.UPLOADING, 0)

        async def store_blob() -> str:
            await self.object_store.upload(self.photo_bucket, storage_key, file.content, file.content_type, upsert=False)
            return await self.object_store.get_public_url(self.photo_bucket, storage_key)

        stored = await self._run("upload", store_blob, to_storage_error("upload", "Failed to store photo"))
        if is_failure(stored):
            progress(UploadStatus.FAILED, 0)
            return stored
        url = stored.value

        progress(UploadStatus.PROCESSING, file.size)

        async def insert_row() -> Photo:
            async with self.transaction() as session:
                record = PhotoRecord(
                    gallery_id=payload.gallery_id,
                    title=payload.title,
                    description=payload.description,
                    url=url,
                    thumbnail_url=url,
                    storage_key=storage_key,
                    width=0,
                    height=0,
                    file_size=file.size,
                    mime_type=file.content_type,
                    display_order=payload.display_order,
                    is_published=payload.is_published,
                    metadata_=payload.metadata.to_storage(),
                )
                session.add(record)
                await session.flush()
                await session.refresh(record)
                return Photo.model_validate(record)

        inserted = await self._run("upload", insert_row)
        if is_failure(inserted):
            progress(UploadStatus.FAILED, file.size)
            await self._remove_blob(storage_key, reason="upload_rollback")
            return inserted

        photo = inserted.value
        progress(UploadStatus.COMPLETED, file.size, photo.id)
        logger.info(
            "photo.upload.success",
            extra={"photo_id": str(photo.id), "gallery_id": str(payload.gallery_id), "size": file.size},
        )
        return inserted

    async def _remove_blob(self, storage_key: str, reason: str) -> StorageError | None:
        """Best-effort blob removal; returns the error instead of raising it."""
        try:
            await self.object_store.remove(self.photo_bucket, [storage_key])
        except Exception as exc:
            error = to_storage_error("delete", "Failed to remove object")(exc)
            logger.warning(
                "photo.delete.storage_failed",
                extra={"storage_key": storage_key, "reason": reason, "error": error.message},
            )
            return error
        return None

    # =================================================================================================================
    # Updates
    # =================================================================================================================

    async def update(self, photo_id: UUID, data: UpdatePhotoInput | dict) -> Result[Photo, DomainError]:
        """Partial update; `metadata` keys are merged into what is stored."""
        validated = validate(UpdatePhotoInput, data)
        if is_failure(validated):
            return validated
        payload = validated.value
        values = self._changes(payload, nullable=("description",))
        new_metadata = values.pop("metadata", None)

        async def work() -> Photo:
            async with self.transaction() as session:
                if new_metadata is not None:
                    record = await self._get_or_raise(session, photo_id)
                    values["metadata_"] = {**(record.metadata_ or {}), **payload.metadata.to_storage()}
                record = await self._update_fields(session, photo_id, values)
                return Photo.model_validate(record)

        return await self._run("update", work)

    async def move(self, data: MovePhotoInput | dict) -> Result[Photo, DomainError]:
        """
        Point the photo at another gallery, optionally with a new display_order.

        Neither gallery's photo_count changes here; call `update_photo_count` on both.
        """
        validated = validate(MovePhotoInput, data)
        if is_failure(validated):
            return validated
        payload = validated.value

        values = {"gallery_id": payload.target_gallery_id}
        if payload.display_order is not None:
            values["display_order"] = payload.display_order

        async def work() -> Photo:
            async with self.transaction() as session:
                if await session.get(GalleryRecord, payload.target_gallery_id) is None:
                    raise NotFoundError("Gallery", payload.target_gallery_id)
                record = await self._update_fields(session, payload.photo_id, values)
                logger.info(
                    "photo.move.success",
                    extra={"photo_id": str(payload.photo_id), "target_gallery_id": str(payload.target_gallery_id)},
                )
                return Photo.model_validate(record)

        return await self._run("move", work)

    async def reorder(self, gallery_id: UUID, photo_ids: Sequence[UUID]) -> Result[BatchOutcome, DomainError]:
        """display_order = position, one write per photo; ids outside the gallery fail with NotFound."""

        async def step(index: int, photo_id: UUID):
            async def work() -> None:
                async with self.transaction() as session:
                    record = await self._get(session, photo_id)
                    if record is None or record.gallery_id != gallery_id:
                        raise NotFoundError(self.entity_name, photo_id)
                    record.display_order = index
                    await session.flush()

            return await self._run("reorder_item", work)

        return await self._sequential("reorder", list(photo_ids), step)

    # =================================================================================================================
    # Deletes
    # =================================================================================================================

    async def _delete_one(self, photo_id: UUID) -> Result[StorageError | None, DomainError]:
        """
        Lookup, blob removal, row delete.

        Returns:
            Success(None) when both went through, Success(StorageError) when only the
            row was deleted, Failure when the row could not be found or deleted.
        """
        async def lookup() -> str:
            async with self.transaction() as session:
                return (await self._get_or_raise(session, photo_id)).storage_key

        key = await self._run("delete", lookup)
        if is_failure(key):
            return key

        storage_error = await self._remove_blob(key.value, reason="delete")

        async def remove_row() -> None:
            async with self.transaction() as session:
                await self._delete_entity(session, photo_id)

        removed = await self._run("delete", remove_row)
        if is_failure(removed):
            return removed

        logger.info(
            "photo.delete.success",
            extra={"photo_id": str(photo_id), "storage_removed": storage_error is None},
        )
        return success(storage_error)

    async def delete(self, photo_id: UUID) -> Result[None, DomainError]:
        """The row delete is authoritative: a blob that could not be removed is only logged."""
        result = await self._delete_one(photo_id)
        if isinstance(result, Failure):
            return result
        return success(None)

    async def delete_batch(self, photo_ids: Sequence[UUID]) -> Result[BatchOutcome, DomainError]:
        """
        Delete each photo in turn, continuing past failures.

        Unlike `delete`, a blob that could not be removed counts as a failure for that id
        (its row is still gone), so the caller can see the orphaned object.
        """

        async def step(index: int, photo_id: UUID):
            result = await self._delete_one(photo_id)
            if isinstance(result, Failure):
                return result
            if result.value is not None:
                return failure(result.value)
            return success(None)

        return await self._sequential("delete_batch", list(photo_ids), step)

    # =================================================================================================================
    # URLs
    # =================================================================================================================

    async def get_photo_url(self, storage_key: str, expires_in: int | None = None) -> Result[str, DomainError]:
        async def work() -> str:
            return await self.object_store.create_signed_url(
                self.photo_bucket, storage_key, expires_in or self.signed_url_expires_in
            )

        return await self._run("get_photo_url", work, to_storage_error("download", "Failed to sign photo URL"))

    async def get_thumbnail_url(self, storage_key: str, expires_in: int | None = None) -> Result[str, DomainError]:
        """Signed URL of `thumbnails/<key>` in the thumbnail bucket, or of the photo itself when there is none."""

        async def work() -> str:
            return await self.object_store.create_signed_url(
                self.thumbnail_bucket, f"{THUMBNAIL_PREFIX}/{storage_key}", expires_in or self.signed_url_expires_in
            )

        thumbnail = await try_catch(work)
        if is_success(thumbnail):
            return thumbnail

        logger.debug("photo.thumbnail.fallback", extra={"storage_key": storage_key})
        return await self.get_photo_url(storage_key, expires_in)
