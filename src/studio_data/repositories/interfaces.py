"""
Repository contracts consumed by presentation code.

Every method is a coroutine returning `Result[T, DomainError]`; none of them raises.
Presentation code depends on these ABCs only, never on the store-backed classes.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Sequence
from uuid import UUID

from ..core.result import Result
from ..exceptions.base import DomainError
from ..models.enums import GalleryCategory, InquiryStatus, InquiryType
from ..schemas import (
    BatchOutcome,
    CreateGalleryInput,
    CreateInquiryInput,
    Gallery,
    GalleryFilters,
    GallerySummary,
    GalleryWithPhotos,
    Inquiry,
    InquiryFilters,
    InquiryStats,
    MovePhotoInput,
    Photo,
    PhotoFile,
    PhotoFilters,
    UpdateGalleryInput,
    UpdateInquiryInput,
    UpdatePhotoInput,
    UploadPhotoInput,
    UploadProgress,
)

ProgressCallback = Callable[[UploadProgress], None]


class IGalleryRepository(ABC):
    @abstractmethod
    async def find_by_id(self, gallery_id: UUID) -> Result[Gallery, DomainError]: ...

    @abstractmethod
    async def find_by_slug(self, slug: str) -> Result[Gallery, DomainError]: ...

    @abstractmethod
    async def find_by_id_with_photos(self, gallery_id: UUID) -> Result[GalleryWithPhotos, DomainError]:
        """Gallery plus its photos ordered by display_order ascending."""

    @abstractmethod
    async def find_all(self, filters: GalleryFilters | dict | None = None) -> Result[list[Gallery], DomainError]: ...

    @abstractmethod
    async def find_all_summaries(
        self, filters: GalleryFilters | dict | None = None
    ) -> Result[list[GallerySummary], DomainError]: ...

    @abstractmethod
    async def find_by_category(self, category: GalleryCategory | str) -> Result[list[Gallery], DomainError]:
        """Published galleries of one category."""

    @abstractmethod
    async def create(self, data: CreateGalleryInput | dict) -> Result[Gallery, DomainError]: ...

    @abstractmethod
    async def update(self, gallery_id: UUID, data: UpdateGalleryInput | dict) -> Result[Gallery, DomainError]: ...

    @abstractmethod
    async def delete(self, gallery_id: UUID, delete_photos: bool = False) -> Result[None, DomainError]: ...

    @abstractmethod
    async def is_slug_available(self, slug: str, exclude_id: UUID | None = None) -> Result[bool, DomainError]: ...

    @abstractmethod
    async def update_photo_count(self, gallery_id: UUID) -> Result[Gallery, DomainError]: ...

    @abstractmethod
    async def reorder(self, gallery_ids: Sequence[UUID]) -> Result[BatchOutcome, DomainError]: ...


class IPhotoRepository(ABC):
    @abstractmethod
    async def find_by_id(self, photo_id: UUID) -> Result[Photo, DomainError]: ...

    @abstractmethod
    async def find_by_gallery(
        self, gallery_id: UUID, filters: PhotoFilters | dict | None = None
    ) -> Result[list[Photo], DomainError]: ...

    @abstractmethod
    async def find_all(self, filters: PhotoFilters | dict | None = None) -> Result[list[Photo], DomainError]: ...

    @abstractmethod
    async def upload(
        self,
        data: UploadPhotoInput | dict,
        file: PhotoFile | dict,
        on_progress: ProgressCallback | None = None,
    ) -> Result[Photo, DomainError]: ...

    @abstractmethod
    async def update(self, photo_id: UUID, data: UpdatePhotoInput | dict) -> Result[Photo, DomainError]: ...

    @abstractmethod
    async def move(self, data: MovePhotoInput | dict) -> Result[Photo, DomainError]:
        """Reassign a photo; gallery photo counts are left for `update_photo_count`."""

    @abstractmethod
    async def delete(self, photo_id: UUID) -> Result[None, DomainError]: ...

    @abstractmethod
    async def delete_batch(self, photo_ids: Sequence[UUID]) -> Result[BatchOutcome, DomainError]: ...

    @abstractmethod
    async def reorder(self, gallery_id: UUID, photo_ids: Sequence[UUID]) -> Result[BatchOutcome, DomainError]: ...

    @abstractmethod
    async def get_photo_url(self, storage_key: str, expires_in: int | None = None) -> Result[str, DomainError]: ...

    @abstractmethod
    async def get_thumbnail_url(self, storage_key: str, expires_in: int | None = None) -> Result[str, DomainError]: ...


class IInquiryRepository(ABC):
    @abstractmethod
    async def find_by_id(self, inquiry_id: UUID) -> Result[Inquiry, DomainError]: ...

    @abstractmethod
    async def find_all(self, filters: InquiryFilters | dict | None = None) -> Result[list[Inquiry], DomainError]: ...

    @abstractmethod
    async def find_by_status(self, status: InquiryStatus | str) -> Result[list[Inquiry], DomainError]: ...

    @abstractmethod
    async def find_by_type(self, inquiry_type: InquiryType | str) -> Result[list[Inquiry], DomainError]: ...

    @abstractmethod
    async def create(self, data: CreateInquiryInput | dict) -> Result[Inquiry, DomainError]: ...

    @abstractmethod
    async def update(self, inquiry_id: UUID, data: UpdateInquiryInput | dict) -> Result[Inquiry, DomainError]: ...

    @abstractmethod
    async def mark_as_read(self, inquiry_id: UUID) -> Result[Inquiry, DomainError]: ...

    @abstractmethod
    async def mark_as_spam(self, inquiry_id: UUID) -> Result[Inquiry, DomainError]: ...

    @abstractmethod
    async def delete(self, inquiry_id: UUID) -> Result[None, DomainError]: ...

    @abstractmethod
    async def get_stats(self, now: datetime | None = None) -> Result[InquiryStats, DomainError]: ...

    @abstractmethod
    async def search(self, query: str) -> Result[list[Inquiry], DomainError]:
        """Case-insensitive substring match over name, email, subject and message."""
