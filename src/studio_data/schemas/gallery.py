from typing import Literal
from uuid import UUID

from pydantic import Field

from ..models.enums import GalleryCategory
from .common import DomainModel, InputModel, PageFilters, UtcDatetime

SLUG_PATTERN = r"^[a-z0-9-]+$"

GalleryOrderField = Literal["display_order", "title", "slug", "created_at", "updated_at", "photo_count"]


# =================================================================================================================
# Domain values
# =================================================================================================================

class Gallery(DomainModel):
    id: UUID
    title: str
    slug: str
    description: str
    category: GalleryCategory
    cover_photo_id: UUID | None = None
    display_order: int
    is_published: bool
    photo_count: int
    created_at: UtcDatetime
    updated_at: UtcDatetime


class GalleryPhoto(DomainModel):
    """The slice of a photo a gallery page needs."""
    id: UUID
    url: str
    thumbnail_url: str
    title: str
    display_order: int


class GalleryWithPhotos(Gallery):
    photos: list[GalleryPhoto] = Field(default_factory=list)


class GallerySummary(DomainModel):
    id: UUID
    title: str
    slug: str
    category: GalleryCategory
    cover_photo_url: str | None = None
    photo_count: int
    is_published: bool


# =================================================================================================================
# Inputs
# =================================================================================================================

class CreateGalleryInput(InputModel):
    title: str = Field(min_length=1, max_length=200)
    slug: str = Field(min_length=1, max_length=200, pattern=SLUG_PATTERN)
    description: str = Field(default="", max_length=1000)
    category: GalleryCategory
    display_order: int = Field(default=0, ge=0)
    is_published: bool = False


class UpdateGalleryInput(InputModel):
    """Partial update: only fields explicitly set are written (see `model_fields_set`)."""
    title: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = Field(default=None, min_length=1, max_length=200, pattern=SLUG_PATTERN)
    description: str | None = Field(default=None, max_length=1000)
    category: GalleryCategory | None = None
    cover_photo_id: UUID | None = None
    display_order: int | None = Field(default=None, ge=0)
    is_published: bool | None = None


class GalleryFilters(PageFilters):
    category: GalleryCategory | None = None
    is_published: bool | None = None
    order_by: GalleryOrderField | None = None
