from datetime import datetime
from typing import Annotated, Literal
from uuid import UUID

from pydantic import AliasChoices, Field, StringConstraints, computed_field

from ..models.enums import UploadStatus
from .common import DomainModel, InputModel, PageFilters, UtcDatetime

PhotoOrderField = Literal["display_order", "uploaded_at", "updated_at", "title", "file_size"]


class PhotoMetadata(InputModel):
    """EXIF and custom data; stored as a JSON object on the photo row."""
    camera: str | None = None
    lens: str | None = None
    focal_length: str | None = None
    aperture: str | None = None
    shutter_speed: str | None = None
    iso: int | None = Field(default=None, ge=0, le=409600)
    captured_at: datetime | None = None
    location: str | None = Field(default=None, max_length=200)
    tags: list[Annotated[str, StringConstraints(max_length=50)]] | None = Field(default=None, max_length=20)
    alt_text: str | None = Field(default=None, max_length=200)

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class Photo(DomainModel):
    id: UUID
    gallery_id: UUID | None
    title: str
    description: str | None = None
    url: str
    thumbnail_url: str
    storage_key: str
    width: int
    height: int
    file_size: int
    mime_type: str
    display_order: int
    is_published: bool
    # the ORM attribute is `metadata_`
    metadata: PhotoMetadata = Field(
        default_factory=PhotoMetadata, validation_alias=AliasChoices("metadata_", "metadata")
    )
    uploaded_at: UtcDatetime
    updated_at: UtcDatetime


class PhotoFile(DomainModel):
    """An in-memory file handed to `upload`."""
    filename: str
    content: bytes
    content_type: str

    @computed_field
    @property
    def size(self) -> int:
        return len(self.content)


class UploadProgress(DomainModel):
    photo_id: UUID | None = None
    file_name: str
    bytes_uploaded: int
    total_bytes: int
    status: UploadStatus

    @computed_field
    @property
    def percentage(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return round(self.bytes_uploaded * 100 / self.total_bytes, 2)


# =================================================================================================================
# Inputs
# =================================================================================================================

class UploadPhotoInput(InputModel):
    gallery_id: UUID
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    display_order: int = Field(default=0, ge=0)
    is_published: bool = False
    metadata: PhotoMetadata = Field(default_factory=PhotoMetadata)


class UpdatePhotoInput(InputModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    display_order: int | None = Field(default=None, ge=0)
    is_published: bool | None = None
    # merged into the stored metadata, keys not given are kept
    metadata: PhotoMetadata | None = None


class MovePhotoInput(InputModel):
    photo_id: UUID
    target_gallery_id: UUID
    display_order: int | None = Field(default=None, ge=0)


class PhotoFilters(PageFilters):
    gallery_id: UUID | None = None
    is_published: bool | None = None
    order_by: PhotoOrderField | None = None
