from ..models.enums import (
    GalleryCategory,
    ImageFormat,
    InquirySource,
    InquiryStatus,
    InquiryType,
    UploadStatus,
)
from .common import BatchOutcome, DomainModel, InputModel, OrderDirection, PageFilters, ensure_utc
from .gallery import (
    CreateGalleryInput,
    Gallery,
    GalleryFilters,
    GalleryPhoto,
    GallerySummary,
    GalleryWithPhotos,
    UpdateGalleryInput,
)
from .photo import (
    MovePhotoInput,
    Photo,
    PhotoFile,
    PhotoFilters,
    PhotoMetadata,
    UpdatePhotoInput,
    UploadPhotoInput,
    UploadProgress,
)
from .inquiry import (
    CreateInquiryInput,
    Inquiry,
    InquiryFilters,
    InquiryMetadata,
    InquiryStats,
    UpdateInquiryInput,
)

__all__ = [
    "GalleryCategory",
    "ImageFormat",
    "InquirySource",
    "InquiryStatus",
    "InquiryType",
    "UploadStatus",
    "BatchOutcome",
    "DomainModel",
    "InputModel",
    "OrderDirection",
    "PageFilters",
    "ensure_utc",
    "Gallery",
    "GalleryPhoto",
    "GalleryWithPhotos",
    "GallerySummary",
    "CreateGalleryInput",
    "UpdateGalleryInput",
    "GalleryFilters",
    "Photo",
    "PhotoFile",
    "PhotoMetadata",
    "UploadProgress",
    "UploadPhotoInput",
    "UpdatePhotoInput",
    "MovePhotoInput",
    "PhotoFilters",
    "Inquiry",
    "InquiryMetadata",
    "InquiryStats",
    "CreateInquiryInput",
    "UpdateInquiryInput",
    "InquiryFilters",
]
