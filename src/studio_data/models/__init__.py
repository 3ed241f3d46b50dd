r"""
Single import point for the ORM records and the enums they store.

    from studio_data.models import GalleryRecord, PhotoRecord, InquiryRecord

Importing this package registers every table on `Base.metadata`, which is what
`Base.metadata.create_all` (tests) relies on.
"""

from .enums import (
    GalleryCategory,
    ImageFormat,
    InquirySource,
    InquiryStatus,
    InquiryType,
    UploadStatus,
)
from .gallery import GalleryRecord
from .photo import PhotoRecord
from .inquiry import InquiryRecord

__all__ = [
    "GalleryRecord",
    "PhotoRecord",
    "InquiryRecord",
    "GalleryCategory",
    "ImageFormat",
    "InquirySource",
    "InquiryStatus",
    "InquiryType",
    "UploadStatus",
]
