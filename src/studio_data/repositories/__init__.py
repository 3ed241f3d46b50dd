"""
Repository layer.

Presentation code depends on the interfaces; the store-backed classes are wired up by
`studio_data.container`.

Usage:
    from studio_data.repositories import IGalleryRepository, GalleryRepository
"""

from .base_repository import BaseRepository
from .interfaces import IGalleryRepository, IInquiryRepository, IPhotoRepository, ProgressCallback
from .gallery_repository import GalleryRepository
from .photo_repository import PhotoRepository, build_storage_key
from .inquiry_repository import InquiryRepository

__all__ = [
    "BaseRepository",
    "IGalleryRepository",
    "IPhotoRepository",
    "IInquiryRepository",
    "ProgressCallback",
    "GalleryRepository",
    "PhotoRepository",
    "InquiryRepository",
    "build_storage_key",
]
