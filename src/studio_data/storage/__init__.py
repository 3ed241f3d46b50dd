from .base import ObjectStore
from .cloudinary_store import CloudinaryObjectStore

__all__ = ["ObjectStore", "CloudinaryObjectStore"]
