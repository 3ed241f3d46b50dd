from abc import ABC, abstractmethod
from typing import Sequence


class ObjectStore(ABC):
    """
    Binary object storage as the photo repository needs it.

    Keys are opaque locators inside a bucket. Implementations raise
    `StorageError` (with the matching operation) on any failure.
    """

    @abstractmethod
    async def upload(self, bucket: str, key: str, data: bytes, content_type: str, upsert: bool = False) -> str:
        """Store `data` under `key`; returns the key actually written."""

    @abstractmethod
    async def get_public_url(self, bucket: str, key: str) -> str:
        """Public delivery URL; does not check that the object exists."""

    @abstractmethod
    async def create_signed_url(self, bucket: str, key: str, expires_in: int) -> str:
        """Time-limited URL; raises StorageError("download") when the object does not exist."""

    @abstractmethod
    async def remove(self, bucket: str, keys: Sequence[str]) -> None:
        """Delete objects; keys that are already gone are not an error."""
