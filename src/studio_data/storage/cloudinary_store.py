"""
Cloudinary-backed `ObjectStore`.

Buckets map to top-level folders: `("photos", "<gallery>/<ts>_kona.jpg")` is stored
as public id `photos/<gallery>/<ts>_kona` with format `jpg`. The SDK is blocking, so
every call runs in a worker thread.
"""

import asyncio
import logging
import os
import time
from typing import Any, Sequence

import cloudinary
import cloudinary.api
import cloudinary.uploader
import cloudinary.utils
from cloudinary.exceptions import Error as CloudinaryError
from cloudinary.exceptions import NotFound as CloudinaryNotFound

from ..exceptions.base import StorageError
from .base import ObjectStore

logger = logging.getLogger(__name__)


def split_key(bucket: str, key: str) -> tuple[str, str]:
    """(public_id, format) for a bucket/key pair."""
    stem, ext = os.path.splitext(key)
    return f"{bucket}/{stem}", ext.lstrip(".").lower()


class CloudinaryObjectStore(ObjectStore):
    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        *,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
    ):
        # credentials are passed per call instead of through the global cloudinary.config()
        self._credentials = {"cloud_name": cloud_name, "api_key": api_key, "api_secret": api_secret}
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    @classmethod
    def from_settings(cls, settings) -> "CloudinaryObjectStore":
        return cls(
            settings.CLOUDINARY_CLOUD_NAME,
            settings.CLOUDINARY_API_KEY,
            settings.CLOUDINARY_API_SECRET,
        )

    async def _call_with_retry(self, operation: str, fn, *args: Any, **kwargs: Any) -> Any:
        """Run a blocking SDK call off the event loop, retrying SDK errors with 1s, 2s, 4s... backoff."""
        for attempt in range(self.max_retries):
            try:
                return await asyncio.to_thread(fn, *args, **self._credentials, **kwargs)
            except CloudinaryNotFound:
                raise
            except CloudinaryError as exc:
                logger.warning(
                    "storage.retry",
                    extra={"operation": operation, "attempt": attempt + 1, "max_retries": self.max_retries},
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_base_delay * (2 ** attempt))
                    continue
                raise StorageError(operation, f"Cloudinary {operation} failed: {exc}", exc) from exc

    async def upload(self, bucket: str, key: str, data: bytes, content_type: str, upsert: bool = False) -> str:
        public_id, _ = split_key(bucket, key)
        try:
            result = await self._call_with_retry(
                "upload",
                cloudinary.uploader.upload,
                data,
                public_id=public_id,
                overwrite=upsert,
                resource_type="image",
            )
        except StorageError:
            raise
        except Exception as exc:
            logger.error("storage.upload.failed", extra={"bucket": bucket, "key": key}, exc_info=True)
            raise StorageError("upload", f"Unexpected error uploading {key}", exc) from exc

        logger.info("storage.upload.success", extra={"bucket": bucket, "key": key, "bytes": result.get("bytes")})
        return key

    async def get_public_url(self, bucket: str, key: str) -> str:
        public_id, fmt = split_key(bucket, key)
        try:
            return cloudinary.CloudinaryImage(public_id).build_url(secure=True, format=fmt or None, **self._credentials)
        except Exception as exc:
            raise StorageError("download", f"Could not build URL for {key}", exc) from exc

    async def create_signed_url(self, bucket: str, key: str, expires_in: int) -> str:
        public_id, fmt = split_key(bucket, key)
        try:
            # private_download_url does not check existence, so look the asset up first
            await self._call_with_retry("download", cloudinary.api.resource, public_id)
        except CloudinaryNotFound as exc:
            raise StorageError("download", f"Object not found: {bucket}/{key}", exc) from exc
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError("download", f"Unexpected error signing {key}", exc) from exc

        return cloudinary.utils.private_download_url(
            public_id,
            fmt,
            resource_type="image",
            type="upload",
            expires_at=int(time.time()) + int(expires_in),
            **self._credentials,
        )

    async def remove(self, bucket: str, keys: Sequence[str]) -> None:
        if not keys:
            return
        public_ids = [split_key(bucket, key)[0] for key in keys]
        try:
            result = await self._call_with_retry(
                "delete", cloudinary.api.delete_resources, public_ids, resource_type="image", invalidate=True
            )
        except StorageError:
            raise
        except Exception as exc:
            logger.error("storage.delete.failed", extra={"bucket": bucket, "keys": list(keys)}, exc_info=True)
            raise StorageError("delete", f"Unexpected error deleting {len(public_ids)} object(s)", exc) from exc

        # "not_found" entries are fine: the object is gone either way
        logger.info("storage.delete.success", extra={"bucket": bucket, "deleted": (result or {}).get("deleted")})
