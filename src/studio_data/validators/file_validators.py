import os
import logging

from ..core.result import Result, failure, success
from ..exceptions.base import FileUploadError
from ..models.enums import ImageFormat
from ..schemas.photo import PhotoFile

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 50 * 1024 * 1024  # 50MB
ALLOWED_MIME_TYPES = tuple(fmt.value for fmt in ImageFormat)
MAX_NAME_LENGTH = 100


def _looks_like(content_type: str, content: bytes) -> bool:
    """Magic-byte check so a renamed text file is not stored as a photo."""
    if content_type == ImageFormat.JPEG.value:
        return content.startswith(b"\xff\xd8\xff")
    if content_type == ImageFormat.PNG.value:
        return content.startswith(b"\x89PNG\r\n\x1a\n")
    if content_type == ImageFormat.WEBP.value:
        return content[:4] == b"RIFF" and content[8:12] == b"WEBP"
    if content_type == ImageFormat.HEIC.value:
        return content[4:8] == b"ftyp"
    # configured extra types: nothing to check against
    return True


def validate_image_file(
    file: PhotoFile,
    *,
    max_size: int = MAX_FILE_SIZE,
    allowed_types: tuple[str, ...] | None = None,
) -> Result[PhotoFile, FileUploadError]:
    """
    Local checks run before any upload: mime type, size, then content signature.

    Returns:
        Success(file) or Failure(FileUploadError) with reason "type", "size" or "corrupt".
    """
    allowed = tuple(allowed_types) if allowed_types else ALLOWED_MIME_TYPES
    content_type = (file.content_type or "").lower()

    if content_type not in allowed:
        logger.info("file.rejected", extra={"reason": "type", "content_type": content_type})
        return failure(FileUploadError(f"Invalid file type. Allowed types: {', '.join(allowed)}", reason="type"))

    if file.size > max_size:
        logger.info("file.rejected", extra={"reason": "size", "size": file.size})
        return failure(
            FileUploadError(f"File too large. Maximum size: {max_size // (1024 * 1024)}MB", reason="size")
        )

    if file.size == 0 or not _looks_like(content_type, file.content):
        logger.info("file.rejected", extra={"reason": "corrupt", "content_type": content_type})
        return failure(FileUploadError("File content does not match its type", reason="corrupt"))

    return success(file)


def sanitize_filename(filename: str) -> str:
    """
    Make an uploaded name safe to use inside a storage key.

    Path components are dropped, spaces become underscores, and only letters, digits,
    `_`, `-` and `.` survive. The extension is lower-cased.
    """
    filename = os.path.basename((filename or "").replace("\\", "/"))
    filename = filename.replace(" ", "_")

    name, ext = os.path.splitext(filename)
    safe_name = "".join(c for c in name if c.isascii() and (c.isalnum() or c in "_-."))
    safe_ext = "".join(c for c in ext.lower() if c.isascii() and (c.isalnum() or c == "."))

    safe_name = safe_name.strip(".")[:MAX_NAME_LENGTH] or "file"
    return f"{safe_name}{safe_ext}"
