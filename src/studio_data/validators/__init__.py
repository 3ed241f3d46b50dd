from .schemas import validate
from .file_validators import sanitize_filename, validate_image_file

__all__ = ["validate", "validate_image_file", "sanitize_filename"]
