"""
`validate(schema, data)`: run a pydantic input schema and return a Result instead of
raising, with error messages grouped by dotted field path:

    >>> validate(CreateGalleryInput, {"title": "", "slug": "Bad Slug", "category": "wedding"})
    Failure(error=ValidationError('Validation failed'))   # field_errors: {"title": [...], "slug": [...]}
"""

import logging
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.result import Result, failure, success
from ..exceptions.base import ValidationError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

ROOT_KEY = "_root"


def format_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        path = ".".join(str(part) for part in err.get("loc", ())) or ROOT_KEY
        errors.setdefault(path, []).append(err.get("msg", "Invalid value"))
    return errors


def validate(schema: type[M], data: Mapping[str, Any] | M | None) -> Result[M, ValidationError]:
    """
    Validate `data` against `schema`.

    Args:
        schema: A pydantic input model class.
        data: A mapping (snake_case or camelCase keys) or an already built instance.

    Returns:
        Success(instance) or Failure(ValidationError) carrying per-field messages.
    """
    if isinstance(data, schema):
        return success(data)
    if isinstance(data, BaseModel):
        # a different model: revalidate its fields against this schema
        data = data.model_dump(exclude_unset=True)

    try:
        return success(schema.model_validate(data if data is not None else {}))
    except PydanticValidationError as exc:
        fields = format_errors(exc)
        logger.info("validation.failed", extra={"schema": schema.__name__, "fields": sorted(fields)})
        return failure(ValidationError("Validation failed", fields))
