"""
Building blocks shared by the gallery, photo and inquiry schemas.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Annotated, Literal
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..exceptions.base import DomainError


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes (SQLite hands those back) are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]

OrderDirection = Literal["asc", "desc"]


class InputModel(BaseModel):
    """
    Base for create/update/filter inputs.

    Fields are snake_case; camelCase keys (`displayOrder`, `isPublished`) are accepted
    too. Error locations always use the snake_case field name. Unknown keys are dropped.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        loc_by_alias=False,
        str_strip_whitespace=True,
        extra="ignore",
    )


class DomainModel(BaseModel):
    """Base for the immutable values handed back to callers."""
    model_config = ConfigDict(frozen=True, from_attributes=True)


class PageFilters(InputModel):
    # None: each repository applies its own default ordering
    order_direction: OrderDirection | None = None
    limit: int | None = Field(default=None, ge=1)
    offset: int | None = Field(default=None, ge=0)


@dataclass(frozen=True)
class BatchOutcome:
    """
    Per-id outcome of a sequential batch (`reorder`, `delete_batch`).

    Items are independent calls, so a failure part way through leaves the earlier
    ones applied; `failed` lists exactly which ids did not go through.
    """
    succeeded: tuple[UUID, ...] = ()
    failed: dict[UUID, DomainError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> dict:
        return {
            "succeeded": [str(i) for i in self.succeeded],
            "failed": {str(i): err.code for i, err in self.failed.items()},
        }
