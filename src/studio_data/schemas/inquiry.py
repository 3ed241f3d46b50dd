from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import AliasChoices, EmailStr, Field, field_validator

from ..models.enums import InquirySource, InquiryStatus, InquiryType
from .common import DomainModel, InputModel, PageFilters, UtcDatetime, ensure_utc

PHONE_PATTERN = r"^[\d\s\-+()]+$"

InquiryOrderField = Literal["submitted_at", "responded_at", "resolved_at", "name", "email", "status"]


class InquiryMetadata(InputModel):
    event_date: date | None = None
    event_location: str | None = Field(default=None, max_length=200)
    guest_count: int | None = Field(default=None, ge=1, le=10000)
    budget: str | None = Field(default=None, max_length=100)
    referral_source: str | None = Field(default=None, max_length=200)
    preferred_contact_method: Literal["email", "phone", "either"] | None = None
    user_agent: str | None = None
    ip_address: str | None = None

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class Inquiry(DomainModel):
    id: UUID
    name: str
    email: str
    phone: str | None = None
    subject: str
    message: str
    inquiry_type: InquiryType
    status: InquiryStatus
    source: InquirySource
    metadata: InquiryMetadata = Field(
        default_factory=InquiryMetadata, validation_alias=AliasChoices("metadata_", "metadata")
    )
    submitted_at: UtcDatetime
    responded_at: UtcDatetime | None = None
    resolved_at: UtcDatetime | None = None


class InquiryStats(DomainModel):
    total: int
    by_status: dict[InquiryStatus, int]
    by_type: dict[InquiryType, int]
    # hours between submission and first response; None when nothing was answered yet
    average_response_time: float | None = None
    today_count: int
    week_count: int
    month_count: int


# =================================================================================================================
# Inputs
# =================================================================================================================

class CreateInquiryInput(InputModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=20, pattern=PHONE_PATTERN)
    subject: str = Field(min_length=3, max_length=200)
    message: str = Field(min_length=10, max_length=5000)
    inquiry_type: InquiryType
    source: InquirySource = InquirySource.WEBSITE_CONTACT
    metadata: InquiryMetadata = Field(default_factory=InquiryMetadata)

    @field_validator("email")
    @classmethod
    def _email_length(cls, v: str) -> str:
        if len(v) > 255:
            raise ValueError("Email must be 255 characters or less")
        return v


class UpdateInquiryInput(InputModel):
    status: InquiryStatus | None = None
    responded_at: datetime | None = None
    resolved_at: datetime | None = None

    @field_validator("responded_at", "resolved_at")
    @classmethod
    def _as_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None


class InquiryFilters(PageFilters):
    status: InquiryStatus | None = None
    inquiry_type: InquiryType | None = None
    source: InquirySource | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    order_by: InquiryOrderField | None = None

    @field_validator("date_from", "date_to")
    @classmethod
    def _as_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None
