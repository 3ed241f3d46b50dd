import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum as SQLEnum, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from ..database.base import Base
from .enums import InquirySource, InquiryStatus, InquiryType, enum_values
from .gallery import _utcnow


class InquiryRecord(Base):
    """Row in `inquiries`. No relationships to the gallery/photo tables."""
    __tablename__ = "inquiries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    inquiry_type: Mapped[InquiryType] = mapped_column(
        SQLEnum(InquiryType, name="inquiry_type", native_enum=False, values_callable=enum_values, length=32),
        nullable=False,
    )
    status: Mapped[InquiryStatus] = mapped_column(
        SQLEnum(InquiryStatus, name="inquiry_status", native_enum=False, values_callable=enum_values, length=32),
        nullable=False,
        default=InquiryStatus.NEW,
        index=True,
    )
    source: Mapped[InquirySource] = mapped_column(
        SQLEnum(InquirySource, name="inquiry_source", native_enum=False, values_callable=enum_values, length=32),
        nullable=False,
        default=InquirySource.WEBSITE_CONTACT,
    )

    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict
    )

    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, index=True
    )
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<InquiryRecord(id={self.id!r}, status={self.status!r})>"
