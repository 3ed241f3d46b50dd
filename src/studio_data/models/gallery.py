import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum as SQLEnum, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database.base import Base
from .enums import GalleryCategory, enum_values

# Avoid circular import issues when using type hints for related models
if TYPE_CHECKING:
    from .photo import PhotoRecord


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GalleryRecord(Base):
    """
    Row in `galleries`.

    `slug` carries a unique index; it is the authority on slug uniqueness, the
    repository's availability check is only a fast path in front of it.
    `photo_count` is a denormalized cache refreshed by `update_photo_count`.
    """
    __tablename__ = "galleries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    category: Mapped[GalleryCategory] = mapped_column(
        SQLEnum(GalleryCategory, name="gallery_category", native_enum=False, values_callable=enum_values, length=32),
        nullable=False,
    )

    # Weak reference: no FK, a deleted cover photo simply stops resolving
    cover_photo_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)

    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    photo_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    # --- Relationships ---

    # One-to-Many, read-only: photo lifecycle is managed by the photo repository
    photos: Mapped[list["PhotoRecord"]] = relationship(
        "PhotoRecord",
        back_populates="gallery",
        lazy="raise",
        order_by="PhotoRecord.display_order",
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<GalleryRecord(id={self.id!r}, slug={self.slug!r})>"
