from enum import Enum


class GalleryCategory(str, Enum):
    WEDDING = "wedding"
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"
    EVENT = "event"
    COMMERCIAL = "commercial"
    PERSONAL = "personal"


class ImageFormat(str, Enum):
    """Mime types accepted for photo uploads."""
    JPEG = "image/jpeg"
    PNG = "image/png"
    WEBP = "image/webp"
    HEIC = "image/heic"


class UploadStatus(str, Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class InquiryType(str, Enum):
    WEDDING = "wedding"
    PORTRAIT = "portrait"
    EVENT = "event"
    COMMERCIAL = "commercial"
    GENERAL = "general"
    BOOKING = "booking"


class InquiryStatus(str, Enum):
    NEW = "new"
    READ = "read"
    IN_PROGRESS = "in_progress"
    RESPONDED = "responded"
    RESOLVED = "resolved"
    SPAM = "spam"


class InquirySource(str, Enum):
    WEBSITE_CONTACT = "website_contact"
    WEBSITE_BOOKING = "website_booking"
    SOCIAL_MEDIA = "social_media"
    REFERRAL = "referral"
    DIRECT = "direct"


def enum_values(enum_cls) -> list[str]:
    """`values_callable` for SQLAlchemy Enum columns: store the value, not the member name."""
    return [member.value for member in enum_cls]
