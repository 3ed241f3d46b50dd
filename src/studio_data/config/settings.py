from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from ..validators.config_validators import to_uppercase, to_lowercase, split_csv

DEFAULT_ALLOWED_MIME_TYPES = "image/jpeg,image/png,image/webp,image/heic"


class Settings(BaseSettings):
    """
    Data layer settings loaded from the environment (and `.env`).
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration
    DATABASE_URL_OVERRIDE: str | None = None
    POSTGRES_DRIVER: str = "asyncpg"
    POSTGRES_USERNAME: str | None = None
    POSTGRES_PASSWORD: str | None = None
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str | None = None

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False

    # Object storage (Cloudinary)
    CLOUDINARY_CLOUD_NAME: str | None = None
    CLOUDINARY_API_KEY: str | None = None
    CLOUDINARY_API_SECRET: str | None = None
    STORAGE_PHOTO_BUCKET: str = "photos"
    STORAGE_THUMBNAIL_BUCKET: str = "thumbnails"
    SIGNED_URL_EXPIRES_IN: int = 3600  # seconds

    # Uploads
    UPLOAD_MAX_BYTES: int = 50 * 1024 * 1024  # 50 MB
    UPLOAD_ALLOWED_MIME_TYPES: str = DEFAULT_ALLOWED_MIME_TYPES

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/studio-data")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    LOG_USE_QUEUE: bool = False
    LOG_QUEUE_MAX_SIZE: int = 0  # 0 = unbounded; when bounded, records are dropped once full
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the async database URL.

        An explicit `DATABASE_URL_OVERRIDE` wins (tests point it at
        `sqlite+aiosqlite://`); otherwise the URL is assembled from the POSTGRES_* parts.

        Raises:
            ValueError: if neither an override nor the username/database parts are set.
        """
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE

        if not self.POSTGRES_USERNAME or not self.POSTGRES_DB:
            raise ValueError("Set DATABASE_URL_OVERRIDE or POSTGRES_USERNAME/POSTGRES_DB")

        return (
            f"postgresql+{self.POSTGRES_DRIVER}://"
            f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD or ''}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{self.POSTGRES_DB}"
        )

    @property
    def allowed_mime_types(self) -> tuple[str, ...]:
        return tuple(split_csv(self.UPLOAD_ALLOWED_MIME_TYPES) or ())

    @property
    def cloudinary_configured(self) -> bool:
        return bool(self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET)

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase before Literal validation, so `debug` in the
        environment is accepted as `DEBUG`.
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        return to_lowercase(v)

    @field_validator("UPLOAD_MAX_BYTES", "SIGNED_URL_EXPIRES_IN")
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
