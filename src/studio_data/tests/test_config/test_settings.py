import pytest
from pydantic import ValidationError

from studio_data.config.settings import Settings


def make(**values) -> Settings:
    return Settings(_env_file=None, **values)


def test_override_wins():
    assert make(DATABASE_URL_OVERRIDE="sqlite+aiosqlite://").DATABASE_URL == "sqlite+aiosqlite://"


def test_url_from_parts():
    settings = make(POSTGRES_USERNAME="studio", POSTGRES_PASSWORD="pw", POSTGRES_DB="site", POSTGRES_PORT=6543)
    assert settings.DATABASE_URL == "postgresql+asyncpg://studio:pw@localhost:6543/site"


def test_url_needs_parts(monkeypatch):
    monkeypatch.delenv("POSTGRES_USERNAME", raising=False)
    monkeypatch.delenv("DATABASE_URL_OVERRIDE", raising=False)
    with pytest.raises(ValueError):
        make(POSTGRES_DB="site").DATABASE_URL


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_FORMAT", "TEXT")
    monkeypatch.setenv("UPLOAD_ALLOWED_MIME_TYPES", "image/jpeg, image/png")

    settings = make()

    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.LOG_FORMAT == "text"
    assert settings.allowed_mime_types == ("image/jpeg", "image/png")


def test_positive_limits():
    with pytest.raises(ValidationError):
        make(UPLOAD_MAX_BYTES=0)
    with pytest.raises(ValidationError):
        make(SIGNED_URL_EXPIRES_IN=-5)


def test_cloudinary_configured():
    assert make().cloudinary_configured is False
    assert make(CLOUDINARY_CLOUD_NAME="demo", CLOUDINARY_API_KEY="k", CLOUDINARY_API_SECRET="s").cloudinary_configured
