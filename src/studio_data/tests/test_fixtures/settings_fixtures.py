"""Settings builders for tests."""

import os

from studio_data.config.settings import Settings

# CI can point the suite at Postgres; locally an in-memory SQLite database is used.
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def make_test_settings(**overrides) -> Settings:
    """Settings that never read `.env` and log text to stdout."""
    values = {
        "ENV": "testing",
        "DATABASE_URL_OVERRIDE": TEST_DATABASE_URL,
        "LOG_LEVEL": "INFO",
        "LOG_FORMAT": "text",
        "LOG_TO_STDOUT": True,
        "LOG_USE_QUEUE": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)
