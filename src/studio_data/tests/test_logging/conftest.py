import pytest

from studio_data.core.logging.builder import setup_logging, stop_queue_logging

from ..test_fixtures.settings_fixtures import make_test_settings


@pytest.fixture
def restore_logging():
    """Reinstall the suite's logging configuration after a test replaced it."""
    yield
    stop_queue_logging()
    setup_logging(make_test_settings())
