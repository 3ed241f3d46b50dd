import logging

from studio_data.core.logging.builder import make_dict_config, setup_logging

from ..test_fixtures.settings_fixtures import make_test_settings


def test_stdout_config_uses_error_console(tmp_path):
    cfg = make_dict_config(make_test_settings(LOG_DIR=tmp_path))

    assert set(cfg["handlers"]) == {"console", "error_console"}
    assert set(cfg["filters"]) == {"correlation_id", "redact"}
    assert cfg["handlers"]["console"]["formatter"] == "standard"


def test_file_config_contains_file_handlers(tmp_path):
    cfg = make_dict_config(make_test_settings(LOG_TO_STDOUT=False, LOG_DIR=tmp_path, LOG_FORMAT="json"))

    assert {"console", "file", "error_file"} <= set(cfg["handlers"])
    assert cfg["handlers"]["file"]["filename"] == str(tmp_path / "studio-data.log")
    assert cfg["handlers"]["file"]["formatter"] == "json"


def test_sql_logging_switch(tmp_path):
    quiet = make_dict_config(make_test_settings())
    loud = make_dict_config(make_test_settings(ENABLE_SQL_LOGGING=True))

    assert quiet["loggers"]["sqlalchemy.engine"]["level"] == "WARNING"
    assert loud["loggers"]["sqlalchemy.engine"]["level"] == "DEBUG"


def test_setup_logging_creates_log_dir(tmp_path, restore_logging):
    log_dir = tmp_path / "logs"
    assert not log_dir.exists()

    setup_logging(make_test_settings(LOG_TO_STDOUT=False, LOG_DIR=log_dir))

    assert log_dir.exists()
    assert logging.getLogger().handlers
