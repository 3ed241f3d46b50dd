"""
Logging formatters.

  - JsonFormatter: one JSON object per line for log collectors. Carries service,
    env, version and correlation_id plus everything passed through `extra=`
    (the repository layer logs structured events such as
    `logger.info("gallery.create.success", extra={"gallery_id": ..., "slug": ...})`).
  - ColorFormatter: compact ANSI-colored lines for a developer terminal.

Both are registered by `builder.make_dict_config` and selected by LOG_FORMAT.
"""

import json
import logging
from importlib import metadata
from logging import LogRecord
from typing import Any

SERVICE_NAME = "studio-data"

# attributes every LogRecord has; anything else on the record came from `extra=`
_STANDARD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime", "taskName"}


def get_project_version() -> str:
    try:
        return metadata.version(SERVICE_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


PROJECT_VERSION = get_project_version()


def record_extras(record: LogRecord) -> dict[str, Any]:
    """The `extra=` fields of a record (filters' own fields included)."""
    return {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS and not k.startswith("_")}


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    Never raises: extras that `json` cannot serialize are stringified.
    """

    def __init__(self, *, env: str | None = None, service: str = SERVICE_NAME, datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.env = env
        self.service = service

    def format(self, record: LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "correlation_id": getattr(record, "correlation_id", "-"),
            "service": self.service,
            "env": self.env,
            "version": PROJECT_VERSION,
        }

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_record["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record_extras(record).items():
            if key in log_record:
                continue
            try:
                json.dumps(value)
                log_record[key] = value
            except (TypeError, ValueError):
                log_record[key] = str(value)

        return json.dumps(log_record, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """
    TIMESTAMP | LEVEL | LOGGER | CORRELATION_ID | MESSAGE [key=value ...]

    Event-style messages carry their data in `extra`, so the extras are appended
    as key=value pairs; otherwise "repo.create.conflict" alone says little.
    """

    COLOR_CODES = {
        "DEBUG": "\033[36m",       # cyan
        "INFO": "\033[32m",        # green
        "WARNING": "\033[33m",     # yellow
        "ERROR": "\033[31m",       # red
        "CRITICAL": "\033[1;41m",  # bold, red background
        "RESET": "\033[0m",
    }

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, use_colors: bool = True) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_colors = use_colors

    def format(self, record: LogRecord) -> str:
        color = self.COLOR_CODES.get(record.levelname, "") if self.use_colors else ""
        reset = self.COLOR_CODES["RESET"] if self.use_colors else ""
        timestamp = self.formatTime(record, self.datefmt)

        base = (
            f"{timestamp} | {color}{record.levelname:<8}{reset} | "
            f"{record.name:<40} | "
            f"{getattr(record, 'correlation_id', '-'):<12} | "
            f"{record.getMessage()}"
        )

        extras = {k: v for k, v in record_extras(record).items() if k != "correlation_id"}
        if extras:
            base += " " + " ".join(f"{k}={v}" for k, v in extras.items())

        if record.exc_info:
            base = base + "\n" + self.formatException(record.exc_info)

        return base
