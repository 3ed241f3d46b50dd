"""
Build and apply the dictConfig logging configuration.

    setup_logging(get_settings())

With LOG_USE_QUEUE the real handlers run on a background QueueListener and the
root logger only enqueues records. The correlation id and redaction filters are
then attached to the QueueHandler so they run in the producing context, where
the correlation contextvar is still set. Call `stop_queue_logging()` at shutdown
to flush the listener.
"""

from __future__ import annotations

import logging
import logging.config
import queue as _queue
import threading
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from typing import Optional

from ...config.settings import Settings
from .filters import CorrelationIdFilter, RedactFilter
from .formatters import SERVICE_NAME, ColorFormatter, JsonFormatter
from .handlers import get_console_handler, get_error_console_handler, get_error_file_handler, get_file_handler

_QUEUE_LISTENER: Optional[QueueListener] = None


class NonBlockingQueueHandler(QueueHandler):
    """QueueHandler for a bounded queue: drops records instead of blocking when full. `dropped` counts them."""

    def __init__(self, queue):
        super().__init__(queue)
        self.dropped = 0
        self._dropped_lock = threading.Lock()

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except _queue.Full:
            with self._dropped_lock:
                self.dropped += 1


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping.

      - formatters: "standard" (ColorFormatter for LOG_FORMAT=text) and "json"
      - filters: "correlation_id", "redact"
      - handlers: console plus file/error_file when writing to LOG_DIR, else error_console
      - loggers: root, "studio_data", "sqlalchemy.engine" (DEBUG only with ENABLE_SQL_LOGGING)
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(correlation_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": SERVICE_NAME,
        },
    }

    filters = {
        "correlation_id": {"()": CorrelationIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}
    if not settings.LOG_TO_STDOUT and settings.LOG_DIR:
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers.keys()),
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            "studio_data": {
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            "sqlalchemy.engine": {
                "level": "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    global _QUEUE_LISTENER

    if not settings.LOG_TO_STDOUT and settings.LOG_DIR:
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    if not settings.LOG_USE_QUEUE:
        return

    stop_queue_logging()
    root_logger = logging.getLogger()
    real_handlers = list(root_logger.handlers)
    if not real_handlers:
        return
    for handler in real_handlers:
        root_logger.removeHandler(handler)

    max_size = settings.LOG_QUEUE_MAX_SIZE or 0
    log_queue: _queue.Queue = _queue.Queue(max_size)
    handler_cls = NonBlockingQueueHandler if max_size > 0 else QueueHandler

    listener = QueueListener(log_queue, *real_handlers, respect_handler_level=True)
    listener.start()

    queue_handler = handler_cls(log_queue)
    queue_handler.addFilter(CorrelationIdFilter())
    queue_handler.addFilter(RedactFilter())
    root_logger.addHandler(queue_handler)
    _QUEUE_LISTENER = listener


def stop_queue_logging() -> None:
    """Flush and stop the background listener, if any."""
    global _QUEUE_LISTENER
    listener = _QUEUE_LISTENER
    if listener is None:
        return
    try:
        listener.stop()
    except Exception:
        logging.getLogger(__name__).exception("logging.queue.stop_failed")
    finally:
        _QUEUE_LISTENER = None
