"""
Logging filters.

Correlation id
--------------
Presentation code usually serves one user action with several repository calls
(create a gallery, upload photos, refresh the photo count). Setting one correlation id
for that action lets every log line it produces be grouped:

    token = set_correlation_id("upload-7f3a")
    try:
        await photos.upload(...)
        await galleries.update_photo_count(gallery_id)
    finally:
        reset_correlation_id(token)

or, equivalently, `with correlation_scope("upload-7f3a"): ...`.

The id lives in a `contextvars.ContextVar`, so it follows the code across `await`
and into tasks created from that context. `CorrelationIdFilter` copies it onto each
record (`record.correlation_id`, "-" when unset) so formatters can rely on it.

Redaction
---------
`RedactFilter` masks values passed through `extra=` under sensitive keys, including the
object store credential names, so a stray `extra={"api_secret": ...}` never reaches a handler.
"""

import contextvars
import logging
import uuid
from contextlib import contextmanager
from logging import LogRecord
from typing import Iterator

_correlation_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar("correlation_id", default=None)


def set_correlation_id(correlation_id: str | None):
    """
    Set the correlation id for the current context.

    Returns:
        token: pass it to `reset_correlation_id` to restore the previous value.
    """
    return _correlation_id_ctx.set(correlation_id)


def reset_correlation_id(token) -> None:
    _correlation_id_ctx.reset(token)


def get_correlation_id() -> str | None:
    return _correlation_id_ctx.get()


def new_correlation_id() -> str:
    return uuid.uuid4().hex


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Set a correlation id (a fresh one when omitted) for the duration of the block."""
    cid = correlation_id or new_correlation_id()
    token = set_correlation_id(cid)
    try:
        yield cid
    finally:
        reset_correlation_id(token)


class CorrelationIdFilter(logging.Filter):
    """
    Guarantee every record has `correlation_id`.

    Precedence: an explicit `extra={"correlation_id": ...}`, then the context value,
    then "-". Never drops a record.
    """

    def filter(self, record: LogRecord) -> bool:
        record.correlation_id = getattr(record, "correlation_id", None) or get_correlation_id() or "-"
        return True


class RedactFilter(logging.Filter):
    SENSITIVE = {
        "password",
        "secret",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "api_key",
        "api_secret",
        "cloudinary_api_key",
        "cloudinary_api_secret",
        "ip_address",
    }

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = "***REDACTED***"
        return True
