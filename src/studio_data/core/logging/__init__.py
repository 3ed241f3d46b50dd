from .builder import make_dict_config, setup_logging, stop_queue_logging
from .filters import (
    CorrelationIdFilter,
    RedactFilter,
    correlation_scope,
    get_correlation_id,
    new_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)

__all__ = [
    "setup_logging",
    "make_dict_config",
    "stop_queue_logging",
    "CorrelationIdFilter",
    "RedactFilter",
    "correlation_scope",
    "get_correlation_id",
    "new_correlation_id",
    "reset_correlation_id",
    "set_correlation_id",
]
