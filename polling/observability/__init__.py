"""Observability Package."""

from .logging_config import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from .metrics import (
    record_skipped_tick,
    record_tick,
    record_tick_error,
    set_armed,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    # Metrics
    "record_tick",
    "record_skipped_tick",
    "record_tick_error",
    "set_armed",
]
