"""
Polling toolkit.

This package contains:
- Poller: interval-driven work dispatcher (polling.poller)
- IntervalClock: the clock source a poller owns (polling.clock)
- PollerRegistry: explicit owner disposing pollers on shutdown (polling.registry)
- Error taxonomy (polling.exceptions)
- Logging and metrics (polling.observability)
"""

from .clock import IntervalClock, validate_interval
from .events import PollerState, PollerStats, TickEvent
from .exceptions import (
    ClockError,
    ConfigurationError,
    IntervalError,
    InvalidStateError,
    PollerDisposedError,
    PollingError,
)
from .interfaces import ErrorReporter, TickHandler
from .poller import Poller
from .registry import PollerRegistry

__version__ = "1.0.0"

__all__ = [
    "Poller",
    "PollerRegistry",
    "IntervalClock",
    "validate_interval",
    "PollerState",
    "PollerStats",
    "TickEvent",
    "TickHandler",
    "ErrorReporter",
    "PollingError",
    "ConfigurationError",
    "IntervalError",
    "InvalidStateError",
    "PollerDisposedError",
    "ClockError",
]
