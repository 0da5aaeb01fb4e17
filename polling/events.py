"""
Event and state definitions for pollers.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class PollerState(Enum):
    """Lifecycle states of a poller."""

    CREATED = "created"  # Disarmed, reusable
    ARMED = "armed"  # Receiving ticks
    DISPOSED = "disposed"  # Terminal


@dataclass(frozen=True)
class TickEvent:
    """
    Arguments of a single tick.

    timestamp: epoch seconds at which the clock signalled the tick
    sequence: 1-based count of ticks fired by the clock
    interval: period in milliseconds in effect when the tick fired
    """

    timestamp: float
    sequence: int
    interval: float

    @property
    def signal_time(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)


@dataclass
class PollerStats:
    """Running counters of a poller, for dashboards and diagnostics."""

    ticks_received: int = 0
    ticks_dispatched: int = 0
    ticks_skipped: int = 0
    errors: int = 0
    last_tick_at: Optional[float] = None
    last_error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "ticks_received": self.ticks_received,
            "ticks_dispatched": self.ticks_dispatched,
            "ticks_skipped": self.ticks_skipped,
            "errors": self.errors,
            "last_tick_at": self.last_tick_at,
            "last_error": self.last_error,
        }
