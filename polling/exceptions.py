"""
Custom exceptions for the polling toolkit.

This module defines all custom exceptions raised by pollers and their
clock source, for consistent error handling and better debugging.
"""

from typing import Any, Dict, Optional


class PollingError(Exception):
    """Base exception for all polling errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(PollingError):
    """Raised when a poller is configured with invalid values."""

    pass


class IntervalError(ConfigurationError):
    """Raised when a polling interval is not a positive duration."""

    pass


class InvalidStateError(PollingError):
    """Raised when an operation is not allowed in the current state."""

    pass


class PollerDisposedError(InvalidStateError):
    """Raised when a disposed poller is started, stopped or reconfigured."""

    pass


class ClockError(PollingError):
    """Raised when the clock source cannot be armed."""

    pass


# Convenience functions for error creation
def create_interval_error(value: Any, reason: str = "interval must be a positive number of milliseconds") -> IntervalError:
    """Create an interval error with standardized format."""
    return IntervalError(f"Invalid polling interval: {value!r}", {"field": "interval", "value": value, "reason": reason})


def create_disposed_error(operation: str, name: Optional[str]) -> PollerDisposedError:
    """Create a post-disposal error with standardized format."""
    return PollerDisposedError(
        f"Cannot {operation} a disposed poller", {"operation": operation, "poller": name or "unnamed"}
    )
