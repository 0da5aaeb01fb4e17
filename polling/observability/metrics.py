"""
Prometheus Metrics for pollers.

Every metric is labelled with the poller name ("unnamed" when unset).
Recording helpers are no-ops when POLLER_METRICS_ENABLED is false.
"""

from typing import Optional

from prometheus_client import Counter, Gauge, Histogram

from config import polling as polling_config

# ============================================================================
# COUNTERS (monotonically increasing)
# ============================================================================

ticks_total = Counter(
    "poller_ticks_total",
    "Total number of ticks dispatched to work handlers",
    ["poller"],
)

ticks_skipped_total = Counter(
    "poller_ticks_skipped_total",
    "Total number of ticks skipped because the previous work was still running",
    ["poller"],
)

tick_errors_total = Counter(
    "poller_tick_errors_total",
    "Total number of work failures raised by tick handlers",
    ["poller", "error_type"],
)

# ============================================================================
# GAUGES (can go up and down)
# ============================================================================

poller_armed = Gauge(
    "poller_armed",
    "1 while the poller is armed, 0 otherwise",
    ["poller"],
)

# ============================================================================
# HISTOGRAMS (distributions)
# ============================================================================

work_duration_seconds = Histogram(
    "poller_work_duration_seconds",
    "Duration of a single tick handler invocation",
    ["poller"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0],
)


def _label(name: Optional[str]) -> str:
    return name or "unnamed"


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def record_tick(poller: Optional[str], duration: float):
    """Record a completed tick and its work duration."""
    if not polling_config.METRICS_ENABLED:
        return
    ticks_total.labels(poller=_label(poller)).inc()
    work_duration_seconds.labels(poller=_label(poller)).observe(duration)


def record_skipped_tick(poller: Optional[str]):
    """Record a tick dropped by the skip-if-busy rule."""
    if not polling_config.METRICS_ENABLED:
        return
    ticks_skipped_total.labels(poller=_label(poller)).inc()


def record_tick_error(poller: Optional[str], error: BaseException):
    """Record a work failure."""
    if not polling_config.METRICS_ENABLED:
        return
    tick_errors_total.labels(poller=_label(poller), error_type=type(error).__name__).inc()


def set_armed(poller: Optional[str], armed: bool):
    """Update the armed gauge."""
    if not polling_config.METRICS_ENABLED:
        return
    poller_armed.labels(poller=_label(poller)).set(1 if armed else 0)
