"""
====================================================
⏱️ POLLING CONFIGURATION
====================================================

Defaults for pollers, logging and metrics. Every value can be
overridden through environment variables (or a .env file).
"""

import math
import os
from typing import Literal, Optional

from dotenv import load_dotenv

load_dotenv()


def _get_float(env_var: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value)
    except ValueError:
        raise ValueError(f"Invalid {env_var}: {value}. Must be a number")
    if parsed <= 0 or math.isnan(parsed) or math.isinf(parsed):
        raise ValueError(f"Invalid {env_var}: {value}. Must be a positive number")
    return parsed


def _get_choice(env_var: str, allowed: set, default: str) -> str:
    value = os.getenv(env_var)
    if value:
        normalized = value.strip().lower()
        if normalized not in allowed:
            raise ValueError(f"Invalid {env_var}: {value}. Must be one of {allowed}")
        return normalized
    return default


def _get_bool(env_var: str, default: bool) -> bool:
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# =====================================================
# ⏱️ INTERVALS
# =====================================================

# Tick period used when a poller is built without an explicit interval (ms)
DEFAULT_INTERVAL_MS: float = _get_float("POLLER_DEFAULT_INTERVAL_MS", 30000.0)

# Max seconds aclose() waits for an in-flight tick before cancelling it.
# None waits forever.
CLOSE_TIMEOUT_SECONDS: Optional[float] = _get_float("POLLER_CLOSE_TIMEOUT_SECONDS", None)


# =====================================================
# 🧾 LOGGING
# =====================================================

# Log verbosity (DEBUG, INFO, WARNING, ERROR)
LOG_LEVEL: str = _get_choice("POLLER_LOG_LEVEL", {"debug", "info", "warning", "error"}, "info").upper()

# 'console' for development, 'json' for production
LOG_FORMAT: Literal["console", "json"] = _get_choice("POLLER_LOG_FORMAT", {"console", "json"}, "console")


# =====================================================
# 📊 METRICS
# =====================================================

METRICS_ENABLED: bool = _get_bool("POLLER_METRICS_ENABLED", True)
