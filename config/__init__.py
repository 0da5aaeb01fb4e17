"""
====================================================
⚙️ CONFIGURATION
====================================================

Usage:
    from config import polling

    interval = polling.DEFAULT_INTERVAL_MS
"""

from . import polling

__all__ = [
    "polling",
]
