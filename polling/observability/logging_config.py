"""
Structured Logging Configuration for pollers.

Provides JSON logging for production and pretty console logging for development.
"""

import logging
import sys
from typing import Optional

import structlog

from config import polling as polling_config


def configure_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
):
    """
    Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to config.
        log_format: Output format ('json' for production, 'console' for development)
        log_file: Optional path of a log file written alongside stdout
    """
    log_level = (log_level or polling_config.LOG_LEVEL).upper()
    log_format = log_format or polling_config.LOG_FORMAT

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w"))

    # Configure standard logging
    logging.basicConfig(
        format="%(asctime)s %(message)s",
        handlers=handlers,
        level=getattr(logging, log_level),
        force=True,
    )

    # Shared processors
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        # Production: JSON output
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # Development: Pretty console output
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None):
    """Structured logger for ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs):
    """Attach key/value pairs (e.g. ``poller="inbox"``) to every later log line."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys):
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context():
    structlog.contextvars.clear_contextvars()
