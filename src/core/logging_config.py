"""Structured logging configuration.

This module initializes structlog with a stable JSON event format.
The minimum level comes from PROPGRAPH_LOG_LEVEL.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import structlog

from core.constants import DEFAULT_LOG_LEVEL

_CONFIGURED = False


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog bound logger with structured output.
    """
    _configure_once()
    return structlog.get_logger(name)


def _configure_once() -> None:
    """Configure structlog processors on first logger request."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level()),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def _resolve_level() -> int:
    """Map PROPGRAPH_LOG_LEVEL to a stdlib numeric level.

    Unknown level names fall back to the default level.
    """
    level_name = os.getenv("PROPGRAPH_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(level_name)
    if isinstance(level, int):
        return level
    return logging.getLevelName(DEFAULT_LOG_LEVEL)
