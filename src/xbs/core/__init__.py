"""Core xbs utilities.

This module exports core utilities for use throughout the application.
"""

from xbs.core.config import Settings, get_settings
from xbs.core.logging import (
    bind_correlation_id,
    clear_context,
    close_logging,
    configure_logging,
    get_logger,
)

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "close_logging",
    "get_logger",
    "bind_correlation_id",
    "clear_context",
]
