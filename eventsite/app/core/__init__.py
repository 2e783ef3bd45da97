"""Core utilities for the event site application."""

from eventsite.app.core.config import settings
from eventsite.app.core.logging import get_log_context, get_logger, setup_logging

__all__ = [
    "settings",
    "get_log_context",
    "get_logger",
    "setup_logging",
]
