"""Utility helpers package."""

from cmdexec.util.logging import configure_logging, get_logger
from cmdexec.util.observability import EventLogger, LogEvent

__all__ = [
    "EventLogger",
    "LogEvent",
    "configure_logging",
    "get_logger",
]
