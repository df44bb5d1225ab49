"""Logger hierarchy setup for cmdexec.

Every logger handed out by ``get_logger`` lives under the ``cmdexec``
namespace, so one call to ``configure_logging`` controls the level and format
of executor completion events and CLI output alike. Records still propagate to
the root logger; applications that configure the root themselves keep seeing
them.
"""

from __future__ import annotations

import logging
import sys
from typing import Final, TextIO

ROOT_LOGGER_NAME: Final[str] = "cmdexec"
DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class _StderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever ``sys.stderr`` is at emit time."""

    @property  # type: ignore[override]
    def stream(self) -> TextIO:
        return sys.stderr

    @stream.setter
    def stream(self, _value: TextIO) -> None:
        pass


def configure_logging(level: str = "INFO", fmt: str | None = None) -> logging.Logger:
    """Attach a stderr handler to the ``cmdexec`` logger and set its level.

    Calling it again replaces the handler installed by a previous call.

    Args:
        level: Logging level name (e.g., "INFO", "DEBUG").
        fmt: Optional format string for the installed handler.

    Returns:
        The configured ``cmdexec`` logger.
    """

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in [h for h in root.handlers if isinstance(h, _StderrHandler)]:
        root.removeHandler(handler)

    handler = _StderrHandler()
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(normalize_level(level))
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the ``cmdexec`` hierarchy.

    Names already under ``cmdexec`` are used as-is; anything else is nested
    below it, e.g. ``"command"`` becomes ``"cmdexec.command"``.
    """

    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def normalize_level(level: str) -> int:
    """Map a level name to its numeric value, falling back to INFO."""

    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO
