"""Structured, immutable event logging."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any

from cmdexec.util.logging import get_logger, normalize_level


@dataclass(frozen=True)
class LogEvent:
    """Structured log event payload.

    Attributes:
        event_type: Machine-readable event name.
        timestamp: Unix timestamp in seconds.
        payload: Structured data associated with the event.
        context: Fields bound to the logger that emitted the event.
    """

    event_type: str
    timestamp: float
    payload: dict[str, Any]
    context: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EventLogger:
    """Logger that emits machine-readable JSON events.

    Instances never change: ``bind`` and ``named`` return derived loggers, so a
    context built for one invocation cannot leak into another.
    """

    name: str
    context: dict[str, Any] = field(default_factory=dict)

    def bind(self, **context: Any) -> EventLogger:
        """Return a copy of this logger with extra context fields."""

        return EventLogger(self.name, {**self.context, **context})

    def named(self, suffix: str) -> EventLogger:
        """Return a copy of this logger under a child logger name."""

        return EventLogger(f"{self.name}.{suffix}", dict(self.context))

    def log(
        self,
        event_type: str,
        payload: dict[str, Any],
        *,
        level: str = "INFO",
    ) -> None:
        """Emit a structured log event.

        Args:
            event_type: Machine-readable event name.
            payload: Structured event data.
            level: Logging level string (default: INFO).
        """

        event = LogEvent(
            event_type=event_type,
            timestamp=time.time(),
            payload=payload,
            context=dict(self.context),
        )
        message = json.dumps(event.__dict__, sort_keys=True, default=str)
        get_logger(self.name).log(
            normalize_level(level),
            message,
            extra={"event_type": event_type, "event_payload": payload},
        )
