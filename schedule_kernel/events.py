"""
Domain event notifier.

Responsibility:
    Let services publish scheduling events (task completed, critical path
    changed, ...) to whoever subscribed, without waiting for or depending on
    any acknowledgment.

Failure modes:
    - A listener that raises is logged (with traceback) and skipped; the
      remaining listeners still run and the publisher never sees the error.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from schedule_kernel.logging_config import get_logger

logger = get_logger("events")


@dataclass(frozen=True)
class DomainEvent:
    """A published event: dotted type name plus a free-form payload."""

    event_type: str
    payload: dict[str, Any] = field(default_factory=dict)


Listener = Callable[[DomainEvent], None]


class EventNotifier:
    """Fire-and-forget publish/subscribe keyed by event type."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def subscribe(self, event_type: str, listener: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def unsubscribe(self, event_type: str, listener: Listener) -> None:
        if event_type in self._listeners:
            self._listeners[event_type].remove(listener)

    def publish(self, event_type: str, payload: dict[str, Any] | None = None) -> DomainEvent:
        """Deliver an event to every listener subscribed to ``event_type``."""
        event = DomainEvent(event_type=event_type, payload=payload or {})
        for listener in list(self._listeners.get(event_type, [])):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "event_listener_failed",
                    extra={"event_type": event_type},
                )
        return event
