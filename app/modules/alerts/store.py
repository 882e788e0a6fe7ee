from __future__ import annotations

import threading
from datetime import datetime

from app.core.exceptions import NotFoundError
from app.modules.alerts.schemas import AlertEvent
from app.shared.constants import DEFAULT_HISTORY_LIMIT


class AlertHistoryStore:
    """
    Append-only, in-memory alert log.

    Events are kept in insertion order (most recent last) and every read returns them in
    that same order. Events are never removed; resolving one only sets its resolution fields.
    """

    def __init__(self) -> None:
        self._events: list[AlertEvent] = []
        self._index: dict[str, AlertEvent] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def append(self, event: AlertEvent) -> str:
        with self._lock:
            if event.id in self._index:
                raise ValueError(f"Alert {event.id} already recorded")
            self._events.append(event)
            self._index[event.id] = event
        return event.id

    def list(self, limit: int = DEFAULT_HISTORY_LIMIT) -> list[AlertEvent]:
        """Return the last `limit` events, oldest first."""
        if limit <= 0:
            return []
        with self._lock:
            return self._events[-limit:]

    def list_unresolved(self) -> list[AlertEvent]:
        with self._lock:
            return [event for event in self._events if not event.resolved]

    def get(self, event_id: str) -> AlertEvent:
        with self._lock:
            event = self._index.get(event_id)
        if event is None:
            raise NotFoundError(f"Alert with ID {event_id} not found")
        return event

    def resolve(self, event_id: str, now: datetime) -> AlertEvent:
        """Mark an event resolved. Resolving twice just moves `resolved_at`."""
        with self._lock:
            event = self._index.get(event_id)
            if event is None:
                raise NotFoundError(f"Alert with ID {event_id} not found")
            event.resolved = True
            event.resolved_at = now
            return event
