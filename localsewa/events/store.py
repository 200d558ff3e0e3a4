from __future__ import annotations

import threading
import time
from typing import Any

_events: list[dict[str, Any]] = []
_lock = threading.Lock()


def record_event(event_type: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Append a semantic event (e.g. ``booking-created``) for delivery by a transport."""
    event = {
        "type": event_type,
        "timestamp": time.time(),
        "payload": payload,
    }
    with _lock:
        _events.append(event)
    return event


def get_events(event_type: str | None = None) -> list[dict[str, Any]]:
    with _lock:
        if event_type is None:
            return list(_events)
        return [e for e in _events if e["type"] == event_type]


def clear_events() -> None:
    with _lock:
        _events.clear()
