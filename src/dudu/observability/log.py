"""Event log — bounded, thread-safe store of build and session events.

The generator appends from its worker thread while the session and the
hub append from the event loop, so every access takes the same lock.
Once ``max_events`` is reached the oldest events fall off the front.
"""

from __future__ import annotations

import threading
from collections import Counter, deque
from dataclasses import asdict
from typing import Any

from dudu.observability.events import (
    BuildFinished,
    ChangeObserved,
    ItemBuilt,
    StackEvent,
)


def _event_path(event: StackEvent) -> str:
    """The path an event is about, or an empty string."""
    match event:
        case ItemBuilt(source=source):
            return source
        case BuildFinished(output_dir=output_dir):
            return output_dir
        case ChangeObserved(path=path):
            return path
        case _:
            return ""


class EventLog:
    """Ring buffer of events with simple filtering.

    Args:
        max_events: Number of events kept before the oldest are dropped.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 10_000) -> None:
        self._max_events = max_events
        self._events: deque[StackEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def append(self, event: StackEvent) -> None:
        with self._lock:
            self._events.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        path: str | None = None,
        limit: int = 100,
    ) -> list[StackEvent]:
        """Return matching events, newest first.

        ``path`` matches as a substring of the event's source path, output
        directory or changed path.
        """
        with self._lock:
            snapshot = list(self._events)

        matches: list[StackEvent] = []
        for event in reversed(snapshot):
            if event_type is not None and not isinstance(event, event_type):
                continue
            if event.timestamp_ns < since_ns:
                continue
            if path is not None and path not in _event_path(event):
                continue
            matches.append(event)
            if len(matches) >= limit:
                break
        return matches

    def recent(self, n: int = 20) -> list[StackEvent]:
        """The last *n* events, oldest first."""
        if n <= 0:
            return []
        with self._lock:
            return list(self._events)[-n:]

    def records(self, n: int = 20) -> list[dict[str, Any]]:
        """The last *n* events as JSON-ready dicts tagged with their type."""
        return [{"type": type(e).__name__, **asdict(e)} for e in self.recent(n)]

    def stats(self) -> dict[str, Any]:
        """Totals per event type."""
        with self._lock:
            counts = Counter(type(e).__name__ for e in self._events)
            total = len(self._events)
        return {
            "total": total,
            "max_events": self._max_events,
            "by_type": dict(counts),
        }
