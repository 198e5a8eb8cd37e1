"""Observability — unified event model for build passes and serve sessions.

Aggregates events from:
- **Generator**: Per-item renders and copies, whole-pass outcomes
- **Session**: Watcher changes, lifecycle transitions
- **Hub**: Live-reload broadcasts

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from the build thread and the event loop.

Quick Start:
    >>> from dudu.observability import BuildCollector, EventLog
    >>> log = EventLog()
    >>> collector = BuildCollector(log)
    >>> collector.record_item("copy", "style.css", "/out/style.css")

"""

from dudu.observability.collector import BuildCollector
from dudu.observability.events import (
    BuildFinished,
    ChangeObserved,
    ItemBuilt,
    ReloadBroadcast,
    SessionTransition,
    StackEvent,
    now_ns,
)
from dudu.observability.log import EventLog

__all__ = [
    "BuildCollector",
    "BuildFinished",
    "ChangeObserved",
    "EventLog",
    "ItemBuilt",
    "ReloadBroadcast",
    "SessionTransition",
    "StackEvent",
    "now_ns",
]
