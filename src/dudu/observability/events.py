"""Unified event model for build and serve observability.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.
    Build passes run in a worker thread while the session records watch
    and reload events on the event loop.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Build pipeline events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ItemBuilt:
    """A single source item was rendered or copied.

    Attributes:
        kind: ``render`` for documents, ``copy`` for static files.
        source: Source path relative to the source root.
        target: Absolute output path.
        duration_ms: Time taken in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["render", "copy"]
    source: str
    target: str
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BuildFinished:
    """A build pass completed (successfully or not).

    Attributes:
        output_dir: Output root the pass wrote to.
        rendered: Number of documents rendered.
        copied: Number of static files copied.
        skipped: Number of items judged fresh.
        error: Error message if the pass failed, else empty.
        duration_ms: Wall-clock time of the pass.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    output_dir: str
    rendered: int
    copied: int
    skipped: int
    error: str
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Serve session events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ChangeObserved:
    """The watcher delivered a filesystem change.

    Attributes:
        path: Absolute path of the changed entry.
        operation: Normalized operation name.
        actionable: Whether the change triggered a rebuild.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    operation: str
    actionable: bool
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ReloadBroadcast:
    """A live-reload notification was handed to the hub.

    Attributes:
        payload: The text frame broadcast to clients.
        clients: Number of clients registered at broadcast time.
        build_ok: Whether the preceding rebuild succeeded.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    payload: str
    clients: int
    build_ok: bool
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class SessionTransition:
    """The serve session moved to a new lifecycle state."""

    state: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type StackEvent = (
    ItemBuilt
    | BuildFinished
    | ChangeObserved
    | ReloadBroadcast
    | SessionTransition
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
