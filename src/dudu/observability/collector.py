"""Build collector — records build and session events into the event log.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe to use from the build worker thread and the event loop at once.

"""

from __future__ import annotations

from dudu.observability.events import (
    BuildFinished,
    ChangeObserved,
    ItemBuilt,
    ReloadBroadcast,
    SessionTransition,
    now_ns,
)
from dudu.observability.log import EventLog


class BuildCollector:
    """Event collector shared by the generator, the watcher loop and the hub.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Build events -----

    def record_item(
        self,
        kind: str,
        source: str,
        target: str,
        *,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a rendered or copied item."""
        self._log.append(
            ItemBuilt(
                kind=kind,  # type: ignore[arg-type]
                source=source,
                target=target,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_pass(
        self,
        output_dir: str,
        *,
        rendered: int = 0,
        copied: int = 0,
        skipped: int = 0,
        error: str = "",
        duration_ms: float = 0.0,
    ) -> None:
        """Record the outcome of a whole build pass."""
        self._log.append(
            BuildFinished(
                output_dir=output_dir,
                rendered=rendered,
                copied=copied,
                skipped=skipped,
                error=error,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Session events -----

    def record_change(self, path: str, operation: str, *, actionable: bool) -> None:
        """Record a filesystem change delivered by the watcher."""
        self._log.append(
            ChangeObserved(
                path=path,
                operation=operation,
                actionable=actionable,
                timestamp_ns=now_ns(),
            )
        )

    def record_broadcast(self, payload: str, *, clients: int, build_ok: bool) -> None:
        """Record a live-reload broadcast."""
        self._log.append(
            ReloadBroadcast(
                payload=payload,
                clients=clients,
                build_ok=build_ok,
                timestamp_ns=now_ns(),
            )
        )

    def record_transition(self, state: str) -> None:
        """Record a session lifecycle transition."""
        self._log.append(SessionTransition(state=state, timestamp_ns=now_ns()))
