"""Lifecycle primitives shared by the serve session's workers.

- ``next_or_stop``: wait for a worker's next input or the shared stop
  signal, whichever comes first (the stop signal wins ties)
- ``FirstError``: single-slot cell recording the first session-fatal error
"""

from __future__ import annotations

import asyncio
import sys
import threading
from collections.abc import Awaitable, Callable


async def next_or_stop[T](
    aw: Awaitable[T],
    stop: asyncio.Event,
    discard: Callable[[T], object] | None = None,
) -> T | None:
    """Await *aw* unless *stop* is set first.

    Returns the result of *aw*, or None when the stop signal was observed.
    If both are ready at once the stop signal wins and the result of *aw*
    is handed to *discard* (when given) instead of being returned.

    """
    if stop.is_set():
        if asyncio.iscoroutine(aw):
            aw.close()
        return None

    item = asyncio.ensure_future(aw)
    stopper = asyncio.ensure_future(stop.wait())
    try:
        await asyncio.wait({item, stopper}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        stopper.cancel()
        if stop.is_set() or not item.done():
            item.cancel()

    if stop.is_set():
        if discard is not None and item.done() and not item.cancelled():
            if item.exception() is None:
                discard(item.result())
        return None
    return item.result()


class FirstError:
    """Records the first session-fatal error; later writes are no-ops.

    ``set()`` never blocks.  A rejected error is printed so it is not lost,
    but it never replaces the recorded one.  ``set()`` must be called from
    the event loop that awaits ``wait()``.

    """

    __slots__ = ("_error", "_event", "_lock")

    def __init__(self) -> None:
        self._error: BaseException | None = None
        self._event = asyncio.Event()
        self._lock = threading.Lock()

    @property
    def error(self) -> BaseException | None:
        """The recorded error, if any."""
        return self._error

    def is_set(self) -> bool:
        """Whether an error has been recorded."""
        return self._error is not None

    def set(self, error: BaseException) -> bool:
        """Record *error* if the slot is empty.  Returns True if recorded."""
        with self._lock:
            if self._error is not None:
                print(f"  later error: {error}", file=sys.stderr)
                return False
            self._error = error
        self._event.set()
        return True

    async def wait(self) -> BaseException:
        """Wait until an error is recorded and return it."""
        await self._event.wait()
        assert self._error is not None
        return self._error
