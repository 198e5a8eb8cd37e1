"""Live-reload hub — fans rebuild notifications out to connected browsers.

The hub owns the set of connected clients.  Every mutation is a message
sent into the hub's inbox and applied by the ``run()`` loop, so the set is
only ever touched by one coroutine and needs no lock.

Each client has a bounded outbound queue.  Broadcasting never waits: a
client whose queue is full or already closed is treated as disconnected
and evicted in the same pass, so a slow or dead browser cannot hold up the
broadcaster or the other clients.
"""

from __future__ import annotations

import asyncio
import sys
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dudu._lifecycle import next_or_stop

if TYPE_CHECKING:
    from dudu._types import ClientID


class HubClient:
    """A live-reload connection as seen by the hub.

    The connection handler drains the client with ``receive()``; ``None``
    marks the end of the stream after the hub closed the client.

    Args:
        queue_size: Capacity of the outbound buffer.

    """

    __slots__ = ("_closed", "_queue", "client_id")

    def __init__(self, queue_size: int = 16) -> None:
        self.client_id: ClientID = uuid.uuid4().hex
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=max(queue_size, 1))
        self._closed = False

    def __repr__(self) -> str:
        return f"HubClient({self.client_id[:8]}, closed={self._closed})"

    @property
    def closed(self) -> bool:
        """Whether the client's delivery path is shut."""
        return self._closed

    @property
    def pending(self) -> int:
        """Number of messages waiting to be sent."""
        return self._queue.qsize()

    def offer(self, payload: str) -> bool:
        """Queue *payload* without blocking.  False if full or closed."""
        if self._closed:
            return False
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            return False
        return True

    def close(self) -> None:
        """Shut the delivery path and wake any pending ``receive()``.

        Undelivered messages are discarded.
        """
        if self._closed:
            return
        self._closed = True
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(None)

    async def receive(self) -> str | None:
        """Wait for the next payload, or None once the client is closed."""
        if self._closed and self._queue.empty():
            return None
        return await self._queue.get()


@dataclass(frozen=True, slots=True)
class _Register:
    client: HubClient


@dataclass(frozen=True, slots=True)
class _Unregister:
    client: HubClient


@dataclass(frozen=True, slots=True)
class _Broadcast:
    payload: str


type _Message = _Register | _Unregister | _Broadcast


@dataclass(slots=True)
class BroadcastStats:
    """Counters kept by the hub loop."""

    broadcasts: int = 0
    delivered: int = 0
    evicted: int = 0


class LiveReloadHub:
    """Single-loop registry and fan-out for live-reload clients.

    ``register``, ``unregister`` and ``broadcast`` may be called from any
    coroutine on the hub's event loop; they only enqueue a message.  The
    ``run()`` loop applies messages in order until its stop event is set,
    then unregisters every remaining client.

    """

    def __init__(self) -> None:
        self._inbox: asyncio.Queue[_Message] = asyncio.Queue()
        self._clients: set[HubClient] = set()
        self._stats = BroadcastStats()

    @property
    def client_count(self) -> int:
        """Number of registered clients (snapshot)."""
        return len(self._clients)

    @property
    def clients(self) -> frozenset[HubClient]:
        """Registered clients (snapshot)."""
        return frozenset(self._clients)

    @property
    def stats(self) -> BroadcastStats:
        """Broadcast counters."""
        return self._stats

    def register(self, client: HubClient) -> None:
        """Ask the hub to add *client* to the live set."""
        self._inbox.put_nowait(_Register(client))

    def unregister(self, client: HubClient) -> None:
        """Ask the hub to remove *client* and close its delivery path."""
        self._inbox.put_nowait(_Unregister(client))

    def broadcast(self, payload: str) -> None:
        """Ask the hub to deliver *payload* to every registered client."""
        self._inbox.put_nowait(_Broadcast(payload))

    async def drain(self) -> None:
        """Wait until every message sent so far has been applied."""
        await self._inbox.join()

    async def run(self, stop: asyncio.Event) -> None:
        """Apply inbox messages until *stop* is set.

        When a message and the stop signal are ready at the same time, the
        stop signal wins.  On exit every remaining client is unregistered,
        including clients whose registration was still in the inbox.

        """
        try:
            while True:
                message = await next_or_stop(self._inbox.get(), stop, self._discard)
                if message is None:
                    return
                try:
                    self._apply(message)
                finally:
                    self._inbox.task_done()
        finally:
            for client in list(self._clients):
                self._remove(client)
            while not self._inbox.empty():
                self._discard(self._inbox.get_nowait())

    def _discard(self, message: _Message) -> None:
        """Settle a message that raced the stop signal; its client is closed."""
        match message:
            case _Register(client) | _Unregister(client):
                client.close()
        self._inbox.task_done()

    def _apply(self, message: _Message) -> None:
        match message:
            case _Register(client):
                if client.closed:
                    return
                self._clients.add(client)
            case _Unregister(client):
                self._remove(client)
            case _Broadcast(payload):
                self._fan_out(payload)

    def _fan_out(self, payload: str) -> None:
        self._stats.broadcasts += 1
        for client in list(self._clients):
            if client.offer(payload):
                self._stats.delivered += 1
                continue
            self._stats.evicted += 1
            print(f"  live-reload client {client.client_id[:8]} dropped", file=sys.stderr)
            self._remove(client)

    def _remove(self, client: HubClient) -> None:
        self._clients.discard(client)
        client.close()
