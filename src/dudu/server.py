"""Dev server — serves the output tree and attaches live-reload clients.

Routes:
    ``/ws``            WebSocket upgrade; the connection becomes a hub client
    ``/__dudu/stats``  JSON summary of the session's event log
    ``/``              Static files from the output root (``index.html`` aware)

The server runs under uvicorn with uvicorn's own signal handling disabled:
shutdown is driven by the session's stop event.  On stop, the server stops
accepting connections and gives in-flight requests ``shutdown_timeout``
seconds before closing them.
"""

from __future__ import annotations

import asyncio
import contextlib
import sys
from typing import TYPE_CHECKING

import uvicorn
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route, WebSocketRoute
from starlette.staticfiles import StaticFiles
from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from dudu._errors import ServerError
from dudu._lifecycle import next_or_stop
from dudu.reload.hub import HubClient
from dudu.reload.snippet import LIVE_RELOAD_PATH

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from starlette.requests import Request

    from dudu.config import DuduConfig
    from dudu.observability.collector import BuildCollector
    from dudu.reload.hub import LiveReloadHub

STATS_ENDPOINT = "/__dudu/stats"
_RECENT_EVENTS = 20


class _SessionServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the dudu session."""

    def install_signal_handlers(self) -> None:
        return None

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class DevServer:
    """HTTP + WebSocket front end of a serve session.

    Args:
        config: Frozen dudu configuration (host, port, shutdown timeout).
        output_root: Directory served at ``/``.
        hub: Live-reload hub that WebSocket clients are registered with.
        collector: Optional collector exposed on the stats endpoint.

    """

    def __init__(
        self,
        config: DuduConfig,
        output_root: Path,
        hub: LiveReloadHub,
        collector: BuildCollector | None = None,
    ) -> None:
        self._config = config
        self._output_root = output_root
        self._hub = hub
        self._collector = collector
        self._server: _SessionServer | None = None
        self.app = self._create_app()

    @property
    def started(self) -> bool:
        """Whether uvicorn finished its startup."""
        return self._server is not None and self._server.started

    def _create_app(self) -> Starlette:
        return Starlette(
            routes=[
                WebSocketRoute(LIVE_RELOAD_PATH, self._live_reload),
                Route(STATS_ENDPOINT, self._stats),
                Mount(
                    "/",
                    StaticFiles(directory=self._output_root, html=True, check_dir=False),
                    name="output",
                ),
            ],
        )

    async def _stats(self, request: Request) -> JSONResponse:
        """Return the event log summary and live-reload counters.

        ``?recent=N`` includes the last N events (default 20).
        """
        try:
            recent = int(request.query_params.get("recent", _RECENT_EVENTS))
        except ValueError:
            recent = _RECENT_EVENTS
        stats = self._hub.stats
        payload: dict[str, object] = {
            "clients": self._hub.client_count,
            "broadcasts": stats.broadcasts,
            "delivered": stats.delivered,
            "evicted": stats.evicted,
        }
        if self._collector is not None:
            payload["event_log"] = self._collector.log.stats()
            payload["recent_events"] = self._collector.log.records(recent)
        return JSONResponse(payload)

    async def _live_reload(self, websocket: WebSocket) -> None:
        """Attach one browser to the hub until either side closes."""
        await websocket.accept()
        client = HubClient(queue_size=self._config.client_queue_size)
        self._hub.register(client)
        try:
            sender = asyncio.create_task(_send_loop(websocket, client))
            receiver = asyncio.create_task(_receive_loop(websocket))
            _done, pending = await asyncio.wait(
                {sender, receiver}, return_when=asyncio.FIRST_COMPLETED
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        finally:
            self._hub.unregister(client)
        if websocket.client_state == WebSocketState.CONNECTED:
            with contextlib.suppress(RuntimeError, OSError):
                await websocket.close()

    async def serve(self, stop: asyncio.Event) -> None:
        """Serve until *stop* is set, then shut down gracefully.

        Raises:
            ServerError: If the server cannot bind or stops on its own.

        """
        config = uvicorn.Config(
            self.app,
            host=self._config.host,
            port=self._config.port,
            log_level="warning",
            timeout_graceful_shutdown=self._config.shutdown_timeout,
            lifespan="off",
        )
        self._server = server = _SessionServer(config)
        print(f"  Listening on http://{self._config.host}:{self._config.port}", file=sys.stderr)

        serving = asyncio.create_task(_run_uvicorn(server))
        finished = await next_or_stop(asyncio.shield(serving), stop)
        if finished is not None:
            msg = f"Server on {self._config.host}:{self._config.port} stopped unexpectedly"
            raise ServerError(msg)
        if serving.done():
            await serving
            return

        server.should_exit = True
        try:
            await asyncio.wait_for(
                asyncio.shield(serving),
                timeout=self._config.shutdown_timeout,
            )
        except TimeoutError:
            server.force_exit = True
            serving.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await serving


async def _run_uvicorn(server: uvicorn.Server) -> bool:
    """Run *server* to completion, translating uvicorn's exits into errors."""
    try:
        await server.serve()
    except SystemExit as exc:
        # uvicorn exits the process when it cannot bind.
        msg = f"Cannot listen on {server.config.host}:{server.config.port}"
        raise ServerError(msg) from exc
    except OSError as exc:
        msg = f"Cannot listen on {server.config.host}:{server.config.port}: {exc}"
        raise ServerError(msg) from exc
    if not server.started and not server.should_exit:
        msg = f"Cannot listen on {server.config.host}:{server.config.port}"
        raise ServerError(msg)
    return True


async def _send_loop(websocket: WebSocket, client: HubClient) -> None:
    while (payload := await client.receive()) is not None:
        try:
            await websocket.send_text(payload)
        except (WebSocketDisconnect, RuntimeError, OSError):
            return


async def _receive_loop(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return
