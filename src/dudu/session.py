"""Serve session — wires watcher, generator, hub and server together.

Lifecycle::

    STARTING  create the staging output, start hub / server / watcher,
              run one full build
    RUNNING   rebuild on every write event, broadcast after each rebuild
    DRAINING  set the shared stop signal, wait for every worker
    STOPPED   staging output removed

The session leaves RUNNING when ``request_stop()`` is called (the ``serve``
entry point wires it to SIGINT/SIGTERM) or when a worker records the first
session-fatal error.  DRAINING always runs to completion.

Workers:
    hub       ``LiveReloadHub.run`` — owns the client set
    server    ``DevServer.serve`` — HTTP + WebSocket
    watcher   consumes ``RecursiveWatcher.events()`` and requests rebuilds
    builder   single-flight rebuild loop; requests arriving mid-build
              coalesce into exactly one more build

Build failures are logged and do not end the session.  Watcher and server
failures do.
"""

from __future__ import annotations

import asyncio
import shutil
import sys
import time
from enum import StrEnum
from typing import TYPE_CHECKING

from dudu._errors import BuildError, DuduError, ServerError, WatchError
from dudu._lifecycle import FirstError, next_or_stop
from dudu.build.generator import Generator
from dudu.observability.collector import BuildCollector
from dudu.reload.hub import LiveReloadHub
from dudu.server import DevServer
from dudu.watch.watcher import RecursiveWatcher

if TYPE_CHECKING:
    from collections.abc import Awaitable
    from pathlib import Path

    from dudu.build.renderer import Renderer
    from dudu.config import DuduConfig


class SessionState(StrEnum):
    """Lifecycle states of a serve session."""

    STARTING = "starting"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class DevSession:
    """One ``dudu serve`` run, from startup to cleanup.

    Args:
        config: Frozen dudu configuration.
        renderer: Document renderer (defaults to pandoc).
        collector: Event collector (a fresh one is created if omitted).
        watcher: Change watcher (defaults to one over the source tree).
        server: Dev server (defaults to one over the staging output).

    """

    def __init__(
        self,
        config: DuduConfig,
        *,
        renderer: Renderer | None = None,
        collector: BuildCollector | None = None,
        watcher: RecursiveWatcher | None = None,
        server: DevServer | None = None,
    ) -> None:
        self._config = config
        self._output_root = config.transient_path
        self._collector = collector if collector is not None else BuildCollector()
        self._generator = Generator(config, renderer=renderer, collector=self._collector)
        self._hub = LiveReloadHub()
        self._watcher = watcher if watcher is not None else RecursiveWatcher.from_config(config)
        self._server = (
            server
            if server is not None
            else DevServer(config, self._output_root, self._hub, self._collector)
        )
        self._stop = asyncio.Event()
        self._interrupt = asyncio.Event()
        self._first_error = FirstError()
        self._rebuild_requested = asyncio.Event()
        self._state = SessionState.STOPPED
        self._builds = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        """Current lifecycle state."""
        return self._state

    @property
    def output_root(self) -> Path:
        """Staging directory the session builds into."""
        return self._output_root

    @property
    def hub(self) -> LiveReloadHub:
        """The session's live-reload hub."""
        return self._hub

    @property
    def collector(self) -> BuildCollector:
        """The session's event collector."""
        return self._collector

    @property
    def builds(self) -> int:
        """Number of build passes attempted so far."""
        return self._builds

    @property
    def first_error(self) -> BaseException | None:
        """The session-fatal error, if one occurred."""
        return self._first_error.error

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def request_stop(self) -> None:
        """Ask a running session to drain and stop."""
        self._interrupt.set()

    async def run(self) -> None:
        """Run the session until stopped, then clean up.

        Raises:
            DuduError: The first session-fatal error, after draining.

        """
        self._transition(SessionState.STARTING)
        workers: list[asyncio.Task[None]] = []
        try:
            self._output_root.mkdir(parents=True, exist_ok=True)
            workers.append(asyncio.create_task(self._hub.run(self._stop), name="dudu-hub"))
            workers.append(
                asyncio.create_task(
                    self._guard(self._server.serve(self._stop), ServerError),
                    name="dudu-server",
                )
            )
            self._watcher.start()
            print(f"  Watching for changes in {self._watcher.root}", file=sys.stderr)
            workers.append(
                asyncio.create_task(self._guard(self._watch(), WatchError), name="dudu-watcher")
            )

            await self._rebuild(broadcast=False)
            workers.append(asyncio.create_task(self._builder(), name="dudu-builder"))

            self._transition(SessionState.RUNNING)
            await self._wait_for_shutdown()
        except DuduError as exc:
            self._first_error.set(exc)
        finally:
            self._transition(SessionState.DRAINING)
            await self._drain(workers)
            self._transition(SessionState.STOPPED)

        error = self._first_error.error
        if error is not None:
            raise error

    # ------------------------------------------------------------------
    # Workers
    # ------------------------------------------------------------------

    async def _guard(self, work: Awaitable[None], error_cls: type[DuduError]) -> None:
        """Run a session-fatal worker, recording its failure as the first error."""
        try:
            await work
        except DuduError as exc:
            self._first_error.set(exc)
        except Exception as exc:
            self._first_error.set(error_cls(f"{type(exc).__name__}: {exc}"))

    async def _watch(self) -> None:
        closer = asyncio.create_task(self._close_watcher_on_stop())
        try:
            async for event in self._watcher.events():
                self._collector.record_change(
                    str(event.path), event.operation.value, actionable=event.actionable
                )
                if event.actionable:
                    self._rebuild_requested.set()
        finally:
            closer.cancel()
            self._watcher.close()

    async def _close_watcher_on_stop(self) -> None:
        await self._stop.wait()
        self._watcher.close()

    async def _builder(self) -> None:
        """Single-flight rebuild loop."""
        while True:
            requested = await next_or_stop(self._rebuild_requested.wait(), self._stop)
            if requested is None:
                return
            self._rebuild_requested.clear()
            await self._rebuild(broadcast=True)

    async def _rebuild(self, *, broadcast: bool) -> bool:
        """Run one hot-reload build pass in a worker thread.

        Returns True if the pass succeeded.  The broadcast follows the pass
        whether or not it succeeded, unless ``reload_on_failure`` is off.

        """
        self._builds += 1
        t0 = time.perf_counter()
        try:
            result = await asyncio.to_thread(
                self._generator.generate,
                self._output_root,
                hot_reload=True,
                force=False,
            )
        except BuildError as exc:
            print(f"  error: {exc}", file=sys.stderr)
            ok = False
        else:
            if result.changed:
                elapsed = (time.perf_counter() - t0) * 1000
                print(f"  rebuilt {result.changed} item(s) in {elapsed:.0f}ms", file=sys.stderr)
            ok = True

        if broadcast and (ok or self._config.reload_on_failure) and not self._stop.is_set():
            payload = self._config.reload_payload
            self._collector.record_broadcast(
                payload, clients=self._hub.client_count, build_ok=ok
            )
            self._hub.broadcast(payload)
        return ok

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def _wait_for_shutdown(self) -> None:
        interrupted = asyncio.create_task(self._interrupt.wait())
        failed = asyncio.create_task(self._first_error.wait())
        try:
            await asyncio.wait({interrupted, failed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            interrupted.cancel()
            failed.cancel()
        error = self._first_error.error
        if error is not None:
            print(f"  error: {error}", file=sys.stderr)

    async def _drain(self, workers: list[asyncio.Task[None]]) -> None:
        """Stop every worker, then remove the staging output."""
        self._stop.set()
        self._watcher.close()
        if workers:
            results = await asyncio.gather(*workers, return_exceptions=True)
            for result in results:
                if isinstance(result, BaseException) and not isinstance(
                    result, asyncio.CancelledError
                ):
                    self._first_error.set(result)
        shutil.rmtree(self._output_root, ignore_errors=True)

    def _transition(self, state: SessionState) -> None:
        self._state = state
        self._collector.record_transition(state.value)
