"""Recursive file watcher — single-directory subscriptions, recursive registration.

The low-level primitive (``watchfiles.awatch`` with ``recursive=False``)
watches individual directories.  ``RecursiveWatcher`` keeps the set of
registered directories in step with the source tree:

- ``start()`` registers every directory under the root
- a created directory is registered together with its existing subtree,
  files already inside it are reported as writes, and the subscription is
  renewed so events from inside it are seen
- a removed directory is unregistered along with all its descendants
- once a renewed subscription is live, a write of the root is reported to
  cover writes made while the previous subscription was torn down
- ``close()`` removes the root registration, which removes everything

Events come out of ``events()`` in the order the primitive reports them.
File events whose name matches an exclusion glob are dropped, using the
same globs as the classifier; directories are always followed.
"""

from __future__ import annotations

import asyncio
import os
from contextlib import aclosing
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change, awatch

from dudu._errors import WatchError
from dudu.build.classify import is_excluded

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from dudu.config import DuduConfig


class Operation(StrEnum):
    """Normalized filesystem operation."""

    CREATE = "create"
    WRITE = "write"
    REMOVE = "remove"
    RENAME = "rename"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A file change detected by the watcher.

    Attributes:
        path: Absolute path to the changed entry.
        operation: Type of filesystem change.

    """

    path: Path
    operation: Operation

    @property
    def actionable(self) -> bool:
        """Whether this change should trigger a rebuild."""
        return self.operation is Operation.WRITE


# Mapping from watchfiles Change enum to our operations.  watchfiles
# reports renames as a delete plus an add.
_OPERATION_MAP: dict[Change, Operation] = {
    Change.added: Operation.CREATE,
    Change.modified: Operation.WRITE,
    Change.deleted: Operation.REMOVE,
}

# How long a renewed subscription waits before its first (possibly empty)
# batch, which confirms the new watches are in place.
_CATCH_UP_TIMEOUT_MS = 100


class RecursiveWatcher:
    """Watches a directory tree, following directories as they appear.

    Args:
        root: Directory to watch.
        debounce_ms: Window in which the primitive groups raw events.
        step_ms: Polling step of the primitive.
        exclude_patterns: Globs for file names whose events are dropped.

    """

    def __init__(
        self,
        root: Path,
        *,
        debounce_ms: int = 50,
        step_ms: int = 50,
        exclude_patterns: tuple[str, ...] = (),
    ) -> None:
        self._root = root.resolve()
        self._debounce_ms = debounce_ms
        self._step_ms = step_ms
        self._registered: set[Path] = set()
        self._renew = asyncio.Event()
        self._closed = False
        self._exclude_patterns = exclude_patterns

    @classmethod
    def from_config(cls, config: DuduConfig) -> RecursiveWatcher:
        """Create a watcher for the project's source tree."""
        return cls(
            config.source_path,
            debounce_ms=config.watch_debounce_ms,
            step_ms=config.watch_step_ms,
            exclude_patterns=config.exclude_patterns,
        )

    @property
    def root(self) -> Path:
        """The watched root directory."""
        return self._root

    @property
    def registered(self) -> frozenset[Path]:
        """Directories currently subscribed (snapshot)."""
        return frozenset(self._registered)

    @property
    def closed(self) -> bool:
        """Whether ``close()`` has been called."""
        return self._closed

    def start(self) -> None:
        """Register the root and every directory below it.

        Raises:
            WatchError: If the tree cannot be walked.

        """
        if self._closed:
            msg = "watcher already closed"
            raise WatchError(msg)
        self.add_recursive(self._root)

    def add_recursive(self, path: Path) -> list[Path]:
        """Register *path* and every directory below it.

        Directories already registered are left alone.  Returns the files
        found inside newly registered directories.

        Raises:
            WatchError: If *path* is missing or cannot be walked.

        """
        if not path.is_dir():
            msg = f"Cannot watch {path}: not a directory"
            raise WatchError(msg)

        def _on_error(exc: OSError) -> None:
            msg = f"Cannot watch {exc.filename or path}: {exc.strerror or exc}"
            raise WatchError(msg) from exc

        files: list[Path] = []
        for dirpath, _dirnames, filenames in os.walk(path, onerror=_on_error):
            current = Path(dirpath)
            if current in self._registered:
                continue
            self._registered.add(current)
            files.extend(current / name for name in filenames)
        self._renew.set()
        return files

    def remove_recursive(self, path: Path) -> int:
        """Unregister *path* and every registered directory below it.

        Returns the number of directories removed.
        """
        doomed = {d for d in self._registered if d == path or d.is_relative_to(path)}
        self._registered -= doomed
        if doomed:
            self._renew.set()
        return len(doomed)

    def close(self) -> None:
        """Stop watching.  Unblocks any in-flight ``events()`` iteration."""
        if self._closed:
            return
        self._closed = True
        self.remove_recursive(self._root)
        self._renew.set()

    async def events(self) -> AsyncIterator[ChangeEvent]:
        """Yield normalized change events until ``close()`` is called.

        Raises:
            WatchError: If the underlying primitive fails.

        """
        catch_up = False
        while not self._closed:
            self._renew.clear()
            paths = sorted(self._registered)
            if not paths:
                msg = f"Nothing left to watch under {self._root}"
                raise WatchError(msg)

            stream = awatch(
                *paths,
                stop_event=self._renew,
                recursive=False,
                debounce=self._debounce_ms,
                step=self._step_ms,
                watch_filter=None,
                rust_timeout=_CATCH_UP_TIMEOUT_MS if catch_up else None,
                yield_on_timeout=catch_up,
            )
            try:
                async with aclosing(stream):
                    async for raw_changes in stream:
                        if catch_up:
                            catch_up = False
                            if self._closed:
                                return
                            yield ChangeEvent(path=self._root, operation=Operation.WRITE)
                        for change_type, path_str in sorted(raw_changes, key=lambda c: c[1]):
                            for event in self._normalize(change_type, Path(path_str)):
                                if self._closed:
                                    return
                                yield event
                        if self._renew.is_set():
                            break
            except (OSError, RuntimeError) as exc:
                if self._closed:
                    return
                msg = f"Watching {self._root} failed: {exc}"
                raise WatchError(msg) from exc
            catch_up = True

    def _normalize(self, change_type: Change, path: Path) -> list[ChangeEvent]:
        operation = _OPERATION_MAP.get(change_type, Operation.WRITE)
        event = ChangeEvent(path=path, operation=operation)

        if operation is Operation.CREATE and path.is_dir():
            try:
                existing = self.add_recursive(path)
            except WatchError:
                # Created and removed again before we could look inside.
                if path.exists():
                    raise
                existing = []
            return [event] + [
                ChangeEvent(path=f, operation=Operation.WRITE)
                for f in sorted(existing)
                if not is_excluded(f.name, self._exclude_patterns)
            ]
        if operation is Operation.REMOVE and path in self._registered:
            self.remove_recursive(path)
            return [event]
        if is_excluded(path.name, self._exclude_patterns):
            return []
        return [event]
