"""Watch layer — recursive filesystem change detection."""

from dudu.watch.watcher import ChangeEvent, Operation, RecursiveWatcher

__all__ = ["ChangeEvent", "Operation", "RecursiveWatcher"]
