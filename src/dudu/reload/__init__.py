"""Live-reload layer — client registry, fan-out and the browser snippet."""

from dudu.reload.hub import HubClient, LiveReloadHub
from dudu.reload.snippet import LIVE_RELOAD_PATH, bundled_snippet_path

__all__ = [
    "LIVE_RELOAD_PATH",
    "HubClient",
    "LiveReloadHub",
    "bundled_snippet_path",
]
