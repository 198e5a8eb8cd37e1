"""Live-reload client — the header include injected in hot-reload mode.

The include is a small script that opens a WebSocket to the dev server's
``/ws`` endpoint and reloads the page whenever a frame arrives.  It is
shipped as part of the project scaffold (``resources/hot-reload.html``) so
projects can customize it; the bundled copy is used when a project has none.
"""

from __future__ import annotations

from pathlib import Path

LIVE_RELOAD_PATH = "/ws"


def bundled_snippet_path() -> Path:
    """Return the absolute path to the bundled hot-reload include."""
    return Path(__file__).parent.parent / "scaffold" / "templates" / "resources" / "hot-reload.html"
