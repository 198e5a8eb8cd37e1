"""Startup banner — mode-aware status output.

Prints a startup banner with timing and status indicators.  Detects
``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dudu._types import DuduMode
    from dudu.config import DuduConfig


# ---------------------------------------------------------------------------
# ANSI helpers: respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""
_MAGENTA = "\033[35m" if _COLOR else ""


_MODE_STYLES: dict[str, tuple[str, str]] = {
    "build": (_YELLOW, "build"),
    "serve": (_GREEN, "serve"),
}


def _mode_badge(mode: str) -> str:
    """Return a styled [mode] badge."""
    color, label = _MODE_STYLES.get(mode, (_DIM, mode))
    return f"{color}[{label}]{_RESET}"


def _clickable_url(url: str) -> str:
    """Wrap *url* in an OSC 8 hyperlink escape if the terminal supports it."""
    if not _COLOR:
        return url
    return f"\033]8;;{url}\033\\{_BOLD}{_CYAN}{url}{_RESET}\033]8;;\033\\"


def format_banner(
    config: DuduConfig,
    item_count: int,
    mode: DuduMode,
    *,
    warnings: list[str] | None = None,
) -> str:
    """Return the startup banner as a string.

    Args:
        config: Resolved DuduConfig.
        item_count: Number of source items found.
        mode: ``"build"`` or ``"serve"``.
        warnings: Optional list of warning messages to display.

    """
    from dudu import __version__

    badge = _mode_badge(mode)
    header = f"  {_MAGENTA}{_BOLD}dudu{_RESET} {_DIM}v{__version__}{_RESET}  {badge}"

    lines: list[str] = [
        "",
        header,
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]

    items_label = "item" if item_count == 1 else "items"
    lines.append(f"  {_DIM}├─{_RESET} {item_count} source {items_label}")
    lines.append(f"  {_DIM}├─{_RESET} source: {_DIM}{config.source_path}{_RESET}")
    lines.append(f"  {_DIM}├─{_RESET} resources: {_DIM}{config.resource_path}{_RESET}")

    if mode == "build":
        forced = f" {_YELLOW}(forced){_RESET}" if config.force else ""
        lines.append(f"  {_DIM}└─{_RESET} output: {_DIM}{config.output_path}{_RESET}{forced}")
    else:
        lines.append(
            f"  {_DIM}└─{_RESET} {_GREEN}live{_RESET} "
            f"— WebSocket on {_DIM}/ws{_RESET}"
        )
        url = f"http://{config.host}:{config.port}"
        lines.append("")
        lines.append(f"  {_clickable_url(url)}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")
    return "\n".join(lines)


def print_banner(
    config: DuduConfig,
    item_count: int,
    mode: DuduMode,
    *,
    warnings: list[str] | None = None,
) -> None:
    """Print the dudu startup banner to stderr."""
    print(format_banner(config, item_count, mode, warnings=warnings), file=sys.stderr)
