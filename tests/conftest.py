"""Shared test fixtures for dudu."""

from __future__ import annotations

import asyncio
import os
import socket
import time
from collections.abc import Callable
from pathlib import Path

import pytest
import websockets

from dudu._errors import RenderError


class FakeRenderer:
    """Renderer double: records calls and writes a trivial HTML file.

    Documents whose file name is in ``fail_on`` raise RenderError.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[Path, Path, bool]] = []
        self.fail_on: set[str] = set()

    def render(self, input_path: Path, output_path: Path, *, hot_reload: bool) -> None:
        self.calls.append((input_path, output_path, hot_reload))
        if input_path.name in self.fail_on:
            msg = f"Rendering {input_path} failed: pandoc: boom"
            raise RenderError(msg)
        body = input_path.read_text()
        output_path.write_text(f"<html><body>{body}</body></html>\n")

    @property
    def rendered_names(self) -> list[str]:
        return [call[0].name for call in self.calls]


def age(path: Path, seconds: float = 100.0) -> None:
    """Move *path*'s mtime into the past so fresh outputs are provably newer."""
    t = time.time() - seconds
    os.utime(path, (t, t))


def touch_after(path: Path, other: Path) -> None:
    """Give *path* an mtime strictly after *other*'s."""
    t_ns = other.stat().st_mtime_ns + 1_000_000_000
    os.utime(path, ns=(t_ns, t_ns))


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


async def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        assert time.monotonic() < deadline, "condition not reached in time"
        await asyncio.sleep(0.01)


async def open_live_reload(port: int, timeout: float = 5.0):
    """Open a real WebSocket to a dev server, retrying until it listens."""
    deadline = time.monotonic() + timeout
    while True:
        try:
            return await websockets.connect(f"ws://127.0.0.1:{port}/ws")
        except OSError:
            if time.monotonic() > deadline:
                raise
            await asyncio.sleep(0.05)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a minimal dudu project.

    Returns the project root with md/ (two documents, a stylesheet, an
    image and an editor swap file) and resources/.  All sources are aged
    so that outputs written by a test are strictly newer.
    """
    md = tmp_path / "md"
    md.mkdir()
    (md / "index.md").write_text("# Welcome\n\nHome page.\n")
    (md / "style.css").write_text("body { margin: 0; }\n")
    (md / "draft.md.swp").write_bytes(b"\x00swap")

    posts = md / "posts"
    posts.mkdir()
    (posts / "hello.md").write_text("# Hello\n")
    (posts / "logo.png").write_bytes(bytes(range(256)))

    resources = tmp_path / "resources"
    resources.mkdir()
    for name in ("template.html", "navbar.html", "footer.html", "code-highlight.theme"):
        (resources / name).write_text("")

    for path in md.rglob("*"):
        if path.is_file():
            age(path)
    return tmp_path


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()
