"""Tests for dudu.build.staleness — the mtime-based freshness check."""

from __future__ import annotations

import os
from pathlib import Path

from dudu.build.staleness import is_stale


def _set_mtime(path: Path, ns: int) -> None:
    os.utime(path, ns=(ns, ns))


class TestIsStale:
    """is_stale() — skip work only when the output is provably newer."""

    def test_output_newer_is_fresh(self, tmp_path: Path) -> None:
        src, out = tmp_path / "a.md", tmp_path / "a.html"
        src.write_text("a")
        out.write_text("b")
        _set_mtime(src, 1_000_000_000_000)
        _set_mtime(out, 2_000_000_000_000)
        assert is_stale(src, out) is False

    def test_input_newer_is_stale(self, tmp_path: Path) -> None:
        src, out = tmp_path / "a.md", tmp_path / "a.html"
        src.write_text("a")
        out.write_text("b")
        _set_mtime(src, 2_000_000_000_000)
        _set_mtime(out, 1_000_000_000_000)
        assert is_stale(src, out) is True

    def test_equal_mtimes_are_stale(self, tmp_path: Path) -> None:
        src, out = tmp_path / "a.md", tmp_path / "a.html"
        src.write_text("a")
        out.write_text("b")
        _set_mtime(src, 1_500_000_000_000)
        _set_mtime(out, 1_500_000_000_000)
        assert is_stale(src, out) is True

    def test_missing_output_is_stale(self, tmp_path: Path) -> None:
        src = tmp_path / "a.md"
        src.write_text("a")
        assert is_stale(src, tmp_path / "missing.html") is True

    def test_missing_input_is_stale(self, tmp_path: Path) -> None:
        out = tmp_path / "a.html"
        out.write_text("b")
        assert is_stale(tmp_path / "missing.md", out) is True

    def test_force_overrides_fresh(self, tmp_path: Path) -> None:
        src, out = tmp_path / "a.md", tmp_path / "a.html"
        src.write_text("a")
        out.write_text("b")
        _set_mtime(src, 1_000_000_000_000)
        _set_mtime(out, 2_000_000_000_000)
        assert is_stale(src, out, force=True) is True
