"""Tests for dudu.banner — startup banner output."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from unittest.mock import patch

from dudu.banner import format_banner, print_banner
from dudu.config import DuduConfig


class TestPrintBanner:
    """Tests for the startup banner."""

    def _capture_banner(self, mode: str, **kwargs: object) -> str:
        """Call print_banner and capture stderr output."""
        buf = io.StringIO()
        with patch.object(sys, "stderr", buf):
            config = DuduConfig(root=Path("/tmp/test-site"), **kwargs)
            print_banner(config, 5, mode)
        return buf.getvalue()

    def test_build_mode_banner(self) -> None:
        output = self._capture_banner("build")

        assert "dudu" in output
        assert "v0.1.0" in output
        assert "5 source items" in output
        assert "output:" in output
        assert "static" in output
        assert "(forced)" not in output

    def test_forced_build(self) -> None:
        output = self._capture_banner("build", force=True)
        assert "(forced)" in output

    def test_serve_mode_banner(self) -> None:
        output = self._capture_banner("serve", port=9000)

        assert "5 source items" in output
        assert "/ws" in output
        assert "http://127.0.0.1:9000" in output
        assert "output:" not in output

    def test_singular_item(self) -> None:
        output = format_banner(DuduConfig(root=Path("/tmp/x")), 1, "build")
        assert "1 source item" in output
        assert "1 source items" not in output

    def test_warnings_listed(self) -> None:
        output = format_banner(
            DuduConfig(root=Path("/tmp/x")),
            0,
            "build",
            warnings=["renderer 'pandoc' not found on PATH"],
        )
        assert "renderer 'pandoc' not found on PATH" in output
