"""Tests for dudu._cli — argument parsing and command dispatch."""

from __future__ import annotations

import io
from pathlib import Path
from unittest.mock import patch

import pytest

from dudu._cli import _build_parser, main
from dudu._errors import ConfigError


class TestBuildParser:
    """_build_parser — CLI argument parsing."""

    def test_build_default_args(self) -> None:
        args = _build_parser().parse_args(["build"])
        assert args.command == "build"
        assert args.root == "."
        assert args.output is None
        assert args.source is None
        assert args.resources is None
        assert args.force is None

    def test_build_short_flags(self) -> None:
        args = _build_parser().parse_args(
            ["build", "-o", "public", "-s", "content", "-r", "assets", "-f"]
        )
        assert args.output == "public"
        assert args.source == "content"
        assert args.resources == "assets"
        assert args.force is True

    def test_build_long_flags(self) -> None:
        args = _build_parser().parse_args(["build", "--output", "public", "--force"])
        assert args.output == "public"
        assert args.force is True

    def test_serve_default_args(self) -> None:
        args = _build_parser().parse_args(["serve"])
        assert args.command == "serve"
        assert args.port is None
        assert args.host is None

    def test_serve_port(self) -> None:
        args = _build_parser().parse_args(["serve", "-p", "9000", "--host", "0.0.0.0"])
        assert args.port == 9000
        assert args.host == "0.0.0.0"

    def test_serve_rejects_non_numeric_port(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["serve", "-p", "http"])

    def test_no_command_returns_none(self) -> None:
        assert _build_parser().parse_args([]).command is None

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert "dudu 0.1.0" in capsys.readouterr().out


class TestMain:
    """main() — dispatch and exit codes."""

    @pytest.mark.parametrize("argv", [[], ["help"]])
    def test_help_exits_zero(self, argv: list[str], capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(argv)
        assert exc_info.value.code == 0
        assert "usage: dudu" in capsys.readouterr().out

    def test_build_dispatch(self) -> None:
        with patch("dudu.app.build") as build:
            main(["build", "--root", "site", "-o", "public", "-f"])
        build.assert_called_once_with(
            root="site",
            output_dir="public",
            source_dir=None,
            resource_dir=None,
            force=True,
        )

    def test_serve_dispatch(self) -> None:
        with patch("dudu.app.serve") as serve:
            main(["serve", "-p", "9000"])
        serve.assert_called_once_with(
            root=".",
            port=9000,
            host=None,
            source_dir=None,
            resource_dir=None,
        )

    def test_error_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with (
            patch("dudu.app.build", side_effect=ConfigError("bad key")),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["build"])
        assert exc_info.value.code == 1
        assert "error: bad key" in capsys.readouterr().err

    def test_new_creates_project(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("sys.stdin", io.StringIO("blog\n"))
        main(["new"])
        assert (tmp_path / "blog" / "md" / "index.md").is_file()
        assert "cd blog && dudu serve" in capsys.readouterr().out

    def test_new_existing_folder_exits_one(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "personal-site").mkdir()
        monkeypatch.setattr("sys.stdin", io.StringIO("\n"))
        with pytest.raises(SystemExit) as exc_info:
            main(["new"])
        assert exc_info.value.code == 1
