"""Tests for dudu.build.renderer — the pandoc command line and its failures."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from dudu._errors import RenderError
from dudu.build import renderer as renderer_module
from dudu.build.renderer import PandocRenderer
from dudu.config import DuduConfig
from dudu.reload.snippet import bundled_snippet_path


@pytest.fixture
def pandoc(project: Path) -> PandocRenderer:
    return PandocRenderer(DuduConfig(root=project))


class TestCommand:
    """PandocRenderer.command() — fixed option set."""

    def test_fixed_flags(self, project: Path, pandoc: PandocRenderer) -> None:
        res = project / "resources"
        cmd = pandoc.command(Path("in.md"), Path("out.html"), hot_reload=False)

        assert cmd[0] == "pandoc"
        assert "--standalone" in cmd
        assert "--css=/style.css" in cmd
        assert f"--highlight-style={res / 'code-highlight.theme'}" in cmd
        assert "--variable=lang:en" in cmd
        assert f"--include-before-body={res / 'navbar.html'}" in cmd
        assert f"--include-after-body={res / 'footer.html'}" in cmd
        assert f"--template={res / 'template.html'}" in cmd
        assert cmd[-3:] == ["in.md", "-o", "out.html"]

    def test_no_header_include_without_hot_reload(self, pandoc: PandocRenderer) -> None:
        cmd = pandoc.command(Path("in.md"), Path("out.html"), hot_reload=False)
        assert not any(arg.startswith("--include-in-header") for arg in cmd)

    def test_hot_reload_uses_bundled_snippet(self, pandoc: PandocRenderer) -> None:
        cmd = pandoc.command(Path("in.md"), Path("out.html"), hot_reload=True)
        assert f"--include-in-header={bundled_snippet_path()}" in cmd

    def test_project_snippet_preferred(self, project: Path, pandoc: PandocRenderer) -> None:
        own = project / "resources" / "hot-reload.html"
        own.write_text("<script></script>")
        cmd = pandoc.command(Path("in.md"), Path("out.html"), hot_reload=True)
        assert f"--include-in-header={own}" in cmd

    def test_custom_executable(self, project: Path) -> None:
        pandoc = PandocRenderer(DuduConfig(root=project, renderer="/opt/pandoc/bin/pandoc"))
        cmd = pandoc.command(Path("in.md"), Path("out.html"), hot_reload=False)
        assert cmd[0] == "/opt/pandoc/bin/pandoc"


class TestRender:
    """PandocRenderer.render() — subprocess outcomes."""

    def test_success(
        self, pandoc: PandocRenderer, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        seen: list[list[str]] = []

        def fake_run(cmd: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
            seen.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr(renderer_module.subprocess, "run", fake_run)
        pandoc.render(tmp_path / "a.md", tmp_path / "a.html", hot_reload=False)
        assert seen and seen[0][-1] == str(tmp_path / "a.html")

    def test_nonzero_exit_carries_stderr(
        self, pandoc: PandocRenderer, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        def fake_run(cmd: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
            return subprocess.CompletedProcess(cmd, 64, stdout="", stderr="unknown option\n")

        monkeypatch.setattr(renderer_module.subprocess, "run", fake_run)
        with pytest.raises(RenderError, match="unknown option") as exc_info:
            pandoc.render(tmp_path / "a.md", tmp_path / "a.html", hot_reload=False)
        assert "a.md" in str(exc_info.value)

    def test_nonzero_exit_without_stderr(
        self, pandoc: PandocRenderer, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        def fake_run(cmd: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
            return subprocess.CompletedProcess(cmd, 3, stdout="", stderr="")

        monkeypatch.setattr(renderer_module.subprocess, "run", fake_run)
        with pytest.raises(RenderError, match="exit status 3"):
            pandoc.render(tmp_path / "a.md", tmp_path / "a.html", hot_reload=False)

    def test_missing_executable(self, project: Path, tmp_path: Path) -> None:
        pandoc = PandocRenderer(DuduConfig(root=project, renderer="dudu-no-such-pandoc"))
        (tmp_path / "a.md").write_text("# a")
        with pytest.raises(RenderError, match="dudu-no-such-pandoc"):
            pandoc.render(tmp_path / "a.md", tmp_path / "a.html", hot_reload=False)
