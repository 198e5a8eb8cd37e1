"""External renderer — pandoc invoked as a subprocess.

Documents are converted with a fixed option set: standalone output, the
site stylesheet, a syntax-highlight theme, the page template and the
navbar/footer fragments from the project's resource directory.  In
hot-reload mode an extra header include injects the live-reload client.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from dudu._errors import RenderError
from dudu.reload.snippet import bundled_snippet_path

if TYPE_CHECKING:
    from dudu.config import DuduConfig


class Renderer(Protocol):
    """Anything that can turn one source document into one output file."""

    def render(self, input_path: Path, output_path: Path, *, hot_reload: bool) -> None: ...


class PandocRenderer:
    """Runs pandoc for a single document.

    Args:
        config: Frozen dudu configuration (renderer executable, resource dir).

    """

    def __init__(self, config: DuduConfig) -> None:
        self._executable = config.renderer
        self._resources = config.resource_path

    @property
    def hot_reload_include(self) -> Path:
        """The header fragment injected in hot-reload mode.

        The project's own ``hot-reload.html`` wins; otherwise the snippet
        bundled with dudu is used.
        """
        project_include = self._resources / "hot-reload.html"
        if project_include.is_file():
            return project_include
        return bundled_snippet_path()

    def command(self, input_path: Path, output_path: Path, *, hot_reload: bool) -> list[str]:
        """Build the pandoc command line for one document."""
        res = self._resources
        cmd = [
            self._executable,
            "--standalone",
            "--css=/style.css",
            f"--highlight-style={res / 'code-highlight.theme'}",
            "--variable=lang:en",
            f"--include-before-body={res / 'navbar.html'}",
            f"--include-after-body={res / 'footer.html'}",
            f"--template={res / 'template.html'}",
        ]
        if hot_reload:
            cmd.append(f"--include-in-header={self.hot_reload_include}")
        cmd.extend([str(input_path), "-o", str(output_path)])
        return cmd

    def render(self, input_path: Path, output_path: Path, *, hot_reload: bool) -> None:
        """Render *input_path* to *output_path*.

        Raises:
            RenderError: If pandoc cannot be started or exits non-zero.

        """
        cmd = self.command(input_path, output_path, hot_reload=hot_reload)
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as exc:
            msg = f"Cannot run {self._executable!r} for {input_path}: {exc}"
            raise RenderError(msg) from exc
        if proc.returncode != 0:
            detail = proc.stderr.strip() or f"exit status {proc.returncode}"
            msg = f"Rendering {input_path} failed: {detail}"
            raise RenderError(msg)
