"""Dudu configuration.

DuduConfig is the central configuration object, frozen after creation and
passed explicitly into every component.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class DuduConfig:
    """Configuration for a dudu project.

    Attributes:
        root: Path to the project root (contains md/, resources/, etc.).
              Always resolved to an absolute path on construction.
        source_dir: Directory containing the markdown source tree.
        output_dir: Output directory for ``dudu build``.
        resource_dir: Directory holding the pandoc template, theme and
            include fragments.
        transient_dir: Staging output directory for ``dudu serve``; removed
            when the session shuts down.
        host: Bind address for the dev server.
        port: Bind port for the dev server.
        force: Rebuild every item regardless of timestamps.
        renderer: Name or path of the pandoc executable.
        renderable_pattern: Glob matching documents that need rendering.
        output_extension: Extension given to rendered documents.
        exclude_patterns: Globs for editor artifacts that are never built.
        shutdown_timeout: Seconds the dev server waits for in-flight
            requests before forcing closure.
        watch_debounce_ms: Debounce window of the filesystem watcher.
        watch_step_ms: Polling step of the filesystem watcher.
        client_queue_size: Outbound buffer of each live-reload client.
        reload_payload: Text frame broadcast after every rebuild.
        reload_on_failure: Broadcast even when the rebuild failed.

    """

    root: Path = field(default_factory=Path.cwd)
    source_dir: str = "md"
    output_dir: str = "static"
    resource_dir: str = "resources"
    transient_dir: str = ".dudu"
    host: str = "127.0.0.1"
    port: int = 8080
    force: bool = False
    renderer: str = "pandoc"
    renderable_pattern: str = "*.md"
    output_extension: str = ".html"
    exclude_patterns: tuple[str, ...] = ("*.swp", "*.swo", "*.bak", "*~")
    shutdown_timeout: float = 1.0
    watch_debounce_ms: int = 50
    watch_step_ms: int = 50
    client_queue_size: int = 16
    reload_payload: str = "update"
    reload_on_failure: bool = True

    def __post_init__(self) -> None:
        # Resolve root to absolute so that watchfiles (which returns
        # absolute paths) can be compared via Path.relative_to().
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        if isinstance(self.exclude_patterns, list):
            object.__setattr__(self, "exclude_patterns", tuple(self.exclude_patterns))

    def _resolve(self, value: str) -> Path:
        path = Path(value)
        if path.is_absolute():
            return path
        return self.root / path

    @property
    def source_path(self) -> Path:
        """Absolute path to the markdown source tree."""
        return self._resolve(self.source_dir)

    @property
    def output_path(self) -> Path:
        """Absolute path to the build output directory."""
        return self._resolve(self.output_dir)

    @property
    def resource_path(self) -> Path:
        """Absolute path to the renderer resource directory."""
        return self._resolve(self.resource_dir)

    @property
    def transient_path(self) -> Path:
        """Absolute path to the staging directory used by ``serve``."""
        return self._resolve(self.transient_dir)
