"""Build orchestrator — renders or copies every stale item of the source tree.

One ``generate()`` call is one build pass:

1. Classify the source tree (any walk failure aborts the pass)
2. Render stale documents through the external renderer
3. Copy stale static files byte-for-byte

The first render or copy failure aborts the pass.  Outputs written earlier
in the pass are kept: every item's staleness is re-evaluated on the next
pass, so partial progress is safe.

The generator is not safe against two simultaneous passes over the same
output tree.  The serve session runs at most one pass at a time.
"""

from __future__ import annotations

import os
import shutil
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from dudu._errors import BuildError, CopyError, RenderError
from dudu.build.classify import ItemKind, SourceItem, classify
from dudu.build.renderer import PandocRenderer
from dudu.build.staleness import is_stale

if TYPE_CHECKING:
    from dudu._types import RelativePath
    from dudu.build.renderer import Renderer
    from dudu.config import DuduConfig
    from dudu.observability.collector import BuildCollector

_DIR_MODE = 0o755


@dataclass(frozen=True, slots=True)
class BuildTarget:
    """Where one source item is read from and written to."""

    item: SourceItem
    input_path: Path
    output_path: Path


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Aggregate result of a successful build pass.

    Attributes:
        rendered: Relative paths of documents that were rendered.
        copied: Relative paths of static files that were copied.
        skipped: Relative paths of items judged fresh.
        output_dir: Absolute path to the output root.
        duration_ms: Wall-clock time for the pass.

    """

    rendered: tuple[RelativePath, ...]
    copied: tuple[RelativePath, ...]
    skipped: tuple[RelativePath, ...]
    output_dir: Path
    duration_ms: float

    @property
    def changed(self) -> int:
        """Number of items actually written."""
        return len(self.rendered) + len(self.copied)


def target_for(
    item: SourceItem,
    source_root: Path,
    output_root: Path,
    output_extension: str = ".html",
) -> BuildTarget:
    """Map a source item onto its output location.

    Renderable items get their extension replaced; static items keep their
    name and relative position.
    """
    rel = Path(item.relative_path)
    if item.kind is ItemKind.RENDERABLE:
        out_rel = rel.with_suffix(output_extension)
    else:
        out_rel = rel
    return BuildTarget(
        item=item,
        input_path=source_root / rel,
        output_path=output_root / out_rel,
    )


class Generator:
    """Turns the source tree into the output tree, one pass per call.

    Args:
        config: Frozen dudu configuration.
        renderer: Document renderer (defaults to pandoc).
        collector: Optional event collector for observability.

    """

    def __init__(
        self,
        config: DuduConfig,
        renderer: Renderer | None = None,
        collector: BuildCollector | None = None,
    ) -> None:
        self._config = config
        self._renderer = renderer if renderer is not None else PandocRenderer(config)
        self._collector = collector

    def generate(
        self,
        output_root: Path,
        *,
        hot_reload: bool = False,
        force: bool = False,
    ) -> BuildResult:
        """Run one build pass into *output_root*.

        Args:
            output_root: Directory the output tree is written to.
            hot_reload: Inject the live-reload client into rendered pages.
            force: Rebuild every item regardless of timestamps.

        Returns:
            BuildResult listing rendered, copied and skipped items.

        Raises:
            ClassifyError: If the source tree cannot be walked.
            RenderError: If the renderer fails for a document.
            CopyError: If a static file cannot be copied.

        """
        start = time.perf_counter()
        rendered: list[RelativePath] = []
        copied: list[RelativePath] = []
        skipped: list[RelativePath] = []

        try:
            classification = classify(
                self._config.source_path,
                renderable_pattern=self._config.renderable_pattern,
                exclude_patterns=self._config.exclude_patterns,
            )

            for item in classification.renderable:
                target = self._target(item, output_root)
                if not is_stale(target.input_path, target.output_path, force):
                    skipped.append(item.relative_path)
                    continue
                self._render(target, hot_reload=hot_reload)
                rendered.append(item.relative_path)

            for item in classification.static:
                target = self._target(item, output_root)
                if not is_stale(target.input_path, target.output_path, force):
                    skipped.append(item.relative_path)
                    continue
                self._copy(target)
                copied.append(item.relative_path)
        except BuildError as exc:
            self._record_pass(output_root, rendered, copied, skipped, start, error=str(exc))
            raise

        duration_ms = self._record_pass(output_root, rendered, copied, skipped, start)
        return BuildResult(
            rendered=tuple(rendered),
            copied=tuple(copied),
            skipped=tuple(skipped),
            output_dir=output_root,
            duration_ms=duration_ms,
        )

    def _target(self, item: SourceItem, output_root: Path) -> BuildTarget:
        return target_for(
            item,
            self._config.source_path,
            output_root,
            self._config.output_extension,
        )

    def _render(self, target: BuildTarget, *, hot_reload: bool) -> None:
        t0 = time.perf_counter()
        _make_parent(target.output_path, RenderError)
        self._renderer.render(target.input_path, target.output_path, hot_reload=hot_reload)
        print(f"  updated: {target.output_path}", file=sys.stderr)
        if self._collector is not None:
            self._collector.record_item(
                "render",
                target.item.relative_path,
                str(target.output_path),
                duration_ms=(time.perf_counter() - t0) * 1000,
            )

    def _copy(self, target: BuildTarget) -> None:
        t0 = time.perf_counter()
        _make_parent(target.output_path, CopyError)
        try:
            # copyfile, not copy2: the copy must be newer than its source.
            shutil.copyfile(target.input_path, target.output_path)
        except OSError as exc:
            msg = f"Copying {target.input_path} to {target.output_path} failed: {exc}"
            raise CopyError(msg) from exc
        print(f"  copied: {target.output_path}", file=sys.stderr)
        if self._collector is not None:
            self._collector.record_item(
                "copy",
                target.item.relative_path,
                str(target.output_path),
                duration_ms=(time.perf_counter() - t0) * 1000,
            )

    def _record_pass(
        self,
        output_root: Path,
        rendered: list[RelativePath],
        copied: list[RelativePath],
        skipped: list[RelativePath],
        start: float,
        *,
        error: str = "",
    ) -> float:
        duration_ms = (time.perf_counter() - start) * 1000
        if self._collector is not None:
            self._collector.record_pass(
                str(output_root),
                rendered=len(rendered),
                copied=len(copied),
                skipped=len(skipped),
                error=error,
                duration_ms=duration_ms,
            )
        return duration_ms


def _make_parent(path: Path, error_cls: type[BuildError]) -> None:
    """Create the parent directory of *path*."""
    try:
        os.makedirs(path.parent, mode=_DIR_MODE, exist_ok=True)
    except OSError as exc:
        msg = f"Cannot create directory {path.parent}: {exc}"
        raise error_cls(msg) from exc
