"""Path classifier — splits a source tree into renderable and static items.

Every build pass classifies the source tree afresh.  Files matching an
exclusion glob (editor swap and backup files) are dropped, files matching
the renderable glob are rendered, everything else is copied verbatim.

A walk that cannot see the whole tree fails the pass: a partial listing
would silently skip user content.
"""

from __future__ import annotations

import fnmatch
import os
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path, PurePosixPath

from dudu._errors import ClassifyError
from dudu._types import RelativePath


class ItemKind(StrEnum):
    """How a source file reaches the output tree."""

    RENDERABLE = "renderable"
    STATIC = "static"


@dataclass(frozen=True, slots=True)
class SourceItem:
    """A file in the source tree.

    Attributes:
        relative_path: Slash-normalized path relative to the source root.
        kind: Whether the file is rendered or copied.

    """

    relative_path: RelativePath
    kind: ItemKind


@dataclass(frozen=True, slots=True)
class Classification:
    """Result of classifying a source tree, both halves sorted by path."""

    renderable: tuple[SourceItem, ...]
    static: tuple[SourceItem, ...]

    def __len__(self) -> int:
        return len(self.renderable) + len(self.static)


def is_excluded(name: str, exclude_patterns: tuple[str, ...]) -> bool:
    """Whether a file name matches one of the exclusion globs."""
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in exclude_patterns)


def classify_name(
    name: str,
    *,
    renderable_pattern: str = "*.md",
    exclude_patterns: tuple[str, ...] = (),
) -> ItemKind | None:
    """Classify a single file name.  Returns None for excluded files."""
    if is_excluded(name, exclude_patterns):
        return None
    if fnmatch.fnmatchcase(name, renderable_pattern):
        return ItemKind.RENDERABLE
    return ItemKind.STATIC


def classify(
    root: Path,
    *,
    renderable_pattern: str = "*.md",
    exclude_patterns: tuple[str, ...] = ("*.swp", "*.swo", "*.bak", "*~"),
) -> Classification:
    """Walk *root* and partition its files into renderable and static items.

    Args:
        root: Source tree root.
        renderable_pattern: Glob for documents handed to the renderer.
        exclude_patterns: Globs for files that are never built.

    Raises:
        ClassifyError: If the root is missing or any part of the tree
            cannot be read (permission errors, dangling symlinks).

    """
    if not root.is_dir():
        msg = f"Source directory not found: {root}"
        raise ClassifyError(msg)

    def _on_error(exc: OSError) -> None:
        msg = f"Cannot read {exc.filename or root}: {exc.strerror or exc}"
        raise ClassifyError(msg) from exc

    renderable: list[SourceItem] = []
    static: list[SourceItem] = []

    for dirpath, _dirnames, filenames in os.walk(root, onerror=_on_error):
        current = Path(dirpath)
        for name in filenames:
            path = current / name
            if not path.exists():
                msg = f"Cannot read {path}: dangling symlink"
                raise ClassifyError(msg)

            kind = classify_name(
                name,
                renderable_pattern=renderable_pattern,
                exclude_patterns=exclude_patterns,
            )
            if kind is None:
                continue

            rel = PurePosixPath(*path.relative_to(root).parts).as_posix()
            item = SourceItem(relative_path=rel, kind=kind)
            if kind is ItemKind.RENDERABLE:
                renderable.append(item)
            else:
                static.append(item)

    return Classification(
        renderable=tuple(sorted(renderable, key=lambda i: i.relative_path)),
        static=tuple(sorted(static, key=lambda i: i.relative_path)),
    )
