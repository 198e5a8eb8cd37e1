"""Build layer — classification, staleness and the per-pass generator."""

from dudu.build.classify import Classification, ItemKind, SourceItem, classify
from dudu.build.generator import BuildResult, BuildTarget, Generator, target_for
from dudu.build.renderer import PandocRenderer, Renderer
from dudu.build.staleness import is_stale

__all__ = [
    "BuildResult",
    "BuildTarget",
    "Classification",
    "Generator",
    "ItemKind",
    "PandocRenderer",
    "Renderer",
    "SourceItem",
    "classify",
    "is_stale",
    "target_for",
]
