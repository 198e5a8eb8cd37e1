"""Dudu application — public entry points.

``build()`` runs one build pass into the output directory.  ``serve()``
runs a live-reloading dev session over a staging directory that is removed
again on shutdown.
"""

import asyncio
import shutil
import signal
import sys
from pathlib import Path

from dudu._errors import ClassifyError
from dudu.build.classify import classify
from dudu.build.generator import BuildResult, Generator
from dudu.config import DuduConfig
from dudu.config_loader import load_config
from dudu.observability import BuildCollector

_RESOURCE_FILES = (
    "template.html",
    "navbar.html",
    "footer.html",
    "code-highlight.theme",
)

_STOP_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGINT", "SIGTERM", "SIGQUIT") if hasattr(signal, name)
)


def _count_items(config: DuduConfig) -> int:
    """Count source items for the banner; 0 if the tree cannot be read yet."""
    try:
        return len(
            classify(
                config.source_path,
                renderable_pattern=config.renderable_pattern,
                exclude_patterns=config.exclude_patterns,
            )
        )
    except ClassifyError:
        return 0


def _startup_warnings(config: DuduConfig) -> list[str]:
    """Collect problems worth showing before the first build."""
    warnings: list[str] = []
    if shutil.which(config.renderer) is None:
        warnings.append(f"renderer {config.renderer!r} not found on PATH")
    if not config.source_path.is_dir():
        warnings.append(f"source directory {config.source_path} does not exist")
    missing = [name for name in _RESOURCE_FILES if not (config.resource_path / name).is_file()]
    if missing:
        warnings.append(f"missing resources: {', '.join(missing)}")
    return warnings


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def build(root: str | Path = ".", **kwargs: object) -> BuildResult:
    """Build the site into the output directory.

    Only stale items are rebuilt unless ``force=True`` is given.

    Args:
        root: Path to the project root.
        **kwargs: Override DuduConfig fields.

    Returns:
        BuildResult describing the pass.

    Raises:
        BuildError: If the pass failed; outputs written before the failure
            are kept.

    """
    from dudu.banner import print_banner

    config = load_config(Path(root), **kwargs)
    print_banner(config, _count_items(config), mode="build", warnings=_startup_warnings(config))

    generator = Generator(config, collector=BuildCollector())
    result = generator.generate(config.output_path, hot_reload=False, force=config.force)

    _print_build_summary(result)
    return result


def _print_build_summary(result: BuildResult) -> None:
    """Print build completion summary to stderr."""
    rendered = len(result.rendered)
    copied = len(result.copied)
    lines = [
        "",
        "─" * 41,
        f"  Rendered {rendered} page{'s' if rendered != 1 else ''}",
        f"  Copied {copied} file{'s' if copied != 1 else ''}",
    ]
    if result.skipped:
        lines.append(f"  {len(result.skipped)} up to date")
    lines.append(f"  Output: {result.output_dir}")
    lines.append(f"  Done in {result.duration_ms:.0f}ms")

    print("\n".join(lines), file=sys.stderr)


def serve(root: str | Path = ".", **kwargs: object) -> None:
    """Serve the site with live reload until interrupted.

    Builds into a staging directory, watches the source tree, rebuilds on
    every change and notifies connected browsers.  The staging directory is
    removed on shutdown.

    Args:
        root: Path to the project root.
        **kwargs: Override DuduConfig fields.

    Raises:
        DuduError: If the watcher or server failed.

    """
    from dudu.banner import print_banner

    config = load_config(Path(root), **kwargs)
    print_banner(config, _count_items(config), mode="serve", warnings=_startup_warnings(config))
    asyncio.run(_serve(config))


async def _serve(config: DuduConfig) -> None:
    from dudu.session import DevSession

    session = DevSession(config)
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in _STOP_SIGNALS:
        try:
            loop.add_signal_handler(sig, session.request_stop)
        except (NotImplementedError, RuntimeError):
            # Windows: fall back to the default KeyboardInterrupt path.
            continue
        installed.append(sig)
    try:
        await session.run()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
