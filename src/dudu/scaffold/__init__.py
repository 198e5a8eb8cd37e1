"""Project scaffolding — ``dudu new``.

Copies the bundled starter project (sample markdown, stylesheet, pandoc
template, navbar/footer fragments, highlight theme and the hot-reload
include) into a fresh directory.
"""

from __future__ import annotations

import shutil
import sys
from pathlib import Path
from typing import TextIO

from dudu._errors import ScaffoldError

DEFAULT_PROJECT_NAME = "personal-site"


def _bundled_templates_path() -> Path:
    """Return the absolute path to the bundled starter project."""
    return Path(__file__).parent / "templates"


def template_files() -> list[Path]:
    """Return the starter project's files, relative to its root."""
    root = _bundled_templates_path()
    return sorted(p.relative_to(root) for p in root.rglob("*") if p.is_file())


def new_project(name: str, *, parent: Path | None = None) -> Path:
    """Create a new project directory populated with the starter files.

    Args:
        name: Directory name of the new project.
        parent: Directory to create the project in (defaults to cwd).

    Returns:
        Absolute path to the created project.

    Raises:
        ScaffoldError: If the name is invalid, the target exists, or the
            files cannot be written.

    """
    if not name or Path(name).name != name or name in {".", ".."}:
        msg = f"Invalid project name: {name!r}"
        raise ScaffoldError(msg)

    target = (parent if parent is not None else Path.cwd()) / name
    if target.exists():
        msg = f"Folder {target} already exists"
        raise ScaffoldError(msg)

    source = _bundled_templates_path()
    try:
        target.mkdir(mode=0o700, parents=True)
        for rel in template_files():
            dest = target / rel
            dest.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            shutil.copyfile(source / rel, dest)
    except OSError as exc:
        msg = f"Cannot create project {target}: {exc}"
        raise ScaffoldError(msg) from exc
    return target.resolve()


def prompt_project_name(
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    default: str = DEFAULT_PROJECT_NAME,
) -> str:
    """Ask for a project name, returning *default* on empty input."""
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    stdout.write(f"Project name ({default}): ")
    stdout.flush()
    answer = stdin.readline().strip()
    return answer or default
