"""Dudu — a markdown static-site builder with a live-reloading dev server.

Converts a tree of markdown documents into HTML with pandoc, copies every
other file verbatim, and only rebuilds what changed.

Quick start::

    import dudu

    dudu.build("my-site/")        # Incremental build into static/
    dudu.serve("my-site/")        # Dev server with live reload

Project layout::

    md/          markdown sources and static files
    resources/   pandoc template, theme and include fragments
    static/      build output
    .dudu/       staging output while serving (removed on exit)

"""

__version__ = "0.1.0"
__all__ = [
    "DuduConfig",
    "__version__",
    "build",
    "new_project",
    "serve",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import dudu`` fast while providing a clean top-level API.
    """
    if name == "DuduConfig":
        from dudu.config import DuduConfig

        return DuduConfig

    if name == "build":
        from dudu.app import build

        return build

    if name == "serve":
        from dudu.app import serve

        return serve

    if name == "new_project":
        from dudu.scaffold import new_project

        return new_project

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
