"""Dudu error hierarchy.

All dudu-specific errors inherit from DuduError for easy catching.

Build errors (classify, render, copy) are fatal to a single build pass only.
Watch and server errors are fatal to a whole ``serve`` session.
"""


class DuduError(Exception):
    """Base error for all dudu operations."""


class ConfigError(DuduError):
    """Invalid or missing configuration."""


class ScaffoldError(DuduError):
    """Error while creating a new project."""


class BuildError(DuduError):
    """Error during a build pass."""


class ClassifyError(BuildError):
    """The source tree could not be walked completely."""


class RenderError(BuildError):
    """The external renderer failed for one document."""


class CopyError(BuildError):
    """A static file could not be copied to the output tree."""


class WatchError(DuduError):
    """Watch registration or the filesystem event stream failed."""


class ServerError(DuduError):
    """The dev server failed to listen or serve."""
