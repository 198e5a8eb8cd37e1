"""Shared type definitions for dudu."""

from typing import Literal

# Mode of operation
type DuduMode = Literal["build", "serve"]

# Slash-normalized path relative to the source root (e.g. "posts/intro.md")
type RelativePath = str

# Live-reload client identifier
type ClientID = str
