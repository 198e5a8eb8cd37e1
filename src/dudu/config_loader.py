"""Load DuduConfig from dudu.yaml or dudu.toml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from dataclasses import fields
from pathlib import Path

import yaml

from dudu._errors import ConfigError
from dudu.config import DuduConfig

_KNOWN_KEYS = frozenset(f.name for f in fields(DuduConfig)) - {"root"}


def load_config(root: Path, **overrides: object) -> DuduConfig:
    """Load DuduConfig from root, optionally merging dudu.yaml.

    Looks for dudu.yaml, dudu.yml, or dudu.toml in root. If found, loads
    and merges with overrides. Overrides take precedence; ``None`` overrides
    are ignored so unset CLI flags fall through to the file.

    Raises:
        ConfigError: If the config file is malformed or names unknown keys.

    """
    file_config = _read_dudu_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    unknown = sorted(set(merged) - _KNOWN_KEYS)
    if unknown:
        msg = f"Unknown configuration keys: {', '.join(unknown)}"
        raise ConfigError(msg)
    if "exclude_patterns" in merged:
        merged["exclude_patterns"] = tuple(merged["exclude_patterns"])  # type: ignore[arg-type]
    try:
        return DuduConfig(root=root, **merged)  # type: ignore[arg-type]
    except TypeError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def _read_dudu_config(root: Path) -> dict[str, object]:
    """Read dudu config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("dudu.yaml", "dudu.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "dudu.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    return _flatten_dudu_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text())
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    return _flatten_dudu_section(data)


def _flatten_dudu_section(data: dict[str, object]) -> dict[str, object]:
    """Extract dudu.* keys into top-level config."""
    result: dict[str, object] = {}
    section = data.get("dudu")
    if isinstance(section, dict):
        result.update(section)
    for k, v in data.items():
        if k != "dudu":
            result[k] = v
    return result
