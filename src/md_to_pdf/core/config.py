"""TOML helpers shared by config loading and ``config init``."""

from __future__ import annotations

import os
import tomllib
from contextlib import suppress
from pathlib import Path
from typing import Any, Mapping, Union

from .errors import ConfigError

__all__ = [
    "TomlConfigError",
    "deep_merge",
    "load_toml",
    "write_toml_template",
]

PathLike = Union[str, "os.PathLike[str]"]


class TomlConfigError(ConfigError):
    """Raised when a TOML config file cannot be read, parsed or written."""


def load_toml(path: PathLike) -> dict[str, Any]:
    """Parse the TOML file at ``path`` into a plain dict.

    Missing files, undecodable bytes and syntax errors all raise
    :class:`TomlConfigError` naming the file.
    """

    source = Path(path).expanduser()
    try:
        text = source.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {source}") from exc
    except UnicodeDecodeError as exc:
        raise TomlConfigError(f"Config file is not UTF-8: {source}") from exc
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Invalid TOML in {source}: {exc}") from exc


def deep_merge(
    base: Mapping[str, Any],
    override: Mapping[str, Any],
) -> dict[str, Any]:
    """Return a new mapping with ``override`` merged over ``base``.

    Nested mappings are merged key by key; any other value in ``override``
    replaces the one in ``base``. Neither input is modified.
    """

    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def write_toml_template(
    path: PathLike,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Create ``path`` holding ``template``; replace a file only on ``overwrite``."""

    target = Path(path)
    if target.exists() and not overwrite:
        raise TomlConfigError(
            f"Config already exists: {target} (use --force to replace it)."
        )
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(template, encoding="utf-8")
    with suppress(PermissionError):
        target.chmod(mode)
    return target
