"""TOML loading and validation shared by mdx-prompt commands."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping

__all__ = [
    "TomlConfigError",
    "apply_overrides",
    "load_toml",
    "write_config_file",
]

_TYPE_NAMES = {str: "string", bool: "boolean", int: "integer"}


class TomlConfigError(RuntimeError):
    """Raised when a TOML config cannot be read, parsed or validated."""


def load_toml(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Invalid TOML in {path}: {exc}") from exc


def apply_overrides(
    defaults: Mapping[str, Any],
    overrides: Mapping[str, Any],
    *,
    prefix: str = "",
) -> Dict[str, Any]:
    """Return a copy of ``defaults`` with ``overrides`` applied.

    Every override key must exist in ``defaults``. Tables stay tables, and a
    scalar keeps the type of its default; a ``None`` default accepts a
    string. ``defaults`` itself is never modified.
    """
    merged = dict(defaults)
    for key, value in overrides.items():
        dotted = f"{prefix}{key}"
        if key not in defaults:
            raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
        default = defaults[key]
        if isinstance(default, Mapping):
            if not isinstance(value, Mapping):
                raise TomlConfigError(f"'{dotted}' must be a table.")
            merged[key] = apply_overrides(
                default, value, prefix=f"{dotted}."
            )
            continue
        expected = str if default is None else type(default)
        if not isinstance(value, expected):
            raise TomlConfigError(
                f"'{dotted}' must be a "
                f"{_TYPE_NAMES.get(expected, expected.__name__)}, "
                f"found {type(value).__name__}."
            )
        merged[key] = value
    return merged


def write_config_file(
    path: Path, text: str, *, overwrite: bool = False
) -> Path:
    """Write ``text`` to ``path``, refusing to replace it unless asked."""

    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
