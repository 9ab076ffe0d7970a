"""Core shared helpers for mdx_prompt commands."""

from __future__ import annotations

from .config import (
    TomlConfigError,
    apply_overrides,
    load_toml,
    write_config_file,
)
from .files import (
    list_fragment_files,
    normalize_extension,
    read_text_file,
)
from .logging import JsonLogFormatter, configure_logger, default_log_dir

__all__ = [
    "TomlConfigError",
    "apply_overrides",
    "load_toml",
    "write_config_file",
    "list_fragment_files",
    "normalize_extension",
    "read_text_file",
    "configure_logger",
    "default_log_dir",
    "JsonLogFormatter",
]
