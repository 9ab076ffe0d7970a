"""Configuration loader for the concatenation workflow."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Mapping, Optional

from mdx_prompt.convert.line_filter import DEFAULT_TOOLING_NAMESPACE
from mdx_prompt.core import config as core_config
from mdx_prompt.core.files import normalize_extension
from mdx_prompt.core.logging import default_log_dir

from .assembler import Category

CONFIG_FILENAME = "mdx_prompt.toml"
CONFIG_ENV = "MDX_PROMPT_CONFIG"
ENV_PREFIX = "MDX_PROMPT_"
TEMPLATE_FILENAME = "template.toml"

_DEFAULT_OUTPUT = "docs/ai-prompt.md"
_DEFAULT_EXTENSION = "mdx"
_DEFAULT_LOG_LEVEL = "INFO"

_DEFAULTS: Mapping[str, Mapping[str, Optional[str]]] = {
    "paths": {
        "root": None,
        "background_dir": f"src/{Category.BACKGROUND.value}",
        "anti_patterns_dir": f"src/{Category.ANTI_PATTERNS.value}",
        "output": _DEFAULT_OUTPUT,
    },
    "execution": {
        "extension": _DEFAULT_EXTENSION,
        "tooling_namespace": DEFAULT_TOOLING_NAMESPACE,
    },
    "logging": {"level": _DEFAULT_LOG_LEVEL, "dir": None},
}


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class ConcatenateConfig:
    """Fully resolved configuration for a concatenation run."""

    root: Path
    background_dir: Path
    anti_patterns_dir: Path
    output_path: Path
    extension: str
    tooling_namespace: str
    log_level: str
    log_dir: Path

    def directory_for(self, category: Category) -> Path:
        if category is Category.BACKGROUND:
            return self.background_dir
        return self.anti_patterns_dir


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    root: Optional[Path] = None
    background_dir: Optional[Path] = None
    anti_patterns_dir: Optional[Path] = None
    output_path: Optional[Path] = None
    extension: Optional[str] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Resolved configuration plus the file it came from, if any."""

    config: ConcatenateConfig
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env
    base_dir = (cwd or Path.cwd()).resolve()

    explicit_root = _pick_first(
        overrides.root, _parse_env_path(env_map, "ROOT")
    )
    search_dir = base_dir
    if explicit_root is not None:
        search_dir = _absolute(explicit_root, base_dir)
    default_path = search_dir / CONFIG_FILENAME
    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=default_path,
        base_dir=base_dir,
    )

    options = _DEFAULTS
    loaded_path: Optional[Path] = None
    if requested_path.exists():
        loaded_path = requested_path
        try:
            parsed = core_config.load_toml(requested_path)
            options = core_config.apply_overrides(_DEFAULTS, parsed)
        except core_config.TomlConfigError as exc:
            raise ConfigError(str(exc)) from exc
    elif config_path is not None or _has_env_config(env_map):
        raise ConfigError(f"Config file not found: {requested_path}")

    paths = options["paths"]
    execution = options["execution"]
    logging_opts = options["logging"]

    if explicit_root is not None:
        root = search_dir
    else:
        file_root = _optional_path(paths["root"])
        anchor = loaded_path.parent.resolve() if loaded_path else base_dir
        root = _absolute(file_root or Path("."), anchor)

    def resolve(key: str, override: Optional[Path]) -> Path:
        candidate = _pick_first(
            override,
            _parse_env_path(env_map, key.upper()),
            _optional_path(paths[key]),
        )
        if candidate is None:
            raise ConfigError(f"paths.{key} must be provided.")
        return _absolute(candidate, root)

    background_dir = resolve("background_dir", overrides.background_dir)
    anti_patterns_dir = resolve(
        "anti_patterns_dir", overrides.anti_patterns_dir
    )
    output_path = resolve("output", overrides.output_path)

    extension = _resolve_extension(
        _pick_first(
            overrides.extension,
            _parse_env_string(env_map, "EXTENSION"),
            execution["extension"],
        )
    )
    tooling_namespace = _resolve_string(
        _pick_first(
            _parse_env_string(env_map, "TOOLING_NAMESPACE"),
            execution["tooling_namespace"],
        ),
        "execution.tooling_namespace",
    )
    log_level = _resolve_string(
        _pick_first(
            overrides.log_level,
            _parse_env_string(env_map, "LOG_LEVEL"),
            logging_opts["level"],
        ),
        "logging.level",
    ).upper()
    log_dir_value = _pick_first(
        _parse_env_path(env_map, "LOG_DIR"),
        _optional_path(logging_opts["dir"]),
    )
    log_dir = (
        default_log_dir()
        if log_dir_value is None
        else _absolute(log_dir_value, root)
    )

    config = ConcatenateConfig(
        root=root,
        background_dir=background_dir,
        anti_patterns_dir=anti_patterns_dir,
        output_path=output_path,
        extension=extension,
        tooling_namespace=tooling_namespace,
        log_level=log_level,
        log_dir=log_dir,
    )
    return LoadResult(config=config, config_path=loaded_path)


def read_template() -> str:
    """Return the packaged default configuration TOML."""

    resource = resources.files(__package__).joinpath(TEMPLATE_FILENAME)
    return resource.read_text(encoding="utf-8")


def write_template(path: Path, *, overwrite: bool = False) -> Path:
    """Write the packaged template to ``path``."""

    try:
        return core_config.write_config_file(
            path, read_template(), overwrite=overwrite
        )
    except core_config.TomlConfigError as exc:
        raise ConfigError(str(exc)) from exc


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
    base_dir: Path,
) -> Path:
    if config_path is not None:
        return _absolute(config_path, base_dir)
    env_candidate = env_map.get(CONFIG_ENV)
    if env_candidate and env_candidate.strip():
        return _absolute(Path(env_candidate.strip()), base_dir)
    return default_path


def _has_env_config(env_map: Mapping[str, str]) -> bool:
    env_candidate = env_map.get(CONFIG_ENV)
    return bool(env_candidate and env_candidate.strip())


def _absolute(path: Path, anchor: Path) -> Path:
    expanded = path.expanduser()
    if not expanded.is_absolute():
        expanded = anchor / expanded
    return expanded.resolve()


def _optional_path(value: Optional[str]) -> Optional[Path]:
    raw = (value or "").strip()
    return Path(raw) if raw else None


def _resolve_extension(value: str) -> str:
    try:
        return normalize_extension(value)
    except ValueError as exc:
        raise ConfigError(f"execution.extension: {exc}") from exc


def _resolve_string(value: str, key: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ConfigError(f"{key} must be a non-empty string.")
    return stripped


def _parse_env_path(env_map: Mapping[str, str], key: str) -> Optional[Path]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    return Path(raw)


def _parse_env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


__all__ = [
    "CONFIG_ENV",
    "CONFIG_FILENAME",
    "ConcatenateConfig",
    "ConfigError",
    "ConfigOverrides",
    "LoadResult",
    "load_config",
    "read_template",
    "write_template",
]
