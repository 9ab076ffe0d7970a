"""Concatenation workflow exposing CLI, config, and executor helpers."""

from .assembler import (
    BANNER,
    AssembledOutput,
    Category,
    Fragment,
    assemble,
)
from .config import (
    ConcatenateConfig,
    ConfigError,
    ConfigOverrides,
    LoadResult,
    load_config,
)
from .executor import (
    ConcatenationError,
    ConcatenationSummary,
    FragmentReadError,
    OutputWriteError,
    load_fragments,
    run_concatenation,
)

__all__ = [
    "BANNER",
    "AssembledOutput",
    "Category",
    "ConcatenateConfig",
    "ConcatenationError",
    "ConcatenationSummary",
    "ConfigError",
    "ConfigOverrides",
    "Fragment",
    "FragmentReadError",
    "LoadResult",
    "OutputWriteError",
    "assemble",
    "load_config",
    "load_fragments",
    "run_concatenation",
]
