"""Fragment discovery and reading helpers."""

from __future__ import annotations

from pathlib import Path
from typing import List

__all__ = [
    "normalize_extension",
    "list_fragment_files",
    "read_text_file",
]


def normalize_extension(value: str) -> str:
    """Return ``value`` lowercased without a leading dot.

    Raises ``ValueError`` for blank input.
    """
    candidate = value.strip().lower().lstrip(".")
    if not candidate:
        raise ValueError("Extension must be a non-empty string.")
    return candidate


def list_fragment_files(directory: Path, extension: str) -> List[Path]:
    """Return the files directly under ``directory`` matching ``extension``.

    Results are sorted by file name using plain string ordering so the same
    inputs always produce the same sequence. A missing directory raises
    ``FileNotFoundError``; callers decide whether that is fatal.
    """
    if not directory.exists():
        raise FileNotFoundError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    suffix = f".{normalize_extension(extension)}"
    matches = [
        child
        for child in directory.iterdir()
        if child.is_file() and child.name.endswith(suffix)
    ]
    return sorted(matches, key=lambda p: p.name)


def read_text_file(path: Path) -> str:
    """Read a text file as UTF-8 with replacement for decode errors."""
    with Path(path).open(
        "r", encoding="utf-8", errors="replace", newline=""
    ) as fh:
        return fh.read()
