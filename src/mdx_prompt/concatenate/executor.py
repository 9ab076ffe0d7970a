"""Sequential executor for concatenation runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping

from mdx_prompt.convert import convert_fragment
from mdx_prompt.core.files import list_fragment_files, read_text_file

from .assembler import Category, Fragment, assemble
from .config import ConcatenateConfig


class ConcatenationError(RuntimeError):
    """Raised when a run cannot complete."""


class FragmentReadError(ConcatenationError):
    """Raised when an enumerated fragment cannot be read."""


class OutputWriteError(ConcatenationError):
    """Raised when the assembled document cannot be written."""


@dataclass(frozen=True)
class ConcatenationSummary:
    """Aggregated results for a concatenation run."""

    output_path: Path
    written: bool
    counts: Mapping[Category, int]
    fallbacks: tuple[str, ...] = ()
    missing: tuple[Category, ...] = ()

    @property
    def total_count(self) -> int:
        return sum(self.counts.values())

    @property
    def fallback_count(self) -> int:
        return len(self.fallbacks)


def load_fragments(
    directory: Path, category: Category, extension: str
) -> List[Fragment]:
    """Read every fragment of ``category`` in name order.

    A missing directory raises ``FileNotFoundError`` (or
    ``NotADirectoryError``) before any file is read.
    """
    fragments: List[Fragment] = []
    for path in list_fragment_files(directory, extension):
        try:
            text = read_text_file(path)
        except OSError as exc:
            raise FragmentReadError(
                f"Failed to read fragment {path}: {exc}"
            ) from exc
        fragments.append(
            Fragment(identifier=path.name, category=category, text=text)
        )
    return fragments


def run_concatenation(
    config: ConcatenateConfig,
    *,
    logger: logging.Logger,
) -> ConcatenationSummary:
    """Convert both categories and write the assembled document."""

    logger.info(
        "Starting concatenation run",
        extra={
            "background_dir": str(config.background_dir),
            "anti_patterns_dir": str(config.anti_patterns_dir),
            "extension": config.extension,
            "output_path": str(config.output_path),
        },
    )

    fragments: dict[Category, List[Fragment]] = {}
    missing: list[Category] = []
    for category in Category:
        directory = config.directory_for(category)
        try:
            fragments[category] = load_fragments(
                directory, category, config.extension
            )
        except (FileNotFoundError, NotADirectoryError):
            logger.warning(
                "Category directory not found; skipping",
                extra={
                    "category": category.value,
                    "directory": str(directory),
                },
            )
            fragments[category] = []
            missing.append(category)
            continue
        logger.info(
            "Found fragments",
            extra={
                "category": category.value,
                "files": [item.identifier for item in fragments[category]],
            },
        )

    fallbacks: list[str] = []

    def _convert(fragment: Fragment) -> str:
        result = convert_fragment(
            fragment.text,
            tooling_namespace=config.tooling_namespace,
            logger=logger,
            identifier=fragment.identifier,
        )
        if result.used_fallback:
            fallbacks.append(
                f"{fragment.category.value}/{fragment.identifier}"
            )
        logger.debug(
            "Converted fragment",
            extra={
                "category": fragment.category.value,
                "fragment": fragment.identifier,
                "mode": result.mode.value,
            },
        )
        return result.text

    output = assemble(
        fragments[Category.BACKGROUND],
        fragments[Category.ANTI_PATTERNS],
        convert_fragment=_convert,
    )
    counts = {category: len(items) for category, items in fragments.items()}

    if output.is_empty:
        logger.info("No fragments found; nothing to write")
        return ConcatenationSummary(
            output_path=config.output_path,
            written=False,
            counts=counts,
            missing=tuple(missing),
        )

    _write_output(config.output_path, output.render())
    logger.info(
        "Completed concatenation run",
        extra={
            "output_path": str(config.output_path),
            "fragment_count": output.fragment_count,
            "fallback_count": len(fallbacks),
        },
    )
    return ConcatenationSummary(
        output_path=config.output_path,
        written=True,
        counts=counts,
        fallbacks=tuple(fallbacks),
        missing=tuple(missing),
    )


def _write_output(path: Path, document: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(document, encoding="utf-8")
    except OSError as exc:
        raise OutputWriteError(f"Failed to write {path}: {exc}") from exc


__all__ = [
    "ConcatenationError",
    "ConcatenationSummary",
    "FragmentReadError",
    "OutputWriteError",
    "load_fragments",
    "run_concatenation",
]
