"""MDX-to-Markdown conversion with a line-filter fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .filters import strip_dialect_nodes
from .line_filter import DEFAULT_TOOLING_NAMESPACE, filter_lines
from .parser import parse
from .serializer import serialize

_LOGGER = logging.getLogger(__name__)


class ConversionMode(Enum):
    """Which path produced a conversion result."""

    STRUCTURAL = "structural"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ConversionResult:
    """Cleaned Markdown for one fragment and how it was obtained."""

    text: str
    mode: ConversionMode
    error: Optional[Exception] = None

    @property
    def used_fallback(self) -> bool:
        return self.mode is ConversionMode.FALLBACK


def convert_fragment(
    text: str,
    *,
    tooling_namespace: str = DEFAULT_TOOLING_NAMESPACE,
    logger: Optional[logging.Logger] = None,
    identifier: Optional[str] = None,
) -> ConversionResult:
    """Convert ``text`` and report which path was taken. Never raises."""

    log = logger or _LOGGER
    try:
        markdown = serialize(strip_dialect_nodes(parse(text)))
    except Exception as exc:
        log.warning(
            "Failed to parse MDX, falling back to line filtering",
            extra={"fragment": identifier, "reason": str(exc)},
        )
        return ConversionResult(
            text=filter_lines(text, tooling_namespace=tooling_namespace),
            mode=ConversionMode.FALLBACK,
            error=exc,
        )
    return ConversionResult(
        text=filter_lines(markdown, tooling_namespace=tooling_namespace),
        mode=ConversionMode.STRUCTURAL,
    )


def convert(
    text: str,
    *,
    tooling_namespace: str = DEFAULT_TOOLING_NAMESPACE,
    logger: Optional[logging.Logger] = None,
) -> str:
    """Return clean Markdown for MDX ``text``."""

    return convert_fragment(
        text, tooling_namespace=tooling_namespace, logger=logger
    ).text


__all__ = [
    "ConversionMode",
    "ConversionResult",
    "convert",
    "convert_fragment",
]
