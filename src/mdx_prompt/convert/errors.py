"""Exceptions raised by the MDX conversion pipeline."""

from __future__ import annotations

from typing import Optional


class ConversionError(RuntimeError):
    """Raised when a fragment cannot be converted structurally."""


class ParseError(ConversionError):
    """Raised when MDX source cannot be parsed into a tree."""

    def __init__(self, message: str, *, line: Optional[int] = None) -> None:
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)
        self.line = line


class SerializationError(ConversionError):
    """Raised when a tree cannot be rendered back into Markdown."""


__all__ = ["ConversionError", "ParseError", "SerializationError"]
