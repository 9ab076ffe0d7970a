"""Public APIs for MDX-to-Markdown conversion."""

from __future__ import annotations

from .converter import (
    ConversionMode,
    ConversionResult,
    convert,
    convert_fragment,
)
from .errors import ConversionError, ParseError, SerializationError
from .filters import strip_dialect_nodes
from .line_filter import LineFilterState, filter_lines
from .nodes import Node, NodeType
from .parser import parse
from .serializer import serialize

__all__ = [
    "ConversionError",
    "ConversionMode",
    "ConversionResult",
    "LineFilterState",
    "Node",
    "NodeType",
    "ParseError",
    "SerializationError",
    "convert",
    "convert_fragment",
    "filter_lines",
    "parse",
    "serialize",
    "strip_dialect_nodes",
]
