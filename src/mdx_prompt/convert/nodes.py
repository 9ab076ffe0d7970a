"""Structural tree produced by the MDX parser."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class NodeType(Enum):
    """Vocabulary of block-level node types."""

    ROOT = "root"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BULLET_LIST = "bullet_list"
    ORDERED_LIST = "ordered_list"
    LIST_ITEM = "list_item"
    BLOCKQUOTE = "blockquote"
    FENCE = "fence"
    CODE_BLOCK = "code_block"
    HTML_BLOCK = "html_block"
    THEMATIC_BREAK = "thematic_break"
    TABLE = "table"
    ESM = "esm"
    COMPONENT = "component"

    @property
    def is_container(self) -> bool:
        return self in _CONTAINER_TYPES


_CONTAINER_TYPES = frozenset(
    {
        NodeType.ROOT,
        NodeType.BLOCKQUOTE,
        NodeType.BULLET_LIST,
        NodeType.ORDERED_LIST,
        NodeType.LIST_ITEM,
    }
)

# Node types that only exist in the dialect, never in plain Markdown.
DIALECT_TYPES: frozenset[NodeType] = frozenset(
    {NodeType.ESM, NodeType.COMPONENT}
)


@dataclass(frozen=True)
class Node:
    """A typed block with either children (containers) or literal content.

    ``content`` holds the literal text of leaves: inline source for
    paragraphs and headings, the verbatim body of code and HTML blocks, or
    the original source of dialect nodes. The remaining fields carry what
    the serializer needs to render the node again.
    """

    type: NodeType
    children: tuple["Node", ...] = ()
    content: str = ""
    markup: str = ""
    info: str = ""
    level: int = 0
    start: int = 1
    tight: bool = True
    rows: tuple[tuple[str, ...], ...] = ()
    align: tuple[Optional[str], ...] = ()
    line: Optional[int] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.children and not self.type.is_container:
            raise ValueError(
                f"Leaf node '{self.type.value}' cannot carry children."
            )

    def with_children(self, children: tuple["Node", ...]) -> "Node":
        """Return a copy of this container with ``children`` replaced."""
        return replace(self, children=children)


__all__ = ["DIALECT_TYPES", "Node", "NodeType"]
