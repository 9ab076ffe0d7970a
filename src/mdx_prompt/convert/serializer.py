"""Render a :class:`Node` tree back into Markdown text."""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Sequence

from .errors import SerializationError
from .nodes import Node, NodeType

# Pipes not already escaped would split the cell.
_PIPE_RE = re.compile(r"(?<!\\)\|")

_ALIGN_MARKERS: Dict[Optional[str], str] = {
    None: "---",
    "left": ":---",
    "center": ":---:",
    "right": "---:",
}


def serialize(tree: Node) -> str:
    """Return Markdown for ``tree``.

    Top-level blocks are separated by a blank line and the result ends with
    a single newline. An empty tree renders to the empty string.
    """
    if tree.type is not NodeType.ROOT:
        raise SerializationError(
            f"Expected a root node, got '{tree.type.value}'."
        )
    body = _join(tree.children, "\n\n")
    return f"{body}\n" if body else ""


def _join(nodes: Sequence[Node], separator: str) -> str:
    return separator.join(_render(node) for node in nodes)


def _render(node: Node) -> str:
    renderer = _RENDERERS.get(node.type)
    if renderer is None:
        raise SerializationError(
            f"Cannot render '{node.type.value}' node here."
        )
    return renderer(node)


def _render_paragraph(node: Node) -> str:
    return node.content


def _render_heading(node: Node) -> str:
    if not 1 <= node.level <= 6:
        raise SerializationError(f"Invalid heading level {node.level}.")
    hashes = "#" * node.level
    # ATX headings are single-line; setext content may span several.
    text = " ".join(line.strip() for line in node.content.split("\n"))
    return f"{hashes} {text}" if text else hashes


def _render_fence(node: Node) -> str:
    markup = node.markup or "```"
    return f"{markup}{node.info}\n{node.content}{markup}"


def _render_code_block(node: Node) -> str:
    lines = node.content.rstrip("\n").split("\n")
    return "\n".join(f"    {line}" if line else "" for line in lines)


def _render_html(node: Node) -> str:
    return node.content.rstrip("\n")


def _render_verbatim(node: Node) -> str:
    return node.content


def _render_thematic_break(node: Node) -> str:
    # Token markup length varies between markdown-it releases.
    return node.markup[:1] * 3 if node.markup else "---"


def _render_blockquote(node: Node) -> str:
    inner = _join(node.children, "\n\n")
    if not inner:
        return ">"
    return "\n".join(
        f"> {line}" if line else ">" for line in inner.split("\n")
    )


def _render_list(node: Node) -> str:
    separator = "\n" if node.tight else "\n\n"
    rendered: List[str] = []
    for index, item in enumerate(node.children):
        if item.type is not NodeType.LIST_ITEM:
            raise SerializationError(
                f"List children must be list items, got '{item.type.value}'."
            )
        if node.type is NodeType.ORDERED_LIST:
            marker = f"{node.start + index}{item.markup or '.'}"
        else:
            marker = item.markup or "-"
        rendered.append(_render_item(item, marker, separator))
    return separator.join(rendered)


def _render_item(item: Node, marker: str, separator: str) -> str:
    body = _join(item.children, separator)
    if not body:
        return marker
    indent = " " * (len(marker) + 1)
    first, *rest = body.split("\n")
    lines = [f"{marker} {first}"]
    lines.extend(f"{indent}{line}" if line else "" for line in rest)
    return "\n".join(lines)


def _render_table(node: Node) -> str:
    if not node.rows:
        raise SerializationError("Table has no rows.")
    header, *body = node.rows
    align = node.align or tuple(None for _ in header)
    lines = [
        _table_row(header),
        _table_row(tuple(_ALIGN_MARKERS.get(a, "---") for a in align)),
    ]
    lines.extend(_table_row(row) for row in body)
    return "\n".join(lines)


def _table_row(cells: Sequence[str]) -> str:
    escaped = (_PIPE_RE.sub(r"\\|", cell) for cell in cells)
    return "| " + " | ".join(escaped) + " |"


_RENDERERS: Dict[NodeType, Callable[[Node], str]] = {
    NodeType.PARAGRAPH: _render_paragraph,
    NodeType.HEADING: _render_heading,
    NodeType.FENCE: _render_fence,
    NodeType.CODE_BLOCK: _render_code_block,
    NodeType.HTML_BLOCK: _render_html,
    NodeType.THEMATIC_BREAK: _render_thematic_break,
    NodeType.BLOCKQUOTE: _render_blockquote,
    NodeType.BULLET_LIST: _render_list,
    NodeType.ORDERED_LIST: _render_list,
    NodeType.TABLE: _render_table,
    NodeType.ESM: _render_verbatim,
    NodeType.COMPONENT: _render_verbatim,
}


__all__ = ["serialize"]
