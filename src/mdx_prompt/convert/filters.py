"""Tree filters applied between parsing and serialization."""

from __future__ import annotations

from typing import AbstractSet

from .nodes import DIALECT_TYPES, Node, NodeType


def strip_dialect_nodes(
    tree: Node, *, removed: AbstractSet[NodeType] = DIALECT_TYPES
) -> Node:
    """Return a copy of ``tree`` without top-level nodes of ``removed`` types.

    Only the root's direct children are inspected. Nested blocks, including
    component-looking text inside code fences, are kept as they are.
    """
    if tree.type is not NodeType.ROOT:
        raise ValueError("strip_dialect_nodes expects a root node.")
    kept = tuple(child for child in tree.children if child.type not in removed)
    return tree.with_children(kept)


__all__ = ["strip_dialect_nodes"]
