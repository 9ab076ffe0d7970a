"""Parse MDX source into a :class:`~mdx_prompt.convert.nodes.Node` tree.

Block structure comes from ``markdown-it-py``. Two dialect constructs are
then recognised among the top-level blocks:

- ``import``/``export`` declarations, which markdown-it sees as paragraphs;
- JSX component blocks, which markdown-it sees as HTML blocks or
  paragraphs and which may span several blocks when their children contain
  blank lines.

A dialect node ends on the last line it owns, which can be in the middle of
a markdown-it block. Lines after that point are parsed again as ordinary
top-level blocks. Component tags are scanned just enough to pair openers
with closers; anything unbalanced raises :class:`ParseError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from .errors import ParseError
from .nodes import Node, NodeType

_ESM_RE = re.compile(r"(?:import|export)(?=[\s{*])")
_TAG_START_RE = re.compile(r"</?(?=[A-Za-z>])")
_TAG_NAME_RE = re.compile(r"[A-Za-z][\w.:-]*")
_CODE_SPAN_RE = re.compile(r"(`+)(.+?)\1", re.DOTALL)
_AUTOLINK_RE = re.compile(
    r"<(?:[A-Za-z][A-Za-z0-9+.-]{1,31}:[^<>\s]*|[\w.+-]+@[\w.-]+)>"
)

_SCAN_SKIPPED = frozenset({"fence", "code_block"})
_COMPONENT_CANDIDATES = frozenset({"paragraph", "html_block"})

# A declaration line ending like this is continued on the next line.
_OPEN_ENDINGS = (",", "=", "=>", "(", "{", "[", "+", "&", "|", "?", ":", ".")
_CONTINUATION_STARTS = ("from ", "from'", 'from"', "}", ")", "]", ".")


@dataclass(frozen=True)
class _Tag:
    name: str
    closing: bool
    self_closing: bool
    start: int
    end: int
    line: int
    end_line: int


@dataclass(frozen=True)
class _Block:
    """A top-level markdown-it block with absolute, 0-based line bounds."""

    node: SyntaxTreeNode
    start: int
    end: int

    @property
    def type(self) -> str:
        return self.node.type

    def source(self, lines: Sequence[str]) -> str:
        return "\n".join(lines[self.start:self.end])


def build_markdown_it() -> MarkdownIt:
    md = MarkdownIt("commonmark", options_update={"html": True})
    md.enable(["table", "strikethrough"])
    return md


_MD = build_markdown_it()


def parse(text: str) -> Node:
    """Return the document tree for ``text`` or raise :class:`ParseError`."""

    lines = _normalize(text).split("\n")
    children: List[Node] = []
    resume: Optional[int] = 0
    while resume is not None:
        resume = _parse_from(lines, resume, children)
    return Node(NodeType.ROOT, children=tuple(children), line=1)


def _parse_from(
    lines: Sequence[str], first: int, children: List[Node]
) -> Optional[int]:
    """Append nodes for ``lines[first:]`` to ``children``.

    Returns the line to parse again from when a dialect node ends inside a
    markdown-it block, or ``None`` once the input is exhausted.
    """
    blocks = _top_level_blocks(lines, first)
    index = 0
    while index < len(blocks):
        block = blocks[index]
        raw = block.source(lines)
        if block.type == "paragraph" and _ESM_RE.match(raw.lstrip()):
            end = block.start + _declaration_length(raw.split("\n"))
            children.append(
                Node(
                    NodeType.ESM,
                    content="\n".join(lines[block.start:end]),
                    line=block.start + 1,
                )
            )
            if end < block.end:
                return end
            index += 1
            continue
        if block.type in _COMPONENT_CANDIDATES and _opens_component(
            raw, block.start + 1
        ):
            index, end = _consume_component(blocks, index, lines)
            children.append(
                Node(
                    NodeType.COMPONENT,
                    content="\n".join(lines[block.start:end]),
                    line=block.start + 1,
                )
            )
            if end < blocks[index - 1].end:
                return end
            continue
        children.append(_build(block.node, first))
        index += 1
    return None


def _top_level_blocks(lines: Sequence[str], first: int) -> List[_Block]:
    root = SyntaxTreeNode(_MD.parse("\n".join(lines[first:])))
    blocks: List[_Block] = []
    for node in root.children:
        start, end = node.map or (0, 0)
        blocks.append(_Block(node, start + first, end + first))
    return blocks


def _normalize(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _line_of(node: SyntaxTreeNode, offset: int) -> Optional[int]:
    if node.map is None:
        return None
    return node.map[0] + offset + 1


# -----------------------------
# Dialect: import/export
# -----------------------------


def _declaration_length(lines: Sequence[str]) -> int:
    """Return how many leading ``lines`` belong to import/export statements.

    A line continues the statement while brackets are open, after a line
    that ends mid-expression, or when it starts a new declaration or a
    ``from`` clause. The first other line ends the declaration.
    """
    depth = 0
    previous = ""
    for count, line in enumerate(lines):
        stripped = line.strip()
        continues = (
            depth > 0
            or _ESM_RE.match(stripped) is not None
            or stripped.startswith(_CONTINUATION_STARTS)
            or previous.endswith(_OPEN_ENDINGS)
        )
        if count and not continues:
            return count
        depth = max(depth + _bracket_delta(stripped), 0)
        previous = stripped
    return len(lines)


def _bracket_delta(line: str) -> int:
    delta = 0
    quote: Optional[str] = None
    for char in line:
        if quote is not None:
            if char == quote:
                quote = None
        elif char in "\"'`":
            quote = char
        elif char in "({[":
            delta += 1
        elif char in ")}]":
            delta -= 1
    return delta


# -----------------------------
# Dialect: components
# -----------------------------


def _opens_component(raw: str, line: int) -> bool:
    """Return True when the first line of ``raw`` is made of JSX tags.

    The line must start with a tag and end with one; text between tags is
    allowed (``<Note>Hello</Note>``). Tags may wrap onto later lines.
    """
    offset = len(raw) - len(raw.lstrip(" \t"))
    if not _TAG_START_RE.match(raw, offset):
        return False

    masked = _mask_code_spans(raw)
    tags = _scan_tags(masked, line)
    if not tags or tags[0].start != offset:
        return False
    position = tags[0].end
    for tag in tags[1:]:
        if "\n" in masked[position:tag.start]:
            break
        position = tag.end
    newline = masked.find("\n", position)
    tail = masked[position:] if newline == -1 else masked[position:newline]
    return not tail.strip()


def _consume_component(
    blocks: Sequence[_Block], index: int, lines: Sequence[str]
) -> tuple[int, int]:
    """Pair the tags of the component starting at ``blocks[index]``.

    Returns the index of the first block not fully consumed and the
    exclusive end line of the component. The component ends on the line
    where its outermost tag closes, after any other tags on that line.
    """
    stack: List[_Tag] = []
    end: Optional[int] = None
    cursor = index
    while cursor < len(blocks):
        block = blocks[cursor]
        cursor += 1
        if block.type in _SCAN_SKIPPED:
            continue
        masked = _mask_code_spans(block.source(lines))
        for tag in _scan_tags(masked, block.start + 1):
            if end is not None and tag.line > end:
                return cursor, end
            _apply(stack, tag)
            end = None if stack else tag.end_line
        if end is not None:
            return cursor, end

    opener = stack[-1]
    raise ParseError(f"Unclosed <{opener.name}> element", line=opener.line)


def _apply(stack: List[_Tag], tag: _Tag) -> None:
    if tag.self_closing:
        return
    if not tag.closing:
        stack.append(tag)
        return
    if not stack:
        raise ParseError(
            f"Unexpected closing tag </{tag.name}>", line=tag.line
        )
    opener = stack[-1]
    if opener.name != tag.name:
        raise ParseError(
            f"Expected </{opener.name}> but found </{tag.name}>",
            line=tag.line,
        )
    stack.pop()


def _scan_tags(source: str, base_line: int) -> List[_Tag]:
    tags: List[_Tag] = []
    position = 0
    while True:
        match = _TAG_START_RE.search(source, position)
        if match is None:
            return tags
        start = match.start()
        autolink = _AUTOLINK_RE.match(source, start)
        if autolink is not None:
            position = autolink.end()
            continue
        closing = match.group(0) == "</"
        name_match = _TAG_NAME_RE.match(source, match.end())
        name = name_match.group(0) if name_match else ""
        cursor = name_match.end() if name_match else match.end()
        line = base_line + source.count("\n", 0, start)
        end, self_closing = _scan_attributes(source, cursor, name, line)
        tags.append(
            _Tag(
                name=name,
                closing=closing,
                self_closing=self_closing,
                start=start,
                end=end,
                line=line,
                end_line=base_line + source.count("\n", 0, end),
            )
        )
        position = end


def _scan_attributes(
    source: str, position: int, name: str, line: int
) -> tuple[int, bool]:
    depth = 0
    quote: Optional[str] = None
    last = ""
    while position < len(source):
        char = source[position]
        if quote is not None:
            if char == quote:
                quote = None
        elif char in "\"'" or (depth and char == "`"):
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            if depth == 0:
                raise ParseError(
                    f"Unbalanced '}}' in <{name}> tag", line=line
                )
            depth -= 1
        elif char == ">" and depth == 0:
            return position + 1, last == "/"
        if not char.isspace():
            last = char
        position += 1
    raise ParseError(f"Unterminated <{name}> tag", line=line)


def _mask_code_spans(source: str) -> str:
    return _CODE_SPAN_RE.sub(lambda m: " " * len(m.group(0)), source)


# -----------------------------
# Plain Markdown blocks
# -----------------------------


def _build(block: SyntaxTreeNode, offset: int) -> Node:
    kind = block.type
    line = _line_of(block, offset)
    if kind == "paragraph":
        return Node(NodeType.PARAGRAPH, content=_inline(block), line=line)
    if kind == "heading":
        return Node(
            NodeType.HEADING,
            content=_inline(block),
            level=int(block.tag[1:]),
            markup=block.markup,
            line=line,
        )
    if kind == "blockquote":
        return Node(
            NodeType.BLOCKQUOTE,
            children=tuple(_build(child, offset) for child in block.children),
            line=line,
        )
    if kind in ("bullet_list", "ordered_list"):
        return _build_list(block, offset)
    if kind == "list_item":
        return Node(
            NodeType.LIST_ITEM,
            children=tuple(_build(child, offset) for child in block.children),
            markup=block.markup,
            line=line,
        )
    if kind == "fence":
        return Node(
            NodeType.FENCE,
            content=block.content,
            markup=block.markup,
            info=block.info,
            line=line,
        )
    if kind == "code_block":
        return Node(NodeType.CODE_BLOCK, content=block.content, line=line)
    if kind == "html_block":
        return Node(NodeType.HTML_BLOCK, content=block.content, line=line)
    if kind == "hr":
        return Node(
            NodeType.THEMATIC_BREAK, markup=block.markup, line=line
        )
    if kind == "table":
        return _build_table(block, offset)
    raise ParseError(f"Unsupported block type '{kind}'", line=line)


def _build_list(block: SyntaxTreeNode, offset: int) -> Node:
    items = tuple(_build(child, offset) for child in block.children)
    loose = any(
        child.type == "paragraph" and not child.hidden
        for item in block.children
        for child in item.children
    )
    marker = items[0].markup if items else "-"
    if block.type == "ordered_list":
        start = int((block.attrs or {}).get("start", 1))
        return Node(
            NodeType.ORDERED_LIST,
            children=items,
            markup=marker,
            start=start,
            tight=not loose,
            line=_line_of(block, offset),
        )
    return Node(
        NodeType.BULLET_LIST,
        children=items,
        markup=marker,
        tight=not loose,
        line=_line_of(block, offset),
    )


def _build_table(block: SyntaxTreeNode, offset: int) -> Node:
    rows: List[tuple[str, ...]] = []
    align: tuple[Optional[str], ...] = ()
    for section in block.children:
        for row in section.children:
            cells = tuple(_inline(cell) for cell in row.children)
            if section.type == "thead":
                align = tuple(_alignment(cell) for cell in row.children)
            rows.append(cells)
    return Node(
        NodeType.TABLE,
        rows=tuple(rows),
        align=align,
        line=_line_of(block, offset),
    )


def _alignment(cell: SyntaxTreeNode) -> Optional[str]:
    style = str((cell.attrs or {}).get("style", ""))
    if style.startswith("text-align:"):
        return style.split(":", 1)[1].strip()
    return None


def _inline(block: SyntaxTreeNode) -> str:
    for child in block.children:
        if child.type == "inline":
            return child.content
    return ""


__all__ = ["build_markdown_it", "parse"]
