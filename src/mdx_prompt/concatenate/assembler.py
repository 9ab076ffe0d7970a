"""Ordering and assembly of converted fragments into one document."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from mdx_prompt.convert import convert

BANNER = "<!-- This file is auto-generated. Do not edit manually. -->"


class Category(Enum):
    """Fragment groupings, declared in output order."""

    BACKGROUND = "background"
    ANTI_PATTERNS = "anti-patterns"

    @property
    def title(self) -> str:
        return _TITLES[self]


_TITLES = {
    Category.BACKGROUND: "Background",
    Category.ANTI_PATTERNS: "Anti-patterns",
}


@dataclass(frozen=True)
class Fragment:
    """One source document as read from disk."""

    identifier: str
    category: Category
    text: str


@dataclass(frozen=True)
class Section:
    category: Category
    texts: tuple[str, ...]

    def render(self) -> str:
        parts = [f"# {self.category.title}\n\n"]
        parts.extend(f"{text}\n\n" for text in self.texts)
        return "".join(parts)


@dataclass(frozen=True)
class AssembledOutput:
    """Immutable accumulator for the final document."""

    sections: tuple[Section, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.sections

    @property
    def fragment_count(self) -> int:
        return sum(len(section.texts) for section in self.sections)

    def with_section(
        self, category: Category, texts: Sequence[str]
    ) -> "AssembledOutput":
        """Return a new output with ``texts`` appended under ``category``.

        A category without texts contributes nothing, not even a header.
        """
        if not texts:
            return self
        return AssembledOutput(
            sections=self.sections + (Section(category, tuple(texts)),)
        )

    def render(self) -> str:
        """Return the document text, or ``""`` when nothing was assembled."""
        if self.is_empty:
            return ""
        return f"{BANNER}\n\n" + "".join(
            section.render() for section in self.sections
        )


def assemble(
    background: Sequence[Fragment],
    anti_patterns: Sequence[Fragment],
    *,
    convert_fragment: Callable[[Fragment], str] | None = None,
) -> AssembledOutput:
    """Convert and assemble two pre-sorted fragment lists in category order."""

    converter = convert_fragment or (lambda fragment: convert(fragment.text))
    output = AssembledOutput()
    for category, fragments in (
        (Category.BACKGROUND, background),
        (Category.ANTI_PATTERNS, anti_patterns),
    ):
        output = output.with_section(
            category, [converter(fragment) for fragment in fragments]
        )
    return output


__all__ = [
    "BANNER",
    "AssembledOutput",
    "Category",
    "Fragment",
    "Section",
    "assemble",
]
