"""Line-oriented removal of human-only annotations and tooling lines.

Runs after serialization on every fragment, and on its own when the
structural pass fails. The filter is a two-state machine: ``step`` maps a
state and one line to the next state plus a keep/drop decision, and
``filter_lines`` threads the state through the lines of one fragment.
"""

from __future__ import annotations

from enum import Enum

HUMANS_ONLY_MARKER = "> 🤖 *For Humans only*:"
META_MARKER = "<Meta "
DEFAULT_TOOLING_NAMESPACE = "@storybook"


class LineFilterState(Enum):
    NORMAL = "normal"
    SKIPPING = "skipping"


def step(
    state: LineFilterState,
    line: str,
    *,
    tooling_namespace: str = DEFAULT_TOOLING_NAMESPACE,
) -> tuple[LineFilterState, bool]:
    """Return ``(next_state, keep)`` for ``line`` read in ``state``."""

    stripped = line.strip()
    if stripped.startswith("import ") and tooling_namespace in line:
        return state, False
    if stripped.startswith(META_MARKER):
        return state, False
    if state is LineFilterState.NORMAL:
        if stripped.startswith(HUMANS_ONLY_MARKER):
            return LineFilterState.SKIPPING, False
        return state, True
    # Skipping: a blank or non-quote line ends the annotation and is kept.
    if not stripped or not stripped.startswith(">"):
        return LineFilterState.NORMAL, True
    return state, False


def filter_lines(
    text: str, *, tooling_namespace: str = DEFAULT_TOOLING_NAMESPACE
) -> str:
    """Drop annotation blocks and tooling lines from ``text``.

    Lines are split and re-joined on ``"\\n"`` so the input's line endings
    and trailing newline survive. An annotation still open at the end of
    the text swallows the remaining lines.
    """
    state = LineFilterState.NORMAL
    kept: list[str] = []
    for line in text.split("\n"):
        state, keep = step(state, line, tooling_namespace=tooling_namespace)
        if keep:
            kept.append(line)
    return "\n".join(kept)


__all__ = [
    "DEFAULT_TOOLING_NAMESPACE",
    "HUMANS_ONLY_MARKER",
    "META_MARKER",
    "LineFilterState",
    "filter_lines",
    "step",
]
