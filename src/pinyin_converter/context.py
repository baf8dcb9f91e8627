from __future__ import annotations

"""Build the bounded context window that is sent alongside the target line.

Two strategies are available:

* ``document`` – the whole note with the target line tagged, shrunk to a
  window around the cursor when it exceeds the character budget.
* ``backward`` – only the few lines right before the cursor.
"""

from enum import Enum
from typing import Sequence

CONTEXT_MARKER = "[待转换行]"

DOCUMENT_BUDGET = 2000
DOCUMENT_RADIUS = 10
BACKWARD_LINES = 3
BACKWARD_BUDGET = 1000


class ContextStrategy(str, Enum):
    DOCUMENT = "document"
    BACKWARD = "backward"


def is_blank(text: str | None) -> bool:
    return not (text or "").strip()


def _check_cursor(lines: Sequence[str], cursor_line: int) -> None:
    if not 0 <= cursor_line < len(lines):
        raise IndexError(f"cursor line {cursor_line} outside document of {len(lines)} lines")


def mark_target(lines: Sequence[str], cursor_line: int) -> list[str]:
    """Return a copy of *lines* with the target line prefixed by the marker."""
    _check_cursor(lines, cursor_line)
    marked = list(lines)
    marked[cursor_line] = f"{CONTEXT_MARKER} {marked[cursor_line]}"
    return marked


def document_context(
    lines: Sequence[str],
    cursor_line: int,
    budget: int = DOCUMENT_BUDGET,
    radius: int = DOCUMENT_RADIUS,
) -> str:
    marked = mark_target(lines, cursor_line)
    context = "\n".join(marked)
    if len(context) <= budget:
        return context

    start = max(cursor_line - radius, 0)
    end = min(cursor_line + radius, len(marked) - 1)
    window = marked[start : end + 1]
    context = "\n".join(window)
    if len(context) <= budget:
        return context

    # cut around the marked line so the marker always survives
    target_at = sum(len(line) + 1 for line in window[: cursor_line - start])
    target_len = len(marked[cursor_line])
    if target_len >= budget:
        return context[target_at : target_at + budget]
    cut = max(0, min(target_at - (budget - target_len) // 2, len(context) - budget))
    return context[cut : cut + budget]


def backward_context(
    lines: Sequence[str],
    cursor_line: int,
    max_lines: int = BACKWARD_LINES,
    budget: int = BACKWARD_BUDGET,
) -> str:
    _check_cursor(lines, cursor_line)
    previous = lines[max(cursor_line - max_lines, 0) : cursor_line]
    context = "\n".join(previous)
    # keep the text closest to the cursor
    if len(context) > budget:
        context = context[-budget:]
    return context


def extract_context(
    lines: Sequence[str],
    cursor_line: int,
    strategy: ContextStrategy | str = ContextStrategy.DOCUMENT,
) -> str:
    strategy = ContextStrategy(strategy)
    if strategy is ContextStrategy.BACKWARD:
        return backward_context(lines, cursor_line)
    return document_context(lines, cursor_line)
