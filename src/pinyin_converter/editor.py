from __future__ import annotations

"""Editor access and the line replacement step.

`Editor` describes the few read/write primitives the converter needs from a
host editor. `TextBuffer` is an in-memory implementation used by the HTTP app,
the CLI and the tests.
"""

from typing import List, NamedTuple, Optional, Protocol, Tuple


class Position(NamedTuple):
    line: int
    ch: int


class Editor(Protocol):
    def get_cursor(self) -> Position: ...

    def set_cursor(self, pos: Position) -> None: ...

    def get_line(self, line: int) -> str: ...

    def line_count(self) -> int: ...

    def get_value(self) -> str: ...

    def get_selection(self) -> str: ...

    def selection_range(self) -> Optional[Tuple[Position, Position]]: ...

    def replace_range(self, text: str, start: Position, end: Optional[Position] = None) -> None: ...


def _split(text: str) -> List[str]:
    return text.replace("\r\n", "\n").split("\n")


class TextBuffer:
    """A plain-text document with a cursor, an optional selection and undo.

    Lines are held without their terminators; the document's line ending
    (LF or CRLF) is restored by `get_value` and `get_selection`.
    """

    def __init__(self, text: str = "", cursor: Position = Position(0, 0)):
        self.newline = "\r\n" if "\r\n" in text else "\n"
        self._lines: List[str] = _split(text)
        self._cursor = self._clamp(Position(*cursor))
        self._selection: Optional[Tuple[Position, Position]] = None
        self._history: List[Tuple[str, Position]] = []

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def _clamp(self, pos: Position) -> Position:
        line = min(max(pos.line, 0), len(self._lines) - 1)
        ch = min(max(pos.ch, 0), len(self._lines[line]))
        return Position(line, ch)

    def _offset(self, pos: Position) -> int:
        pos = self._clamp(pos)
        return sum(len(line) + 1 for line in self._lines[: pos.line]) + pos.ch

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_cursor(self) -> Position:
        return self._cursor

    def set_cursor(self, pos: Position) -> None:
        self._cursor = self._clamp(Position(*pos))
        self._selection = None

    def get_line(self, line: int) -> str:
        return self._lines[line]

    def line_count(self) -> int:
        return len(self._lines)

    def _text(self) -> str:
        return "\n".join(self._lines)

    def get_value(self) -> str:
        return self.newline.join(self._lines)

    def set_selection(self, anchor: Position, head: Position) -> None:
        anchor, head = self._clamp(Position(*anchor)), self._clamp(Position(*head))
        self._selection = (min(anchor, head), max(anchor, head))
        self._cursor = head

    def selection_range(self) -> Optional[Tuple[Position, Position]]:
        if self._selection is None or self._selection[0] == self._selection[1]:
            return None
        return self._selection

    def get_selection(self) -> str:
        span = self.selection_range()
        if span is None:
            return ""
        text = self._text()[self._offset(span[0]) : self._offset(span[1])]
        return text.replace("\n", self.newline)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def replace_range(self, text: str, start: Position, end: Optional[Position] = None) -> None:
        """Replace ``start..end`` with *text* as a single undoable edit."""
        end = start if end is None else end
        value = self._text()
        lo, hi = sorted((self._offset(start), self._offset(end)))
        self._history.append((value, self._cursor))
        self._lines = _split(value[:lo] + text + value[hi:])
        self._selection = None
        self._cursor = self._clamp(self._cursor)

    def undo(self) -> bool:
        if not self._history:
            return False
        value, cursor = self._history.pop()
        self._lines = _split(value)
        self._cursor = self._clamp(cursor)
        self._selection = None
        return True

    @property
    def edit_count(self) -> int:
        return len(self._history)


def replace_span(editor: Editor, start: Position, end: Position, text: str) -> None:
    editor.replace_range(text, start, end)
    editor.set_cursor(start)


def replace_line(editor: Editor, line: int, text: str) -> None:
    """Swap the whole of *line* for *text* and park the cursor at its start."""
    start = Position(line, 0)
    end = Position(line, len(editor.get_line(line)))
    replace_span(editor, start, end, text)
