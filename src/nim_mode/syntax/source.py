"""Immutable text snapshot with row/column arithmetic."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass

TAB_WIDTH = 8


@dataclass(frozen=True, slots=True)
class Region:
    """Half-open ``[start, end)`` span of offsets."""

    start: int
    end: int

    def __contains__(self, pos: object) -> bool:
        return isinstance(pos, int) and self.start <= pos < self.end


class SourceText:
    """Text frozen for the duration of one analysis.

    Offsets are plain ``int`` positions into ``text``; rows and columns are
    derived on demand from a line-start table.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        starts = [0]
        find = text.find
        index = find("\n")
        while index != -1:
            starts.append(index + 1)
            index = find("\n", index + 1)
        self._line_starts = starts

    def __len__(self) -> int:
        return len(self.text)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def row_of(self, pos: int) -> int:
        pos = max(0, min(pos, len(self.text)))
        return bisect_right(self._line_starts, pos) - 1

    def column_of(self, pos: int) -> int:
        return pos - self._line_starts[self.row_of(pos)]

    def offset(self, row: int, col: int = 0) -> int:
        return self._line_starts[row] + col

    def line_start(self, row: int) -> int:
        return self._line_starts[row]

    def line_end(self, row: int) -> int:
        """Offset of the newline ending ``row`` (or of the end of text)."""

        if row + 1 < len(self._line_starts):
            return self._line_starts[row + 1] - 1
        return len(self.text)

    def line_text(self, row: int) -> str:
        return self.text[self.line_start(row) : self.line_end(row)]

    def indent_end(self, row: int) -> int:
        """Offset of the first non-blank character of ``row``."""

        pos = self.line_start(row)
        end = self.line_end(row)
        text = self.text
        while pos < end and text[pos] in " \t":
            pos += 1
        return pos

    def indentation(self, row: int) -> int:
        column = 0
        for char in self.text[self.line_start(row) : self.indent_end(row)]:
            if char == "\t":
                column = (column // TAB_WIDTH + 1) * TAB_WIDTH
            else:
                column += 1
        return column

    def indentation_at(self, pos: int) -> int:
        return self.indentation(self.row_of(pos))

    def is_blank(self, row: int) -> bool:
        return self.indent_end(row) == self.line_end(row)

    def char_at(self, pos: int) -> str:
        if 0 <= pos < len(self.text):
            return self.text[pos]
        return ""


__all__ = ["Region", "SourceText", "TAB_WIDTH"]
