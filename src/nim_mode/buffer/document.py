"""Line-oriented text storage for nim_mode buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple


@dataclass(slots=True)
class BufferDocument:
    """Versioned list-of-lines text.

    Edits return a new document with a bumped ``version``, so an analysis
    holding ``text`` never sees a half-applied change.
    """

    _lines: List[str] = field(default_factory=lambda: [""])
    version: int = 0

    @classmethod
    def from_text(cls, text: str, *, version: int = 0) -> "BufferDocument":
        return cls(_lines=[line.rstrip("\r") for line in text.split("\n")], version=version)

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def lines(self) -> Sequence[str]:
        return tuple(self._lines)

    def get_line(self, row: int) -> str:
        return self._lines[row]

    def with_lines(self, start: int, end: int, new_lines: Iterable[str]) -> "BufferDocument":
        """Copy with rows ``[start, end)`` replaced by ``new_lines``."""

        lines = list(self._lines)
        lines[start:end] = list(new_lines)
        return BufferDocument(_lines=lines or [""], version=self.version + 1)

    def with_text(self, text: str) -> "BufferDocument":
        return BufferDocument.from_text(text, version=self.version + 1)

    def line_offset(self, row: int) -> int:
        """Offset of the first character of ``row`` in ``text``."""

        return sum(len(line) + 1 for line in self._lines[:row])

    def offset_of(self, cursor: Tuple[int, int]) -> int:
        row, col = cursor
        return self.line_offset(row) + col

    def cursor_at(self, offset: int) -> Tuple[int, int]:
        running = 0
        for row, line in enumerate(self._lines):
            if offset <= running + len(line):
                return (row, offset - running)
            running += len(line) + 1
        return (len(self._lines) - 1, len(self._lines[-1]))

    def clamp(self, cursor: Tuple[int, int]) -> Tuple[int, int]:
        row = max(0, min(cursor[0], len(self._lines) - 1))
        return (row, max(0, min(cursor[1], len(self._lines[row]))))


__all__ = ["BufferDocument"]
