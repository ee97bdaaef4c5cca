"""Cursor and selection of a buffer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

Cursor = Tuple[int, int]  # (row, column)
Selection = Tuple[Cursor, Cursor]


@dataclass(slots=True)
class BufferState:
    cursor: Cursor = (0, 0)
    selection: Optional[Selection] = None

    def set_cursor(self, row: int, col: int) -> None:
        self.cursor = (row, col)

    def set_selection(self, start: Cursor, end: Cursor) -> None:
        self.selection = (start, end)

    def clear_selection(self) -> None:
        self.selection = None

    def selected_rows(self) -> Optional[Tuple[int, int]]:
        """``[start, end)`` rows touched by the selection.

        A selection ending at column 0 of a later row does not include it.
        """

        if self.selection is None:
            return None
        start, end = sorted(self.selection)
        end_row = end[0] + 1 if end[1] > 0 or end[0] == start[0] else end[0]
        return start[0], end_row


__all__ = ["BufferState", "Cursor", "Selection"]
