"""Linear undo/redo history for buffer edits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .state import Cursor


@dataclass(frozen=True, slots=True)
class UndoEntry:
    """Whole-text before/after snapshot of one committed edit."""

    label: str
    before_text: str
    after_text: str
    cursor_before: Cursor
    cursor_after: Cursor


class UndoTimeline:
    def __init__(self) -> None:
        self._done: List[UndoEntry] = []
        self._undone: List[UndoEntry] = []

    def __len__(self) -> int:
        return len(self._done)

    def push(self, entry: UndoEntry) -> None:
        self._done.append(entry)
        self._undone.clear()

    def last_label(self) -> Optional[str]:
        return self._done[-1].label if self._done else None

    def undo(self) -> Optional[UndoEntry]:
        if not self._done:
            return None
        entry = self._done.pop()
        self._undone.append(entry)
        return entry

    def redo(self) -> Optional[UndoEntry]:
        if not self._undone:
            return None
        entry = self._undone.pop()
        self._done.append(entry)
        return entry


__all__ = ["UndoEntry", "UndoTimeline"]
