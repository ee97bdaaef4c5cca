"""Bounds checks for cursors and row spans."""

from __future__ import annotations

from .document import BufferDocument
from .state import Cursor


class BufferValidationError(RuntimeError):
    """A cursor or row span falls outside the document."""

    def __init__(self, message: str, *, cursor: Cursor | None = None) -> None:
        super().__init__(message)
        self.cursor = cursor


def ensure_cursor(document: BufferDocument, cursor: Cursor) -> Cursor:
    row, col = cursor
    if not 0 <= row < document.line_count:
        raise BufferValidationError(f"Row {row} out of range", cursor=cursor)
    if not 0 <= col <= len(document.get_line(row)):
        raise BufferValidationError(f"Column {col} out of range on row {row}", cursor=cursor)
    return cursor


def ensure_rows(document: BufferDocument, start: int, end: int) -> tuple[int, int]:
    """Clamp ``end`` of a ``[start, end)`` span; reversed spans are errors."""

    if start > end:
        raise BufferValidationError(f"Row span {start}..{end} is reversed")
    if not 0 <= start < document.line_count:
        raise BufferValidationError(f"Row {start} out of range", cursor=(start, 0))
    return start, min(end, document.line_count)


__all__ = ["BufferValidationError", "ensure_cursor", "ensure_rows"]
