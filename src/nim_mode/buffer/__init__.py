"""Text buffer with cursor, selection and undo used by every nim_mode command."""

from .buffer import Buffer, BufferDelta, Transaction
from .document import BufferDocument
from .mirror import BufferMirror
from .state import BufferState, Cursor, Selection
from .undo import UndoEntry, UndoTimeline
from .validation import BufferValidationError, ensure_cursor, ensure_rows

__all__ = [
    "Buffer",
    "BufferDelta",
    "BufferDocument",
    "BufferMirror",
    "BufferState",
    "BufferValidationError",
    "Cursor",
    "Selection",
    "Transaction",
    "UndoEntry",
    "UndoTimeline",
    "ensure_cursor",
    "ensure_rows",
]
