"""Buffer facade: document, cursor and undo history behind one edit API."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, Iterable, Optional

from nim_mode.runtime import telemetry

from .document import BufferDocument
from .mirror import BufferMirror
from .state import BufferState, Cursor
from .undo import UndoEntry, UndoTimeline
from .validation import ensure_cursor, ensure_rows


@dataclass(frozen=True, slots=True)
class BufferDelta:
    """What an edit left behind."""

    version: int
    cursor: Cursor
    label: str
    changed: bool


class Buffer:
    """Single-writer text buffer the indentation engine reads and edits.

    Every edit runs in a ``Transaction`` and, when it changes the text,
    leaves exactly one undo entry.
    """

    def __init__(
        self,
        *,
        name: str = "default",
        path: Optional[str] = None,
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        undo: Optional[UndoTimeline] = None,
    ) -> None:
        self.name = name
        self.path = path
        self.document = document or BufferDocument()
        self.state = state or BufferState()
        self.undo = undo or UndoTimeline()

    @classmethod
    def from_text(
        cls, text: str, *, name: str = "default", path: Optional[str] = None
    ) -> "Buffer":
        return cls(name=name, path=path, document=BufferDocument.from_text(text))

    @property
    def text(self) -> str:
        return self.document.text

    @property
    def line_count(self) -> int:
        return self.document.line_count

    def line(self, row: int) -> str:
        return self.document.get_line(row)

    def mirror(self) -> BufferMirror:
        return BufferMirror(
            text=self.document.text,
            cursor=self.state.cursor,
            selection=self.state.selection,
            version=self.document.version,
        )

    def set_cursor(self, row: int, col: int) -> Cursor:
        cursor = ensure_cursor(self.document, (row, col))
        self.state.set_cursor(*cursor)
        return cursor

    def replace_range(
        self, start: Cursor, end: Cursor, text: str, *, label: str
    ) -> BufferDelta:
        """Replace the text between two cursors; the cursor lands after ``text``."""

        start = ensure_cursor(self.document, start)
        end = ensure_cursor(self.document, end)
        if start > end:
            start, end = end, start
        with Transaction(self, label) as tx:
            before = self.document.text
            start_offset = self.document.offset_of(start)
            end_offset = self.document.offset_of(end)
            self.document = self.document.with_text(
                before[:start_offset] + text + before[end_offset:]
            )
            self.state.set_cursor(*self.document.cursor_at(start_offset + len(text)))
            tx.commit(before, start)
        return tx.delta

    def replace_lines(
        self,
        start: int,
        end: int,
        new_lines: Iterable[str],
        *,
        label: str,
        cursor: Optional[Cursor] = None,
    ) -> BufferDelta:
        """Swap rows ``[start, end)`` for ``new_lines`` as one undoable step.

        The cursor moves to ``cursor`` when given, else stays where it was,
        clamped to the new text.
        """

        start, end = ensure_rows(self.document, start, end)
        with Transaction(self, label) as tx:
            before = self.document.text
            cursor_before = self.state.cursor
            self.document = self.document.with_lines(start, end, new_lines)
            target = cursor if cursor is not None else cursor_before
            self.state.set_cursor(*self.document.clamp(target))
            tx.commit(before, cursor_before)
        return tx.delta

    def insert_text(self, text: str, *, cursor: Optional[Cursor] = None) -> BufferDelta:
        position = cursor or self.state.cursor
        return self.replace_range(position, position, text, label="insert_text")

    def delete_range(self, start: Cursor, end: Cursor) -> BufferDelta:
        return self.replace_range(start, end, "", label="delete_range")

    def undo_last(self) -> bool:
        entry = self.undo.undo()
        if entry is None:
            return False
        self.document = self.document.with_text(entry.before_text)
        self.state.set_cursor(*self.document.clamp(entry.cursor_before))
        return True

    def redo_last(self) -> bool:
        entry = self.undo.redo()
        if entry is None:
            return False
        self.document = self.document.with_text(entry.after_text)
        self.state.set_cursor(*self.document.clamp(entry.cursor_after))
        return True


class Transaction(AbstractContextManager["Transaction"]):
    """Wraps one edit in a ``buffer::<label>`` span and records its undo entry."""

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self.delta: Optional[BufferDelta] = None
        self._span_cm: Optional[ContextManager[object]] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            f"buffer::{self.label}",
            component="buffer",
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        return self

    def commit(self, before_text: str, cursor_before: Cursor) -> None:
        buffer = self.buffer
        changed = before_text != buffer.document.text
        if changed:
            buffer.undo.push(
                UndoEntry(
                    label=self.label,
                    before_text=before_text,
                    after_text=buffer.document.text,
                    cursor_before=cursor_before,
                    cursor_after=buffer.state.cursor,
                )
            )
        self.delta = BufferDelta(
            version=buffer.document.version,
            cursor=buffer.state.cursor,
            label=self.label,
            changed=changed,
        )

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


__all__ = ["Buffer", "BufferDelta", "Transaction"]
