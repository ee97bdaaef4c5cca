"""Apply a computed column to a buffer line."""

from __future__ import annotations

from typing import Optional

from nim_mode.buffer import Buffer, Cursor


def leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip(" \t"))]


def apply_indent(buffer: Buffer, row: int, column: int, *, label: str = "indent_line") -> bool:
    """Make ``row`` start with exactly ``column`` spaces.

    A cursor inside the old indentation lands at the end of the new one; a
    cursor further right keeps its place in the text. Returns ``False``
    without touching the buffer when the line already has that indentation.
    """

    if column < 0:
        raise ValueError("column must be non-negative")
    line = buffer.line(row)
    old = leading_whitespace(line)
    new = " " * column
    if old == new:
        return False

    cursor: Optional[Cursor] = None
    cursor_row, cursor_col = buffer.state.cursor
    if cursor_row == row:
        if cursor_col <= len(old):
            cursor = (row, column)
        else:
            cursor = (row, cursor_col - len(old) + column)
    buffer.replace_lines(row, row + 1, [new + line[len(old):]], label=label, cursor=cursor)
    return True


__all__ = ["apply_indent", "leading_whitespace"]
