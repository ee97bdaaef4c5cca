"""Region operations: recompute indentation row by row, or shift rigidly."""

from __future__ import annotations

from typing import List, Optional

from nim_mode.buffer import Buffer, Cursor
from nim_mode.config import IndentConfig
from nim_mode.runtime import telemetry
from nim_mode.syntax.source import TAB_WIDTH

from .analysis import IndentAnalysis
from .mutator import apply_indent, leading_whitespace


class InsufficientIndentation(RuntimeError):
    """Raised when a left shift would push a line past column 0."""

    def __init__(self, message: str, *, row: int, indentation: int, count: int) -> None:
        super().__init__(message)
        self.row = row
        self.indentation = indentation
        self.count = count


def _width(whitespace: str) -> int:
    column = 0
    for char in whitespace:
        if char == "\t":
            column = (column // TAB_WIDTH + 1) * TAB_WIDTH
        else:
            column += 1
    return column


def indent_region(
    buffer: Buffer, start_row: int, end_row: int, config: IndentConfig
) -> int:
    """Reindent rows ``[start_row, end_row)``; returns how many rows changed.

    Blank rows and rows that begin inside a string are left alone, except a
    row that opens with the delimiter closing its string. The whole pass is
    committed as a single undoable edit.
    """

    end_row = min(end_row, buffer.line_count)
    scratch = Buffer.from_text(buffer.text, name=f"{buffer.name}:region")
    scratch.state.set_cursor(*buffer.state.cursor)
    changed = 0
    analysis: Optional[IndentAnalysis] = None
    with telemetry.span(
        "indent::region",
        component="indent",
        metadata={"buffer": buffer.name, "rows": f"{start_row}:{end_row}"},
    ) as handle:
        for row in range(start_row, end_row):
            if not scratch.line(row).strip():
                continue
            if analysis is None:
                analysis = IndentAnalysis(scratch.text, config)
            if analysis.starts_in_string(row) and not analysis.closes_string(row):
                continue
            column = analysis.indentation_for_row(row)
            if apply_indent(scratch, row, column):
                changed += 1
                analysis = None
        handle.add_metadata("changed", changed)
        if changed:
            buffer.replace_lines(
                0,
                buffer.line_count,
                scratch.document.lines(),
                label="indent_region",
                cursor=scratch.state.cursor,
            )
    return changed


def _split_indent(line: str) -> tuple[str, str, str]:
    """``(through_last_tab, trailing_spaces, rest)`` of a line's indentation."""

    whitespace = leading_whitespace(line)
    last_tab = whitespace.rfind("\t") + 1
    return whitespace[:last_tab], whitespace[last_tab:], line[len(whitespace):]


def _shift_cursor(buffer: Buffer, start_row: int, end_row: int, delta: int) -> Cursor:
    row, col = buffer.state.cursor
    if start_row <= row < end_row and buffer.line(row).strip():
        col = max(0, col + delta)
    return (row, col)


def shift_left(
    buffer: Buffer,
    start_row: int,
    end_row: int,
    count: Optional[int] = None,
    *,
    config: Optional[IndentConfig] = None,
) -> None:
    """Remove ``count`` columns from every non-blank row, or raise before touching any.

    Columns come out of the spaces after the last indenting tab, so tabs are
    never rewritten; a row without enough such spaces refuses the shift.
    Whitespace-only rows are left as they are. ``count`` defaults to the
    configured indent offset.
    """

    if count is None:
        count = (config or IndentConfig()).indent_offset
    if count < 0:
        raise ValueError("count must be non-negative")
    end_row = min(end_row, buffer.line_count)
    shifted: List[str] = []
    for row in range(start_row, end_row):
        line = buffer.line(row)
        if not line.strip():
            shifted.append(line)
            continue
        tabs, spaces, rest = _split_indent(line)
        if len(spaces) < count:
            indentation = _width(tabs + spaces)
            telemetry.record_event(
                "indent.shift_left.refused",
                level="warning",
                data={"row": row, "indentation": indentation, "count": count},
            )
            reason = "tab-indented" if tabs else f"indented {indentation} columns"
            raise InsufficientIndentation(
                f"Row {row} is {reason}, cannot shift left by {count}",
                row=row,
                indentation=indentation,
                count=count,
            )
        shifted.append(tabs + spaces[count:] + rest)
    buffer.replace_lines(
        start_row,
        end_row,
        shifted,
        label="shift_left",
        cursor=_shift_cursor(buffer, start_row, end_row, -count),
    )


def shift_right(
    buffer: Buffer,
    start_row: int,
    end_row: int,
    count: Optional[int] = None,
    *,
    config: Optional[IndentConfig] = None,
) -> None:
    """Add ``count`` spaces after the indenting tabs of every non-blank row."""

    if count is None:
        count = (config or IndentConfig()).indent_offset
    if count < 0:
        raise ValueError("count must be non-negative")
    end_row = min(end_row, buffer.line_count)
    shifted: List[str] = []
    for row in range(start_row, end_row):
        line = buffer.line(row)
        if not line.strip():
            shifted.append(line)
            continue
        tabs, spaces, rest = _split_indent(line)
        shifted.append(tabs + " " * count + spaces + rest)
    buffer.replace_lines(
        start_row,
        end_row,
        shifted,
        label="shift_right",
        cursor=_shift_cursor(buffer, start_row, end_row, count),
    )


__all__ = ["InsufficientIndentation", "indent_region", "shift_left", "shift_right"]
