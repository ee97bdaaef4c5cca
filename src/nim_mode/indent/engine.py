"""Indentation engine façade binding a buffer, its config and its session."""

from __future__ import annotations

from typing import Optional

from nim_mode.buffer import Buffer
from nim_mode.config import IndentConfig
from nim_mode.runtime import telemetry
from nim_mode.syntax.keywords import CLOSE_BRACKETS

from .analysis import IndentAnalysis
from .context import IndentContext
from .levels import CycleState, IndentSession
from .mutator import apply_indent, leading_whitespace
from .region import indent_region, shift_left, shift_right

# Keywords whose statements a dedenter line can close.
_CLOSABLE_OPENERS = frozenset(
    {"if", "elif", "else", "when", "try", "except", "case", "of", "while", "for"}
)


class IndentEngine:
    """Every request analyses a fresh snapshot of the buffer text.

    Only the cycling state in ``session`` survives between calls, and it is
    reused solely for repeated cycle requests on an unchanged line.
    """

    def __init__(
        self,
        buffer: Buffer,
        config: Optional[IndentConfig] = None,
        session: Optional[IndentSession] = None,
        *,
        logger_name: Optional[str] = None,
    ) -> None:
        self.buffer = buffer
        self.config = config or IndentConfig()
        self.session = session or IndentSession()
        self._logger_name = logger_name or "nim_mode.indent"

    # ------------------------------------------------------------------
    # Analysis

    def analysis(self) -> IndentAnalysis:
        return IndentAnalysis(self.buffer.text, self.config)

    def _row(self, row: Optional[int]) -> int:
        return self.buffer.state.cursor[0] if row is None else row

    def context_at(self, row: Optional[int] = None) -> IndentContext:
        return self.analysis().context_for_row(self._row(row))

    def calculate_indentation(self, row: Optional[int] = None) -> int:
        return self.analysis().indentation_for_row(self._row(row))

    def calculate_levels(self, row: Optional[int] = None) -> CycleState:
        row = self._row(row)
        column = self.calculate_indentation(row)
        self.session.cycle = CycleState.for_column(
            column,
            self.config.indent_offset,
            row=row,
            signature=self._signature(row),
        )
        return self.session.cycle

    def _signature(self, row: int) -> str:
        return self.buffer.line(row).lstrip(" \t")

    # ------------------------------------------------------------------
    # Line commands

    def indent_line(
        self, row: Optional[int] = None, *, is_repeated_cycle_request: bool = False
    ) -> int:
        """Indent ``row`` and return the column applied.

        A repeated request on the same, unchanged line steps to the next
        level instead of recomputing.
        """

        row = self._row(row)
        with telemetry.span(
            "indent::line",
            logger_name=self._logger_name,
            component="indent",
            metadata={"row": row, "repeated": is_repeated_cycle_request},
        ) as handle:
            cycle = self.session.cycle
            if (
                is_repeated_cycle_request
                and cycle.matches(row, self._signature(row))
                and cycle.levels != (0,)
            ):
                column = cycle.toggle()
                handle.add_metadata("cycled", True)
            else:
                cycle = self.calculate_levels(row)
                column = cycle.current
            handle.add_metadata("column", column)
            apply_indent(self.buffer, row, column)
        return column

    def newline_and_indent(self) -> int:
        """Split the line at the cursor and indent the new line."""

        row, col = self.buffer.state.cursor
        line = self.buffer.line(row)
        head = line[:col].rstrip(" \t")
        tail = line[col:].lstrip(" \t")
        self.buffer.replace_lines(
            row, row + 1, [head, tail], label="newline", cursor=(row + 1, 0)
        )
        return self.indent_line(row + 1)

    def dedent_line(self, row: Optional[int] = None) -> Optional[int]:
        """Move ``row`` to the next shallower valid level, if there is one."""

        row = self._row(row)
        current = len(leading_whitespace(self.buffer.line(row)).expandtabs())
        if current == 0:
            return None
        cycle = self.calculate_levels(row)
        shallower = [level for level in cycle.levels if level < current]
        if not shallower:
            return None
        column = shallower[-1]
        cycle.index = cycle.levels.index(column)
        apply_indent(self.buffer, row, column, label="dedent_line")
        return column

    def dedent_line_backspace(self) -> bool:
        """Backspace that dedents when the cursor sits at the indentation end.

        Returns ``True`` when the line was dedented, ``False`` when a plain
        character deletion happened instead.
        """

        row, col = self.buffer.state.cursor
        whitespace = leading_whitespace(self.buffer.line(row))
        if col > 0 and col == len(whitespace) and self.dedent_line(row) is not None:
            return True
        if col > 0:
            self.buffer.delete_range((row, col - 1), (row, col))
        elif row > 0:
            previous = self.buffer.line(row - 1)
            self.buffer.delete_range((row - 1, len(previous)), (row, 0))
        return False

    def electric_colon(self, row: Optional[int] = None) -> bool:
        """After a ``:`` closes a dedenter line, pull it back to its opener."""

        row = self._row(row)
        analysis = self.analysis()
        source = analysis.source
        code_end = analysis.oracle.code_end(row)
        if code_end <= source.indent_end(row) or source.text[code_end - 1] != ":":
            return False
        token = analysis.navigator.first_token(row)
        if token is None or token[0] not in self.config.dedenter_keywords:
            return False
        column = analysis.indentation_for_row(row)
        if column >= source.indentation(row):
            return False
        return apply_indent(self.buffer, row, column, label="electric_colon")

    def electric_close(self, row: Optional[int] = None) -> bool:
        """Reindent after a closing bracket was typed as the first character."""

        row = self._row(row)
        stripped = self.buffer.line(row).lstrip(" \t")
        if not stripped or stripped[0] not in CLOSE_BRACKETS:
            return False
        column = self.calculate_indentation(row)
        return apply_indent(self.buffer, row, column, label="electric_close")

    def closing_block_row(self, row: Optional[int] = None) -> Optional[int]:
        """Row of the block opener that a dedenter line on ``row`` continues."""

        row = self._row(row)
        analysis = self.analysis()
        navigator = analysis.navigator
        token = navigator.first_token(row)
        if token is None or token[0] not in self.config.dedenter_keywords:
            return None
        target = analysis.indentation_for_row(row)
        candidate = navigator.previous_code_row(row)
        while candidate is not None:
            start = navigator.backward_to_statement_start(
                navigator.content_start(candidate)
            )
            start_row = analysis.source.row_of(start)
            indentation = analysis.source.indentation(start_row)
            if indentation == target and navigator.first_word(start) in _CLOSABLE_OPENERS:
                return start_row
            if indentation < target:
                return None
            candidate = navigator.previous_code_row(start_row)
        return None

    def closing_block_message(self, row: Optional[int] = None) -> Optional[str]:
        opener = self.closing_block_row(row)
        if opener is None:
            return None
        return f"Closes {self.buffer.line(opener).strip()}"

    def current_defun(self, row: Optional[int] = None) -> Optional[str]:
        analysis = self.analysis()
        row = self._row(row)
        return analysis.navigator.current_defun(analysis.source.indent_end(row))

    # ------------------------------------------------------------------
    # Region commands

    def indent_region(self, start_row: int, end_row: int) -> int:
        self.session.cycle = CycleState()
        return indent_region(self.buffer, start_row, end_row, self.config)

    def shift_left(self, start_row: int, end_row: int, count: Optional[int] = None) -> None:
        self.session.cycle = CycleState()
        shift_left(self.buffer, start_row, end_row, count, config=self.config)

    def shift_right(self, start_row: int, end_row: int, count: Optional[int] = None) -> None:
        self.session.cycle = CycleState()
        shift_right(self.buffer, start_row, end_row, count, config=self.config)


__all__ = ["IndentEngine"]
