"""Indentation calculator: turn a context into a target column."""

from __future__ import annotations

import re
from typing import Callable, Dict, Optional, Type

from nim_mode.config import IndentConfig
from nim_mode.syntax import SourceText, StatementNavigator, SyntaxOracle
from nim_mode.syntax.keywords import CLOSE_BRACKETS, COMPARISON_OPERATORS
from nim_mode.syntax.oracle import COMMENT

from .context import (
    AfterBeginningOfBlock,
    AfterLine,
    AfterOperator,
    IndentContext,
    InsideParen,
    InsideString,
    NoIndent,
)

Handler = Callable[["IndentCalculator", IndentContext, int], int]


def is_assignment(token: str) -> bool:
    if token == "=":
        return True
    return (
        token.endswith("=")
        and token not in COMPARISON_OPERATORS
        and "=" not in token[:-1]
    )


class IndentCalculator:
    """One branch per context variant; results are clamped at column 0."""

    def __init__(
        self,
        source: SourceText,
        oracle: SyntaxOracle,
        navigator: StatementNavigator,
        config: IndentConfig,
    ) -> None:
        self.source = source
        self.oracle = oracle
        self.navigator = navigator
        self.config = config
        chars = "".join(sorted(config.operator_chars))
        self._operator_run = re.compile(f"[{re.escape(chars)}]+") if chars else None

    def calculate(self, context: IndentContext, row: int) -> int:
        """Column for ``row`` given the context ``classify`` returned for it."""

        handler = _HANDLERS[type(context)]
        return max(0, handler(self, context, row))

    # ------------------------------------------------------------------

    def _navigator_for(self, row: int) -> StatementNavigator:
        region = self.oracle.narrow_to_innermost_paren(self.source.line_start(row))
        return self.navigator.narrowed(region)

    def _indentation_of(self, pos: int) -> int:
        """Line indentation, or the column when ``pos`` starts mid-line."""

        row = self.source.row_of(pos)
        if pos <= self.source.indent_end(row):
            return self.source.indentation(row)
        return self.source.column_of(pos)

    def _starts_with_dedenter(self, row: int) -> bool:
        token = self.navigator.first_token(row)
        return token is not None and token[0] in self.config.dedenter_keywords

    def _no_indent(self, context: IndentContext, row: int) -> int:
        return 0

    def _after_block(self, context: IndentContext, row: int) -> int:
        return self._indentation_of(context.position) + self.config.indent_offset

    def _after_line(self, context: IndentContext, row: int) -> int:
        navigator = self._navigator_for(row)
        statement = navigator.backward_to_statement_start(context.position)
        indentation = self._indentation_of(statement)
        if self._starts_with_dedenter(row):
            # Clamped to zero by ``calculate`` when the opener sits at column 0.
            indentation -= self.config.indent_offset
        return indentation

    def _inside_string(self, context: IndentContext, row: int) -> int:
        return self.source.indentation_at(context.position)

    def _after_operator(self, context: IndentContext, row: int) -> int:
        navigator = self._navigator_for(row)
        statement = navigator.backward_to_statement_start(context.position)
        word = navigator.first_word(statement)
        if word is not None and word in self.config.block_start_keywords:
            return self.source.column_of(statement) + len(word) + 1
        limit = self.source.line_end(self.source.row_of(context.position))
        target = self._assignment_target(statement, limit)
        if target is not None:
            return self.source.column_of(target)
        return self._indentation_of(statement) + self.config.indent_offset

    def _assignment_target(self, statement: int, limit: int) -> Optional[int]:
        """Offset of the first operand after the statement's assignment."""

        if self._operator_run is None:
            return None
        text = self.source.text
        depth = self.oracle.paren_depth(statement)
        for match in self._operator_run.finditer(text, statement, limit):
            start = match.start()
            if not is_assignment(match.group(0)):
                continue
            if not self.oracle.is_code(start) or self.oracle.paren_depth(start) != depth:
                continue
            after = match.end()
            while after < len(text) and text[after] in " \t":
                after += 1
            if after >= len(text) or text[after] in "\r\n":
                continue
            if self.oracle.char_class(after) == COMMENT:
                continue
            return after
        return None

    def _inside_paren(self, context: IndentContext, row: int) -> int:
        source = self.source
        offset = self.config.indent_offset
        open_pos = context.position
        open_row = source.row_of(open_pos)
        first = source.indent_end(row)
        char = source.char_at(first)
        closes = char != "" and char in CLOSE_BRACKETS and self.oracle.is_code(first)
        if closes and self.oracle.paren_start(first + 1) is None:
            return source.indentation(open_row)

        hanging = self._nothing_after(open_pos + 1, source.line_end(open_row))
        if hanging:
            base = source.indentation(open_row) + offset
        else:
            base = source.column_of(open_pos) + 1

        if closes:
            return base - offset
        if hanging and self._begins_block(open_row):
            return base + offset
        return base

    def _nothing_after(self, start: int, end: int) -> bool:
        text = self.source.text
        return all(
            text[pos] in " \t\r" or self.oracle.char_class(pos) == COMMENT
            for pos in range(start, end)
        )

    def _begins_block(self, row: int) -> bool:
        word = self.navigator.first_word(self.source.indent_end(row))
        return word is not None and (
            word in self.config.block_start_keywords
            or word in self.config.definition_keywords
        )


_HANDLERS: Dict[Type[IndentContext], Handler] = {
    NoIndent: IndentCalculator._no_indent,
    AfterBeginningOfBlock: IndentCalculator._after_block,
    AfterLine: IndentCalculator._after_line,
    InsideString: IndentCalculator._inside_string,
    AfterOperator: IndentCalculator._after_operator,
    InsideParen: IndentCalculator._inside_paren,
}

__all__ = ["IndentCalculator", "is_assignment"]
