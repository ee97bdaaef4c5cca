"""Logical statement navigation over a ``SourceText`` snapshot.

A logical statement may span several physical lines: brackets and triple
quoted strings keep it open, and so does an operator at the end of a line or
at the start of the next one. Navigation never leaves the active ``Region``
when the navigator is narrowed to the inside of a bracket.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, List, Optional, Tuple

from .oracle import CODE, COMMENT, SyntaxOracle
from .source import Region, SourceText

if TYPE_CHECKING:
    from nim_mode.config import IndentConfig

_WORD = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_DEFUN_NAME = re.compile(r"([A-Za-z_][A-Za-z0-9_]*|`[^`]+`)")
_TYPE_DEF = re.compile(
    r"([A-Za-z_][A-Za-z0-9_]*)\*?\s*(?:\[[^\]]*\])?\s*(?:\{\..*?\.\})?\s*=\s*"
    r"(?:ref\s+|ptr\s+)?(?:object|enum|tuple|concept)\b"
)

Token = Tuple[str, int]


def _is_ident_char(char: str) -> bool:
    return char.isalnum() or char == "_"


class StatementNavigator:
    """Moves between statement boundaries the way the indenter sees them."""

    def __init__(
        self,
        source: SourceText,
        oracle: SyntaxOracle,
        config: "IndentConfig",
        *,
        region: Optional[Region] = None,
    ) -> None:
        self.source = source
        self.oracle = oracle
        self.config = config
        self.region = region

    def narrowed(self, region: Optional[Region]) -> "StatementNavigator":
        return StatementNavigator(self.source, self.oracle, self.config, region=region)

    @property
    def lower(self) -> int:
        return self.region.start if self.region is not None else 0

    @property
    def first_row(self) -> int:
        return self.source.row_of(self.lower)

    # ------------------------------------------------------------------
    # Line level helpers

    def content_start(self, row: int) -> int:
        """First non-blank offset of ``row`` that lies inside the region."""

        source = self.source
        pos = max(source.line_start(row), self.lower)
        end = source.line_end(row)
        text = source.text
        while pos < end and text[pos] in " \t\r":
            pos += 1
        return pos

    def has_code(self, row: int) -> bool:
        source = self.source
        text = source.text
        for pos in range(self.content_start(row), source.line_end(row)):
            if text[pos] not in " \t\r" and self.oracle.char_class(pos) != COMMENT:
                return True
        return False

    def previous_code_row(self, row: int) -> Optional[int]:
        """Closest row above ``row`` with code, skipping blanks and comments."""

        for candidate in range(row - 1, self.first_row - 1, -1):
            if self.has_code(candidate):
                return candidate
        return None

    def next_code_row(self, row: int) -> Optional[int]:
        for candidate in range(row + 1, self.source.line_count):
            if self.has_code(candidate):
                return candidate
        return None

    def code_end(self, row: int) -> int:
        return self.oracle.code_end(row, lower=self.lower if row == self.first_row else None)

    def first_token(self, row: int) -> Optional[Token]:
        start = self.content_start(row)
        return self._token_at(start, self.source.line_end(row))

    def last_token(self, row: int) -> Optional[Token]:
        end = self.code_end(row)
        start = self.content_start(row)
        if end <= start:
            return None
        text = self.source.text
        pos = end - 1
        char = text[pos]
        if self.oracle.char_class(pos) != CODE:
            return (char, pos)
        if _is_ident_char(char):
            while pos > start and _is_ident_char(text[pos - 1]):
                pos -= 1
        elif char in self.config.operator_chars:
            while pos > start and text[pos - 1] in self.config.operator_chars:
                pos -= 1
        return (text[pos:end], pos)

    def _token_at(self, pos: int, end: int) -> Optional[Token]:
        text = self.source.text
        if pos >= end or self.oracle.char_class(pos) != CODE:
            return None
        char = text[pos]
        stop = pos + 1
        if _is_ident_char(char):
            while stop < end and _is_ident_char(text[stop]):
                stop += 1
        elif char in self.config.operator_chars:
            while stop < end and text[stop] in self.config.operator_chars:
                stop += 1
        return (text[pos:stop], pos)

    def first_word(self, pos: int) -> Optional[str]:
        match = _WORD.match(self.source.text, pos)
        return match.group(0) if match else None

    # ------------------------------------------------------------------
    # Operator continuation

    def starts_with_operator(self, row: int) -> Optional[int]:
        """Offset of a leading operator token on ``row``, if any."""

        token = self.first_token(row)
        if token is None:
            return None
        text, pos = token
        if text in self.config.dedenter_keywords:
            return None
        return pos if self.config.is_operator(text) else None

    def ends_with_operator(self, row: int) -> Optional[int]:
        """Offset of a trailing continuation operator on ``row``, if any.

        A trailing ``=`` that closes a routine signature opens a block and is
        not a continuation.
        """

        token = self.last_token(row)
        if token is None:
            return None
        text, pos = token
        if not self.config.is_operator(text):
            return None
        if text == "=" and self.is_definition(self.backward_to_statement_start(pos)):
            return None
        return pos

    def is_continuation_row(self, row: int) -> bool:
        if self.starts_with_operator(row) is not None:
            return True
        previous = self.previous_code_row(row)
        return previous is not None and self.ends_with_operator(previous) is not None

    # ------------------------------------------------------------------
    # Statement boundaries

    def backward_to_statement_start(self, pos: int) -> int:
        """First non-blank offset of the logical statement owning ``pos``."""

        lower = self.lower
        row = self.source.row_of(pos)
        for _ in range(self.source.line_count + 1):
            start = self.content_start(row)
            state = self.oracle.state_at(start)
            if state.string_start is not None and state.string_start >= lower:
                row = self.source.row_of(state.string_start)
                continue
            if state.paren_start is not None and state.paren_start >= lower:
                row = self.source.row_of(state.paren_start)
                continue
            if self.starts_with_operator(row) is not None:
                previous = self.previous_code_row(row)
                if previous is not None:
                    row = previous
                    continue
            previous = self.previous_code_row(row)
            if previous is not None and self.ends_with_operator(previous) is not None:
                row = previous
                continue
            break
        return self.content_start(row)

    def forward_to_statement_end(self, pos: int) -> int:
        """Offset just past the code of the last line of the statement."""

        source = self.source
        row = source.row_of(self.backward_to_statement_start(pos))
        while True:
            following = self.next_code_row(row)
            if following is None:
                break
            state = self.oracle.state_at(source.line_start(following))
            if (
                state.paren_start is not None
                or state.string_start is not None
                or self.is_continuation_row(following)
            ):
                row = following
                continue
            break
        return self.code_end(row)

    def forward_over_comments(self, pos: int, direction: int = 1) -> int:
        """Skip whitespace, newlines and comments from ``pos``."""

        text = self.source.text
        char_class = self.oracle.char_class
        if direction >= 0:
            limit = len(text)
            if self.region is not None:
                limit = min(limit, self.region.end)
            while pos < limit and (text[pos] in " \t\r\n" or char_class(pos) == COMMENT):
                pos += 1
            return pos
        lower = self.lower
        while pos > lower and (text[pos - 1] in " \t\r\n" or char_class(pos - 1) == COMMENT):
            pos -= 1
        return pos

    def forward_statement(self, pos: int) -> int:
        """Start of the statement after the one containing ``pos``."""

        end = self.forward_to_statement_end(pos)
        following = self.next_code_row(self.source.row_of(end))
        if following is None:
            return len(self.source.text)
        return self.content_start(following)

    def backward_statement(self, pos: int) -> int:
        """Start of the statement before the one containing ``pos``."""

        start = self.backward_to_statement_start(pos)
        previous = self.previous_code_row(self.source.row_of(start))
        if previous is None:
            return start
        return self.backward_to_statement_start(self.content_start(previous))

    # ------------------------------------------------------------------
    # Blocks

    def is_definition(self, pos: int) -> bool:
        """Does the statement starting at ``pos`` declare a routine?"""

        word = self.first_word(pos)
        return word is not None and word in self.config.definition_keywords

    def block_opener(self, row: int) -> Optional[int]:
        """Statement start when ``row`` ends a line that opens a block.

        Three shapes qualify: a declaration-section keyword alone on the line
        (``type``, ``const``, ``var``...), code ending in ``:`` or ``=`` (the
        latter only for routine definitions), or code ending in an indenter
        keyword such as ``object`` or ``enum``.
        """

        start = self.content_start(row)
        token = self.first_token(row)
        last = self.last_token(row)
        if token is None or last is None:
            return None
        if token[0] in self.config.decl_block_keywords and last[1] == token[1]:
            return self.backward_to_statement_start(start)
        text, pos = last
        if text == ":":
            return self.backward_to_statement_start(pos)
        if text == "=":
            statement = self.backward_to_statement_start(pos)
            return statement if self.is_definition(statement) else None
        if text in self.config.indenter_keywords:
            return self.backward_to_statement_start(pos)
        return None

    def beginning_of_block(self, pos: int) -> Optional[int]:
        """Start of the statement whose block encloses ``pos``."""

        source = self.source
        statement = self.backward_to_statement_start(pos)
        indentation = source.indentation_at(statement)
        row = source.row_of(statement)
        while True:
            previous = self.previous_code_row(row)
            if previous is None:
                return None
            start = self.backward_to_statement_start(self.content_start(previous))
            row = source.row_of(start)
            if source.indentation(row) >= indentation:
                continue
            # Walk to the last row of that statement to test whether it opens a block.
            end_row = source.row_of(self.forward_to_statement_end(start))
            if self.block_opener(end_row) is not None:
                return start
            indentation = source.indentation(row)

    def current_defun(self, pos: int) -> Optional[str]:
        """Dotted names of the routines/types enclosing ``pos`` ("which function")."""

        names: List[str] = []
        statement: Optional[int] = self.backward_to_statement_start(pos)
        seen = set()
        while statement is not None and statement not in seen:
            seen.add(statement)
            name = self._definition_name(statement)
            if name is not None:
                names.append(name)
            statement = self.beginning_of_block(statement)
        if not names:
            return None
        return ".".join(reversed(names))

    def _definition_name(self, pos: int) -> Optional[str]:
        text = self.source.text
        word = self.first_word(pos)
        if word in self.config.definition_keywords:
            after = pos + len(word)
            while after < len(text) and text[after] in " \t":
                after += 1
            match = _DEFUN_NAME.match(text, after)
            return match.group(1) if match else None
        match = _TYPE_DEF.match(text, pos)
        if match:
            return match.group(1)
        return None


__all__ = ["StatementNavigator", "Token"]
