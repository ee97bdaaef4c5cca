"""Lexical syntax oracle for Nim source.

The oracle answers "is this position inside a string, a comment, or an open
bracket" for a frozen ``SourceText``. It scans forward lazily, caching the
state at every line start it has reached, so queries near the top of a large
file never pay for the rest of it.

Recognised lexemes:

* ``#`` line comments and nestable ``#[ ... ]#`` / ``##[ ... ]##`` block comments
* ``"..."`` strings with backslash escapes
* raw ``r"..."`` and generalized raw ``ident"..."`` strings (``""`` escapes)
* ``\"\"\"...\"\"\"`` triple-quoted strings, which may span lines
* character literals such as ``'a'`` or ``'\\n'``
* the brackets ``()``, ``[]`` and ``{}``

Unbalanced closing brackets are ignored rather than reported.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import List, Optional

from .keywords import CLOSE_BRACKETS, OPEN_BRACKETS
from .source import Region, SourceText

CODE = 0
STRING = 1
COMMENT = 2

_CHAR_LITERAL = re.compile(r"'(?:\\(?:x[0-9A-Fa-f]{2}|\d+|.)|[^\\'\n])'")

_STRING_NORMAL = "normal"
_STRING_RAW = "raw"
_STRING_TRIPLE = "triple"


@dataclass(frozen=True, slots=True)
class SyntaxState:
    """Lexical state just before a given offset."""

    parens: tuple[int, ...] = ()
    string_start: Optional[int] = None
    string_kind: Optional[str] = None
    comment_start: Optional[int] = None
    comment_depth: int = 0
    comment_doc: bool = False

    @property
    def paren_start(self) -> Optional[int]:
        return self.parens[-1] if self.parens else None

    @property
    def in_string(self) -> bool:
        return self.string_start is not None

    @property
    def in_comment(self) -> bool:
        return self.comment_start is not None


def _is_ident_char(char: str) -> bool:
    return char.isalnum() or char == "_"


class SyntaxOracle:
    """Classifies offsets of one ``SourceText`` snapshot."""

    def __init__(self, source: SourceText) -> None:
        self.source = source
        self._line_states: List[SyntaxState] = [SyntaxState()]
        self._classes = bytearray(len(source.text))

    # ------------------------------------------------------------------
    # Public queries

    def state_at(self, pos: int) -> SyntaxState:
        pos = max(0, min(pos, len(self.source.text)))
        row = self.source.row_of(pos)
        self._ensure_row(row)
        state = self._line_states[row]
        line_start = self.source.line_start(row)
        if pos == line_start:
            return state
        return self._scan(state, line_start, pos, record=False)

    def string_start(self, pos: int) -> Optional[int]:
        return self.state_at(pos).string_start

    def comment_start(self, pos: int) -> Optional[int]:
        return self.state_at(pos).comment_start

    def paren_start(self, pos: int) -> Optional[int]:
        return self.state_at(pos).paren_start

    def paren_depth(self, pos: int) -> int:
        return len(self.state_at(pos).parens)

    def in_comment_or_string(self, pos: int) -> bool:
        state = self.state_at(pos)
        return state.in_string or state.in_comment

    def narrow_to_innermost_paren(self, pos: int) -> Optional[Region]:
        """Span from just after the innermost open bracket up to ``pos``."""

        start = self.paren_start(pos)
        if start is None:
            return None
        return Region(start + 1, pos)

    def char_class(self, pos: int) -> int:
        """``CODE``, ``STRING`` or ``COMMENT`` for the character at ``pos``."""

        if pos < 0 or pos >= len(self.source.text):
            return CODE
        self._ensure_row(self.source.row_of(pos) + 1)
        return self._classes[pos]

    def is_code(self, pos: int) -> bool:
        return self.char_class(pos) == CODE

    def code_end(self, row: int, *, lower: Optional[int] = None) -> int:
        """Offset just past the last non-blank, non-comment char of ``row``.

        Returns the row's indentation end when the row holds only blanks and
        comments. ``lower`` bounds the search from below (narrowed regions).
        """

        source = self.source
        start = source.line_start(row)
        if lower is not None:
            start = max(start, lower)
        pos = source.line_end(row)
        text = source.text
        while pos > start:
            char = text[pos - 1]
            if char in " \t\r" or self.char_class(pos - 1) == COMMENT:
                pos -= 1
                continue
            return pos
        return max(start, source.indent_end(row)) if lower is None else start

    def _ensure_row(self, row: int) -> None:
        source = self.source
        row = min(row, source.line_count - 1)
        while len(self._line_states) <= row:
            current = len(self._line_states) - 1
            state = self._scan(
                self._line_states[current],
                source.line_start(current),
                source.line_start(current + 1),
                record=True,
            )
            self._line_states.append(state)
        if row == source.line_count - 1 and not self._last_row_recorded:
            self._scan(
                self._line_states[row],
                source.line_start(row),
                len(source.text),
                record=True,
            )
            self._last_row_recorded = True

    _last_row_recorded = False

    def _scan(self, state: SyntaxState, start: int, stop: int, *, record: bool) -> SyntaxState:
        text = self.source.text
        length = len(text)
        classes = self._classes
        parens = list(state.parens)
        string_start = state.string_start
        string_kind = state.string_kind
        comment_start = state.comment_start
        depth = state.comment_depth
        doc = state.comment_doc

        def mark(a: int, b: int, cls: int) -> None:
            if record:
                for index in range(a, min(b, length)):
                    classes[index] = cls

        i = start
        while i < stop:
            char = text[i]
            if comment_start is not None:
                if depth == 0:
                    mark(i, i + 1, COMMENT)
                    if char == "\n":
                        comment_start = None
                    i += 1
                elif text.startswith("#[", i):
                    mark(i, i + 2, COMMENT)
                    depth += 1
                    i += 2
                elif text.startswith("]#", i):
                    width = 3 if depth == 1 and doc and text.startswith("]##", i) else 2
                    mark(i, i + width, COMMENT)
                    depth -= 1
                    i += width
                    if depth == 0:
                        comment_start = None
                        doc = False
                else:
                    mark(i, i + 1, COMMENT)
                    i += 1
                continue

            if string_start is not None:
                if string_kind == _STRING_TRIPLE:
                    if text.startswith('"""', i):
                        end = i + 3
                        while end < length and text[end] == '"':
                            end += 1
                        mark(i, end, STRING)
                        string_start = string_kind = None
                        i = end
                    else:
                        mark(i, i + 1, STRING)
                        i += 1
                    continue
                if char == "\n":
                    # Single-line literals never continue past the line.
                    string_start = string_kind = None
                    continue
                if string_kind == _STRING_RAW:
                    if char == '"' and i + 1 < length and text[i + 1] == '"':
                        mark(i, i + 2, STRING)
                        i += 2
                        continue
                elif char == "\\":
                    width = 2 if i + 1 < length and text[i + 1] != "\n" else 1
                    mark(i, i + width, STRING)
                    i += width
                    continue
                mark(i, i + 1, STRING)
                if char == '"':
                    string_start = string_kind = None
                i += 1
                continue

            if char == "#":
                if text.startswith("##[", i):
                    comment_start, depth, doc = i, 1, True
                    mark(i, i + 3, COMMENT)
                    i += 3
                elif text.startswith("#[", i):
                    comment_start, depth, doc = i, 1, False
                    mark(i, i + 2, COMMENT)
                    i += 2
                else:
                    comment_start, depth, doc = i, 0, False
                    mark(i, i + 1, COMMENT)
                    i += 1
                continue

            if char == '"':
                string_start = i
                if text.startswith('"""', i):
                    string_kind = _STRING_TRIPLE
                    mark(i, i + 3, STRING)
                    i += 3
                    continue
                previous = text[i - 1] if i > 0 else ""
                string_kind = _STRING_RAW if _is_ident_char(previous) else _STRING_NORMAL
                mark(i, i + 1, STRING)
                i += 1
                continue

            if char == "'":
                previous = text[i - 1] if i > 0 else ""
                match = None if _is_ident_char(previous) else _CHAR_LITERAL.match(text, i)
                if match is not None:
                    mark(i, match.end(), STRING)
                    i = match.end()
                    continue

            if char in OPEN_BRACKETS:
                parens.append(i)
            elif char in CLOSE_BRACKETS and parens:
                parens.pop()
            mark(i, i + 1, CODE)
            i += 1

        return replace(
            state,
            parens=tuple(parens),
            string_start=string_start,
            string_kind=string_kind,
            comment_start=comment_start,
            comment_depth=depth,
            comment_doc=doc,
        )


__all__ = ["CODE", "COMMENT", "STRING", "SyntaxOracle", "SyntaxState"]
