"""Font-lock rules: classify Nim source into highlight spans."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

from . import keywords
from .oracle import CODE, COMMENT, STRING, SyntaxOracle
from .source import SourceText

FACE_COMMENT = "comment"
FACE_DOC = "doc"
FACE_STRING = "string"
FACE_KEYWORD = "keyword"
FACE_BUILTIN = "builtin"
FACE_CONSTANT = "constant"
FACE_NUMBER = "number"
FACE_PRAGMA = "pragma"
FACE_FUNCTION = "function-name"
FACE_TYPE = "type-name"

_WORD = re.compile(r"[^\W\d]\w*")
_NUMBER = re.compile(
    r"(?:0[xX][0-9A-Fa-f_]+|0[oO][0-7_]+|0[bB][01_]+|\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?)"
    r"(?:'?[iIuUfFdD](?:8|16|32|64|128)?)?"
)
_PRAGMA = re.compile(r"\{\..*?\.\}", re.DOTALL)
_TYPE_NAME = re.compile(
    r"^[ \t]*([^\W\d]\w*)\*?\s*(?:\[[^\]\n]*\])?\s*(?:\{\..*?\.\})?\s*=\s*"
    r"(?:ref\s+|ptr\s+)?(?:object|enum|tuple|concept|distinct)\b",
    re.MULTILINE,
)


@dataclass(frozen=True, slots=True)
class HighlightSpan:
    start: int
    end: int
    face: str


def _class_runs(oracle: SyntaxOracle, length: int) -> Iterator[tuple[int, int, int]]:
    start = 0
    current = oracle.char_class(0) if length else CODE
    for pos in range(1, length):
        cls = oracle.char_class(pos)
        if cls != current:
            yield start, pos, current
            start, current = pos, cls
    if length:
        yield start, length, current


def highlight(source: SourceText, oracle: Optional[SyntaxOracle] = None) -> List[HighlightSpan]:
    """Return non-overlapping spans sorted by offset."""

    oracle = oracle or SyntaxOracle(source)
    text = source.text
    spans: List[HighlightSpan] = []
    covered = bytearray(len(text))

    def add(start: int, end: int, face: str) -> None:
        if start >= end or any(covered[start:end]):
            return
        covered[start:end] = b"\x01" * (end - start)
        spans.append(HighlightSpan(start, end, face))

    for start, end, cls in _class_runs(oracle, len(text)):
        if cls == COMMENT:
            face = FACE_DOC if text.startswith("##", start) else FACE_COMMENT
            # One span per physical line; newlines stay unhighlighted.
            segment = start
            while segment < end:
                newline = text.find("\n", segment, end)
                stop = end if newline == -1 else newline
                add(segment, stop, face)
                segment = stop + 1
        elif cls == STRING:
            add(start, end, FACE_STRING)

    for match in _PRAGMA.finditer(text):
        if oracle.is_code(match.start()):
            add(match.start(), match.end(), FACE_PRAGMA)

    for match in _TYPE_NAME.finditer(text):
        if oracle.is_code(match.start(1)):
            add(match.start(1), match.end(1), FACE_TYPE)

    pos = 0
    length = len(text)
    expect_name = False
    while pos < length:
        if covered[pos] or not oracle.is_code(pos):
            pos += 1
            continue
        char = text[pos]
        previous = text[pos - 1] if pos else ""
        at_boundary = not (previous.isalnum() or previous == "_")
        word = _WORD.match(text, pos) if at_boundary else None
        if word is not None:
            name = word.group(0)
            end = word.end()
            if expect_name:
                add(pos, end, FACE_FUNCTION)
                expect_name = False
            elif name in keywords.DEFINITION_KEYWORDS:
                add(pos, end, FACE_KEYWORD)
                expect_name = True
            elif name in keywords.KEYWORDS:
                add(pos, end, FACE_CONSTANT if name == "nil" else FACE_KEYWORD)
            elif name in keywords.CONSTANTS:
                add(pos, end, FACE_CONSTANT)
            elif name in keywords.BUILTIN_TYPES:
                add(pos, end, FACE_BUILTIN)
            pos = end
            continue
        number = _NUMBER.match(text, pos) if at_boundary else None
        if number is not None:
            add(pos, number.end(), FACE_NUMBER)
            pos = number.end()
            continue
        if char == "`" and expect_name:
            close = text.find("`", pos + 1)
            if close != -1:
                add(pos, close + 1, FACE_FUNCTION)
                pos = close + 1
                expect_name = False
                continue
        if char not in " \t":
            expect_name = False
        pos += 1

    spans.sort(key=lambda span: span.start)
    return spans


__all__ = [
    "FACE_BUILTIN",
    "FACE_COMMENT",
    "FACE_CONSTANT",
    "FACE_DOC",
    "FACE_FUNCTION",
    "FACE_KEYWORD",
    "FACE_NUMBER",
    "FACE_PRAGMA",
    "FACE_STRING",
    "FACE_TYPE",
    "HighlightSpan",
    "highlight",
]
