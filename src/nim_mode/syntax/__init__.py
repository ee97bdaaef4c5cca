"""Lexical analysis primitives: text snapshots, syntax oracle, navigation, font-lock."""

from .fontlock import HighlightSpan, highlight
from .navigator import StatementNavigator
from .oracle import CODE, COMMENT, STRING, SyntaxOracle, SyntaxState
from .source import Region, SourceText

__all__ = [
    "CODE",
    "COMMENT",
    "STRING",
    "HighlightSpan",
    "Region",
    "SourceText",
    "StatementNavigator",
    "SyntaxOracle",
    "SyntaxState",
    "highlight",
]
