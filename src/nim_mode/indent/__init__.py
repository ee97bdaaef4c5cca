"""Indentation engine: classify a line, compute its column, apply it."""

from .analysis import IndentAnalysis
from .calculator import IndentCalculator, is_assignment
from .classifier import RULES, ContextClassifier, LineProbe
from .context import (
    AfterBeginningOfBlock,
    AfterLine,
    AfterOperator,
    IndentContext,
    InsideParen,
    InsideString,
    NoIndent,
)
from .engine import IndentEngine
from .levels import CycleState, IndentLevels, IndentSession, compute_levels
from .mutator import apply_indent, leading_whitespace
from .region import InsufficientIndentation, indent_region, shift_left, shift_right

__all__ = [
    "AfterBeginningOfBlock",
    "AfterLine",
    "AfterOperator",
    "ContextClassifier",
    "CycleState",
    "IndentAnalysis",
    "IndentCalculator",
    "IndentContext",
    "IndentEngine",
    "IndentLevels",
    "IndentSession",
    "InsideParen",
    "InsideString",
    "InsufficientIndentation",
    "LineProbe",
    "NoIndent",
    "RULES",
    "apply_indent",
    "compute_levels",
    "indent_region",
    "is_assignment",
    "leading_whitespace",
    "shift_left",
    "shift_right",
]
