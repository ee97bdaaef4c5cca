"""Nim keyword and operator tables.

Everything the indentation engine and font-lock treat as language knowledge
lives here as plain data; ``nim_mode.config.IndentConfig`` picks its defaults
from these sets.
"""

from __future__ import annotations

KEYWORDS: frozenset[str] = frozenset(
    {
        "addr", "and", "as", "asm", "bind", "block", "break", "case", "cast",
        "concept", "const", "continue", "converter", "defer", "discard",
        "distinct", "div", "do", "elif", "else", "end", "enum", "except",
        "export", "finally", "for", "from", "func", "if", "import", "in",
        "include", "interface", "is", "isnot", "iterator", "let", "macro",
        "method", "mixin", "mod", "nil", "not", "notin", "object", "of", "or",
        "out", "proc", "ptr", "raise", "ref", "return", "shl", "shr", "static",
        "template", "try", "tuple", "type", "using", "var", "when", "while",
        "xor", "yield",
    }
)

BUILTIN_TYPES: frozenset[str] = frozenset(
    {
        "int", "int8", "int16", "int32", "int64",
        "uint", "uint8", "uint16", "uint32", "uint64",
        "float", "float32", "float64", "bool", "char", "string", "cstring",
        "pointer", "seq", "array", "openArray", "varargs", "set", "range",
        "void", "auto", "any", "untyped", "typed", "typedesc", "byte",
        "Natural", "Positive", "RootObj", "RootRef", "Exception",
        "CatchableError", "Defect", "Ordinal", "SomeInteger", "SomeFloat",
        "SomeNumber",
    }
)

CONSTANTS: frozenset[str] = frozenset({"true", "false", "nil", "result"})

# Keywords that begin a routine definition; a trailing ``=`` only opens a
# block when the statement starts with one of these.
DEFINITION_KEYWORDS: frozenset[str] = frozenset(
    {"proc", "func", "method", "iterator", "template", "macro", "converter"}
)

# Section keywords that open an indented block when alone on their line.
DECL_BLOCK_KEYWORDS: frozenset[str] = frozenset(
    {"type", "const", "var", "let", "import", "export", "using"}
)

# A line ending with one of these opens a nested block.
INDENTER_KEYWORDS: frozenset[str] = frozenset(
    {"object", "tuple", "enum", "concept", "type", "const", "var", "let", "import", "export", "using"}
)

# Keywords that start a line one level shallower than the preceding block.
DEDENTER_KEYWORDS: frozenset[str] = frozenset(
    {"else", "elif", "except", "finally", "of"}
)

# Statements that begin with one of these own a continuation block; operator
# continuation lines align just past the keyword.
BLOCK_START_KEYWORDS: frozenset[str] = frozenset(
    {
        "if", "elif", "when", "while", "for", "case", "block", "try",
        "except", "finally", "static", "defer",
    }
)

# ``:`` is left out: a trailing colon always opens a block.
OPERATOR_CHARS: frozenset[str] = frozenset("=+-*/<>@$~&%|!?^.\\")

OPERATOR_WORDS: frozenset[str] = frozenset(
    {"and", "or", "not", "xor", "shl", "shr", "div", "mod", "in", "notin", "is", "isnot"}
)

# ``==``-style comparisons end in ``=`` but never assign.
COMPARISON_OPERATORS: frozenset[str] = frozenset({"==", "<=", ">=", "!="})

OPEN_BRACKETS = "([{"
CLOSE_BRACKETS = ")]}"

__all__ = [
    "KEYWORDS",
    "BUILTIN_TYPES",
    "CONSTANTS",
    "DEFINITION_KEYWORDS",
    "DECL_BLOCK_KEYWORDS",
    "INDENTER_KEYWORDS",
    "DEDENTER_KEYWORDS",
    "BLOCK_START_KEYWORDS",
    "OPERATOR_CHARS",
    "OPERATOR_WORDS",
    "COMPARISON_OPERATORS",
    "OPEN_BRACKETS",
    "CLOSE_BRACKETS",
]
