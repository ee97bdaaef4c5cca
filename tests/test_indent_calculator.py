from __future__ import annotations

import pytest

from nim_mode.config import IndentConfig
from nim_mode.indent import IndentAnalysis, is_assignment


def indentation(text: str, row: int, **overrides: object) -> int:
    analysis = IndentAnalysis(text, IndentConfig(**overrides))  # type: ignore[arg-type]
    return analysis.indentation_for_row(row)


@pytest.mark.parametrize(
    ("text", "row", "expected"),
    [
        ("foo(a,\n    b)", 1, 4),
        ("if x:\n  y = 1\n", 2, 2),
        ("if x:\nelse:", 1, 0),
        ("if x:\n", 1, 2),
        ("  while true:\n", 1, 4),
        ("proc foo() =\n", 1, 2),
        ("type\n", 1, 2),
        ("if a:\n  if b:\n    c\n  else:", 3, 2),
        ("case x\nof 1:\n  a\nof 2:", 3, 0),
    ],
)
def test_statement_level_indentation(text: str, row: int, expected: int) -> None:
    assert indentation(text, row) == expected


def test_hanging_indent_after_open_bracket() -> None:
    assert indentation("foo(\n", 1) == 2


def test_hanging_indent_of_block_header_gets_extra_level() -> None:
    assert indentation("if foo(\n", 1) == 4


def test_closing_outermost_bracket_aligns_with_opening_line() -> None:
    assert indentation("  foo(\n    a,\n    )", 2) == 2


def test_closing_nested_bracket_steps_back_one_level() -> None:
    assert indentation("x = [foo(\n  a,\n  )", 2) == 0


def test_operator_after_block_keyword_aligns_past_keyword() -> None:
    assert indentation("if a and\n", 1) == 3
    assert indentation("while a or\n", 1) == 6


def test_operator_continuation_aligns_after_assignment() -> None:
    assert indentation("let x = a +\n", 1) == 8
    assert indentation("total = a\n  + b\n", 1) == 8


def test_operator_continuation_without_assignment_adds_offset() -> None:
    assert indentation("foo(1) +\n", 1) == 2
    assert indentation("x == y or\n", 1) == 2


def test_string_continuation_copies_indentation() -> None:
    assert indentation('  let s = """\nfoo\nbar', 2) == 2


def test_offset_is_configurable() -> None:
    assert indentation("if x:\n", 1, indent_offset=4) == 4
    assert indentation("if x:\nelse:", 1, indent_offset=4) == 0


def test_is_assignment() -> None:
    assert is_assignment("=")
    assert is_assignment("+=")
    assert not is_assignment("==")
    assert not is_assignment("<=")
    assert not is_assignment("=>")
