from __future__ import annotations

from nim_mode.syntax import COMMENT, CODE, STRING, Region, SourceText, SyntaxOracle


def make_oracle(text: str) -> SyntaxOracle:
    return SyntaxOracle(SourceText(text))


def test_source_text_row_and_column_arithmetic() -> None:
    source = SourceText("ab\n  cd\n")

    assert source.line_count == 3
    assert source.row_of(4) == 1
    assert source.column_of(4) == 1
    assert source.indent_end(1) == 5
    assert source.indentation(1) == 2
    assert source.line_text(1) == "  cd"
    assert source.is_blank(2)


def test_tabs_expand_to_tab_stops() -> None:
    source = SourceText(" \tx")

    assert source.indentation(0) == 8


def test_string_hides_brackets_and_comment_markers() -> None:
    oracle = make_oracle('x = "a(b" # (\ny')

    assert oracle.string_start(6) == 4
    assert oracle.char_class(6) == STRING
    assert oracle.char_class(12) == COMMENT
    assert oracle.paren_start(14) is None
    assert oracle.in_comment_or_string(5)
    assert not oracle.in_comment_or_string(14)


def test_triple_quoted_string_spans_lines() -> None:
    text = 'let s = """\nfoo\n"""\nx'
    source = SourceText(text)
    oracle = SyntaxOracle(source)

    assert oracle.string_start(source.line_start(1)) == 8
    assert oracle.string_start(source.line_start(2)) == 8
    assert oracle.string_start(source.line_start(3)) is None


def test_nested_block_comments() -> None:
    oracle = make_oracle("#[ a #[ b ]# c ]#\nx")

    assert oracle.char_class(13) == COMMENT
    assert oracle.char_class(18) == CODE
    assert oracle.comment_start(18) is None


def test_char_literal_does_not_open_bracket() -> None:
    oracle = make_oracle("f('(')\n")

    assert oracle.char_class(3) == STRING
    assert oracle.paren_start(2) == 1
    assert oracle.paren_start(6) is None


def test_raw_string_backslash_is_literal() -> None:
    oracle = make_oracle('r"C:\\"(')

    assert oracle.string_start(3) == 1
    assert oracle.paren_start(7) == 6


def test_narrow_to_innermost_paren() -> None:
    source = SourceText("foo(bar(x,\n")
    oracle = SyntaxOracle(source)

    assert oracle.narrow_to_innermost_paren(source.line_start(1)) == Region(8, 11)
    assert oracle.paren_depth(source.line_start(1)) == 2
    assert oracle.narrow_to_innermost_paren(0) is None


def test_unbalanced_closer_is_ignored() -> None:
    oracle = make_oracle("a)\nb(")

    assert oracle.paren_start(5) == 4


def test_code_end_skips_trailing_comment() -> None:
    source = SourceText("x = 1  # note\n")
    oracle = SyntaxOracle(source)

    assert oracle.code_end(0) == 5
