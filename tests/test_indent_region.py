from __future__ import annotations

import pytest

from nim_mode.buffer import Buffer
from nim_mode.config import IndentConfig
from nim_mode.indent import (
    InsufficientIndentation,
    indent_region,
    shift_left,
    shift_right,
)


def make_buffer(text: str) -> Buffer:
    return Buffer.from_text(text, name="region.nim")


def test_indent_region_rebuilds_nested_blocks() -> None:
    buffer = make_buffer("proc f() =\necho 1\nif x:\necho 2\n")

    changed = indent_region(buffer, 0, buffer.line_count, IndentConfig())

    assert changed == 3
    assert buffer.text == "proc f() =\n  echo 1\n  if x:\n    echo 2\n"


def test_indent_region_is_one_undo_step() -> None:
    original = "if x:\ny\nz\n"
    buffer = make_buffer(original)

    indent_region(buffer, 0, buffer.line_count, IndentConfig())

    assert len(buffer.undo) == 1
    assert buffer.undo.last_label() == "indent_region"
    assert buffer.undo_last()
    assert buffer.text == original


def test_indent_region_only_touches_requested_rows() -> None:
    buffer = make_buffer("if x:\na\nb\n")

    indent_region(buffer, 1, 2, IndentConfig())

    assert buffer.text == "if x:\n  a\nb\n"


def test_indent_region_leaves_string_bodies_alone() -> None:
    original = 'let s = """\n  keep\n   this\n"""\nx\n'
    buffer = make_buffer(original)

    changed = indent_region(buffer, 0, buffer.line_count, IndentConfig())

    assert changed == 0
    assert buffer.text == original
    assert len(buffer.undo) == 0


def test_indent_region_skips_blank_lines() -> None:
    buffer = make_buffer("if x:\n\n   \ny\n")

    indent_region(buffer, 0, buffer.line_count, IndentConfig())

    assert buffer.text == "if x:\n\n   \n  y\n"


def test_shift_left_then_right_restores_text() -> None:
    original = "  a\n    b\n\n \n\t\n\t  c\n  d"
    buffer = make_buffer(original)

    shift_left(buffer, 0, buffer.line_count, 2)
    assert buffer.text == "a\n  b\n\n \n\t\n\tc\nd"
    shift_right(buffer, 0, buffer.line_count, 2)

    assert buffer.text == original


def test_shift_left_refuses_to_split_a_tab() -> None:
    original = "\ta\n  b"
    buffer = make_buffer(original)

    with pytest.raises(InsufficientIndentation) as excinfo:
        shift_left(buffer, 0, buffer.line_count, 2)

    assert excinfo.value.row == 0
    assert excinfo.value.indentation == 8
    assert buffer.text == original


def test_shift_right_keeps_tabs_and_whitespace_only_rows() -> None:
    buffer = make_buffer("\ta\n \n")

    shift_right(buffer, 0, buffer.line_count, 2)

    assert buffer.text == "\t  a\n \n"



def test_shift_left_refuses_without_touching_buffer() -> None:
    original = "  a\nb\n  c"
    buffer = make_buffer(original)

    with pytest.raises(InsufficientIndentation) as excinfo:
        shift_left(buffer, 0, buffer.line_count, 2)

    assert excinfo.value.row == 1
    assert excinfo.value.indentation == 0
    assert excinfo.value.count == 2
    assert buffer.text == original
    assert len(buffer.undo) == 0


def test_shift_defaults_to_configured_offset() -> None:
    buffer = make_buffer("a\nb")

    shift_right(buffer, 0, 1, config=IndentConfig(indent_offset=4))

    assert buffer.text == "    a\nb"


def test_shift_right_moves_cursor_with_text() -> None:
    buffer = make_buffer("a\nb")
    buffer.set_cursor(0, 1)

    shift_right(buffer, 0, 2, 2)

    assert buffer.state.cursor == (0, 3)


def test_negative_count_is_rejected() -> None:
    with pytest.raises(ValueError):
        shift_left(make_buffer("  a"), 0, 1, -2)
