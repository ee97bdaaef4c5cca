from __future__ import annotations

import pytest

from nim_mode.buffer import Buffer, BufferValidationError


def test_from_text_splits_lines_and_strips_carriage_returns() -> None:
    buffer = Buffer.from_text("a\r\nb\n")

    assert buffer.line_count == 3
    assert buffer.line(0) == "a"
    assert buffer.text == "a\nb\n"


def test_replace_range_moves_cursor_after_inserted_text() -> None:
    buffer = Buffer.from_text("echo x")

    delta = buffer.replace_range((0, 5), (0, 6), "1\necho 2", label="edit")

    assert buffer.text == "echo 1\necho 2"
    assert buffer.state.cursor == (1, 6)
    assert delta.changed
    assert delta.label == "edit"


def test_replace_lines_clamps_cursor() -> None:
    buffer = Buffer.from_text("abc\ndef")
    buffer.set_cursor(1, 3)

    buffer.replace_lines(1, 2, ["d"], label="trim")

    assert buffer.state.cursor == (1, 1)


def test_noop_edit_leaves_no_undo_entry() -> None:
    buffer = Buffer.from_text("x")

    delta = buffer.replace_lines(0, 1, ["x"], label="same")

    assert not delta.changed
    assert len(buffer.undo) == 0


def test_undo_and_redo_restore_text_and_cursor() -> None:
    buffer = Buffer.from_text("a")
    buffer.insert_text("b", cursor=(0, 1))

    assert buffer.undo_last()
    assert (buffer.text, buffer.state.cursor) == ("a", (0, 1))
    assert buffer.redo_last()
    assert (buffer.text, buffer.state.cursor) == ("ab", (0, 2))
    assert not buffer.redo_last()


def test_new_edit_discards_redo_history() -> None:
    buffer = Buffer.from_text("a")
    buffer.insert_text("b", cursor=(0, 1))
    buffer.undo_last()

    buffer.insert_text("c", cursor=(0, 1))

    assert not buffer.redo_last()
    assert buffer.undo.last_label() == "insert_text"


def test_out_of_range_cursor_is_rejected() -> None:
    buffer = Buffer.from_text("ab")

    with pytest.raises(BufferValidationError) as excinfo:
        buffer.set_cursor(0, 5)

    assert excinfo.value.cursor == (0, 5)


def test_mirror_reports_version() -> None:
    buffer = Buffer.from_text("a")
    buffer.insert_text("b")

    mirror = buffer.mirror()

    assert mirror.text == "ba"
    assert mirror.version == 1
    assert mirror.lines == ["ba"]
