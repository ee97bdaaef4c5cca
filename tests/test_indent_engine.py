from __future__ import annotations

from nim_mode.buffer import Buffer
from nim_mode.config import IndentConfig
from nim_mode.indent import AfterBeginningOfBlock, IndentEngine, IndentSession


def make_engine(text: str, cursor: tuple[int, int] = (0, 0), **overrides: object) -> IndentEngine:
    buffer = Buffer.from_text(text, name="engine.nim")
    buffer.set_cursor(*cursor)
    return IndentEngine(buffer, IndentConfig(**overrides))  # type: ignore[arg-type]


def test_context_and_column_for_cursor_row() -> None:
    engine = make_engine("if x:\ny", cursor=(1, 0))

    assert engine.context_at() == AfterBeginningOfBlock(0)
    assert engine.calculate_indentation() == 2
    assert engine.calculate_levels().levels == (0, 2)


def test_indent_line_applies_full_target_first() -> None:
    engine = make_engine("if x:\n  if y:\nz", cursor=(2, 0))

    column = engine.indent_line()

    assert column == 4
    assert engine.buffer.line(2) == "    z"


def test_repeated_request_cycles_through_levels() -> None:
    engine = make_engine("if x:\n  if y:\nz", cursor=(2, 0))

    columns = [engine.indent_line(is_repeated_cycle_request=index > 0) for index in range(4)]

    assert columns == [4, 2, 0, 4]
    assert engine.buffer.line(2) == "    z"


def test_fresh_request_recomputes_instead_of_cycling() -> None:
    engine = make_engine("if x:\nz", cursor=(1, 0))

    engine.indent_line()
    engine.indent_line(is_repeated_cycle_request=True)
    column = engine.indent_line()

    assert column == 2
    assert engine.buffer.line(1) == "  z"


def test_edited_line_is_not_cycled() -> None:
    engine = make_engine("if x:\nz", cursor=(1, 0))

    engine.indent_line()
    engine.buffer.replace_lines(1, 2, ["  zz"], label="typing")
    column = engine.indent_line(is_repeated_cycle_request=True)

    assert column == 2


def test_zero_only_levels_never_cycle() -> None:
    engine = make_engine("echo 1\necho 2", cursor=(1, 0))

    engine.indent_line()
    column = engine.indent_line(is_repeated_cycle_request=True)

    assert column == 0


def test_sessions_are_per_engine() -> None:
    first = make_engine("if x:\nz", cursor=(1, 0))
    second = IndentEngine(Buffer.from_text("if x:\nz"), session=IndentSession())

    first.indent_line()
    first.indent_line(is_repeated_cycle_request=True)

    assert second.session.cycle.levels == (0,)
    assert first.session.cycle.current == 0


def test_newline_and_indent_splits_line() -> None:
    engine = make_engine("if x: echo 1", cursor=(0, 5))

    column = engine.newline_and_indent()

    assert column == 2
    assert engine.buffer.text == "if x:\n  echo 1"
    assert engine.buffer.state.cursor == (1, 2)


def test_newline_and_indent_at_end_of_line() -> None:
    engine = make_engine("proc f() =", cursor=(0, 10))

    engine.newline_and_indent()

    assert engine.buffer.text == "proc f() =\n  "
    assert engine.buffer.state.cursor == (1, 2)


def test_dedent_line_moves_to_next_shallower_level() -> None:
    engine = make_engine("if x:\n  if y:\n      z", cursor=(2, 0))

    assert engine.dedent_line() == 4
    assert engine.buffer.line(2) == "    z"
    assert engine.dedent_line() == 2
    assert engine.dedent_line() == 0
    assert engine.dedent_line() is None


def test_backspace_at_indentation_end_dedents() -> None:
    engine = make_engine("if x:\n  y", cursor=(1, 2))

    assert engine.dedent_line_backspace()
    assert engine.buffer.text == "if x:\ny"
    assert engine.buffer.state.cursor == (1, 0)


def test_backspace_inside_text_deletes_one_character() -> None:
    engine = make_engine("abc", cursor=(0, 2))

    assert not engine.dedent_line_backspace()
    assert engine.buffer.text == "ac"


def test_backspace_at_line_start_joins_lines() -> None:
    engine = make_engine("a\nb", cursor=(1, 0))

    assert not engine.dedent_line_backspace()
    assert engine.buffer.text == "ab"


def test_electric_colon_dedents_branch_keyword() -> None:
    engine = make_engine("if x:\n  y\n  else:", cursor=(2, 7))

    assert engine.electric_colon()
    assert engine.buffer.line(2) == "else:"
    assert engine.closing_block_row(2) == 0
    assert engine.closing_block_message(2) == "Closes if x:"


def test_electric_colon_ignores_other_lines() -> None:
    engine = make_engine("if x:\n  y:", cursor=(1, 4))

    assert not engine.electric_colon()
    assert engine.buffer.line(1) == "  y:"


def test_electric_close_realigns_closing_bracket() -> None:
    engine = make_engine("foo(\n  a,\n  )", cursor=(2, 3))

    assert engine.electric_close()
    assert engine.buffer.line(2) == ")"


def test_closing_block_row_for_nested_branch() -> None:
    engine = make_engine("if a:\n  if b:\n    c\n  else:\n    d")

    assert engine.closing_block_row(3) == 1
    assert engine.closing_block_row(4) is None


def test_current_defun_reports_enclosing_routine() -> None:
    engine = make_engine("proc run() =\n  echo 1\n", cursor=(1, 2))

    assert engine.current_defun() == "run"


def test_region_commands_reset_cycle() -> None:
    engine = make_engine("if x:\nz\nw", cursor=(1, 0))
    engine.indent_line()

    engine.shift_right(0, 3)

    assert engine.session.cycle.levels == (0,)
    assert engine.buffer.text == "  if x:\n    z\n  w"
    assert engine.indent_region(0, 3) == 2
    assert engine.buffer.text == "if x:\n  z\n  w"
