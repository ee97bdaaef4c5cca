from __future__ import annotations

from typing import Any, Dict, List

from nim_mode.adapters.textual import TextualIndentAdapter, TextualUIHooks
from nim_mode.buffer import Buffer
from nim_mode.commands import CommandDispatcher


def make_adapter(
    text: str, cursor: tuple[int, int] = (0, 0)
) -> tuple[TextualIndentAdapter, Dict[str, List[Any]]]:
    buffer = Buffer.from_text(text, name="adapter.nim")
    buffer.set_cursor(*cursor)
    seen: Dict[str, List[Any]] = {"buffer": [], "status": [], "highlights": [], "events": []}
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: seen["buffer"].append(mirror.text),
        update_status=seen["status"].append,
        update_highlights=seen["highlights"].append,
        handle_event=lambda name, payload: seen["events"].append((name, payload)),
    )
    return TextualIndentAdapter(CommandDispatcher.for_buffer(buffer), hooks), seen


def test_tab_twice_cycles_indentation() -> None:
    adapter, seen = make_adapter("if x:\nz", cursor=(1, 0))

    adapter.handle_textual_key("tab")
    adapter.handle_textual_key("tab")

    assert seen["status"] == ["indented col=2", "indent_cycled col=0"]
    assert seen["buffer"][-1] == "if x:\nz"


def test_motion_breaks_the_cycle() -> None:
    adapter, seen = make_adapter("if x:\nz", cursor=(1, 0))

    adapter.handle_textual_key("tab")
    adapter.handle_textual_key("right")
    adapter.handle_textual_key("tab")

    assert seen["status"] == ["indented col=2", "moved", "indented col=2"]
    assert adapter.buffer.text == "if x:\n  z"


def test_colon_key_dedents_branch_and_reports_opener() -> None:
    adapter, seen = make_adapter("if x:\n  y\n  else", cursor=(2, 6))

    result = adapter.handle_textual_key("colon", text=":")

    assert result.status == "electric"
    assert adapter.buffer.line(2) == "else:"
    assert seen["events"] == [("indent.closing_block", "Closes if x:")]
    assert seen["status"][-1] == "Closes if x:"


def test_highlights_follow_buffer_updates() -> None:
    adapter, seen = make_adapter("x")

    adapter.load_text("if y: discard")

    spans = seen["highlights"][-1]
    assert [(span.start, span.end, span.face) for span in spans][0] == (0, 2, "keyword")
    assert seen["buffer"][-1] == "if y: discard"


def test_modifiers_combine_with_key_name() -> None:
    adapter, seen = make_adapter("  a\n  b")
    adapter.buffer.state.set_selection((0, 0), (1, 1))

    result = adapter.handle_textual_key("left", modifiers=("ctrl",))

    assert result.status == "shifted_left"
    assert adapter.buffer.text == "a\nb"


def test_unmapped_key_is_a_miss() -> None:
    adapter, seen = make_adapter("x")

    result = adapter.handle_textual_key("f5")

    assert not result.consumed
    assert seen["status"][-1] == "f5"


def test_cycle_key_always_steps_to_next_level() -> None:
    adapter, seen = make_adapter("if x:\nz", cursor=(1, 0))

    adapter.handle_textual_key("tab")
    adapter.handle_textual_key("ctrl+t")

    assert seen["status"][-1] == "indent_cycled col=0"
