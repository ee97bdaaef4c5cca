"""Host-agnostic adapter that turns Textual key events into editor commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from nim_mode.buffer import BufferMirror
from nim_mode.commands import CommandDispatcher, CommandResult
from nim_mode.syntax import HighlightSpan, SourceText, highlight


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    update_highlights: Callable[[List[HighlightSpan]], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


# Keys that always map to the same command, whatever their text.
KEY_COMMANDS: Dict[str, str] = {
    "tab": "indent-for-tab",
    "shift+tab": "dedent-line",
    "backtab": "dedent-line",
    "ctrl+t": "indent-cycle",
    "enter": "newline-and-indent",
    "backspace": "dedent-backspace",
    "ctrl+r": "indent-region",
    "ctrl+left": "shift-left",
    "ctrl+right": "shift-right",
    "ctrl+k": "show-context",
}

MOTIONS: Dict[str, tuple[int, int]] = {
    "left": (0, -1),
    "right": (0, 1),
    "up": (-1, 0),
    "down": (1, 0),
}


class TextualIndentAdapter:
    """Bridges CommandDispatcher + bus events to a Textual-friendly surface."""

    def __init__(self, dispatcher: CommandDispatcher, hooks: TextualUIHooks) -> None:
        self.dispatcher = dispatcher
        self.hooks = hooks
        self._subscribe_events()
        self._refresh_buffer()

    @property
    def buffer(self):
        return self.dispatcher.engine.buffer

    def handle_textual_key(
        self,
        key: str,
        *,
        text: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> CommandResult:
        """Translate a Textual key event into a command and dispatch it."""

        normalized = key.lower()
        mods = tuple(str(mod).lower() for mod in modifiers)
        if mods and "+" not in normalized:
            normalized = "+".join((*mods, normalized))
        self._log_state("key ->", key=normalized, text=text)

        if normalized in MOTIONS:
            result = self._move(*MOTIONS[normalized])
        elif normalized in KEY_COMMANDS:
            result = self.dispatcher.dispatch(KEY_COMMANDS[normalized])
        elif text and text.isprintable():
            command = "electric-colon" if text == ":" else "self-insert"
            result = self.dispatcher.dispatch(command, [text])
        else:
            result = CommandResult(consumed=False, status="miss", message=normalized)

        self._after_result(result)
        self._log_state("result <-", status=result.status, message=result.message)
        return result

    def load_text(self, text: str) -> None:
        """Replace the whole buffer, e.g. after the host opened a file."""

        buffer = self.buffer
        buffer.replace_lines(
            0, buffer.line_count, text.split("\n"), label="load", cursor=(0, 0)
        )
        self.dispatcher.session.reset()
        self._refresh_buffer()

    def _move(self, drow: int, dcol: int) -> CommandResult:
        buffer = self.buffer
        row, col = buffer.state.cursor
        row = max(0, min(row + drow, buffer.line_count - 1))
        col = max(0, min(col + dcol, len(buffer.line(row))))
        buffer.set_cursor(row, col)
        # Any motion ends a run of repeated indent requests.
        self.dispatcher.session.last_command = "move"
        return CommandResult(consumed=True, status="moved")

    def _after_result(self, result: CommandResult) -> None:
        status = result.message or result.status
        if result.column is not None:
            status = f"{status} col={result.column}"
        if status:
            self.hooks.update_status(status)
        self._refresh_buffer()

    def _subscribe_events(self) -> None:
        bus = self.dispatcher.bus
        for event in (
            "command.error",
            "indent.closing_block",
            "indent.context",
            "indent.region",
        ):
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log_state("event ->", event=name, payload=payload)
        self.hooks.handle_event(name, payload)
        if name == "indent.closing_block" and isinstance(payload, str):
            self.hooks.update_status(payload)

    def _refresh_buffer(self) -> None:
        mirror = self.buffer.mirror()
        self.hooks.update_buffer(mirror)
        self.hooks.update_highlights(highlight(SourceText(mirror.text)))

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        buffer = self.buffer
        return {
            "cursor": buffer.state.cursor,
            "last_command": self.dispatcher.session.last_command,
            "buffer": buffer.name,
            "buffer_version": buffer.document.version,
        }


__all__ = ["KEY_COMMANDS", "TextualIndentAdapter", "TextualUIHooks"]
