"""Executable Textual app that hosts the Nim indentation engine."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from rich.text import Text
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' extra to use nim_mode.adapters.textual.app"
    ) from exc

from nim_mode.buffer import Buffer, BufferMirror
from nim_mode.commands import CommandDispatcher
from nim_mode.config import IndentConfig
from nim_mode.runtime import telemetry
from nim_mode.syntax import HighlightSpan

from .controller import TextualIndentAdapter, TextualUIHooks

FACE_STYLES: Dict[str, str] = {
    "comment": "italic grey50",
    "doc": "italic green",
    "string": "yellow",
    "keyword": "bold magenta",
    "builtin": "cyan",
    "constant": "bold cyan",
    "number": "bright_blue",
    "pragma": "dim yellow",
    "function-name": "bold blue",
    "type-name": "bold green",
}


def create_default_dispatcher(
    text: str = "", *, path: Optional[str] = None, config: Optional[IndentConfig] = None
) -> CommandDispatcher:
    """Build a dispatcher over a fresh buffer holding ``text``."""

    name = Path(path).name if path else "scratch.nim"
    buffer = Buffer.from_text(text, name=name, path=path)
    return CommandDispatcher.for_buffer(buffer, config=config or IndentConfig.from_env())


def render_buffer(mirror: BufferMirror, spans: Sequence[HighlightSpan]) -> Text:
    """Styled text with the cursor cell shown in reverse video."""

    body = mirror.text
    rendered = Text(body + " ")
    for span in spans:
        style = FACE_STYLES.get(span.face)
        if style:
            rendered.stylize(style, span.start, span.end)
    lines = mirror.lines
    row, col = mirror.cursor
    offset = sum(len(line) + 1 for line in lines[:row]) + col
    rendered.stylize("reverse", offset, offset + 1)
    return rendered


@dataclass
class UIState:
    mirror: Optional[BufferMirror] = None
    spans: List[HighlightSpan] = field(default_factory=list)
    status_text: str = ""


class NimModeApp(App[None]):
    """Minimal Textual UI embedding the indentation engine."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 1 1;
		content-align: left top;
		overflow: auto;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, *, path: Optional[str] = None, config: Optional[IndentConfig] = None) -> None:
        super().__init__()
        self._state = UIState()
        self._path = path
        self._config = config
        self.adapter: TextualIndentAdapter | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="buffer-area"):
            self._buffer_widget = Static("", id="buffer-view")
            yield self._buffer_widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        text = Path(self._path).read_text(encoding="utf-8") if self._path else ""
        dispatcher = create_default_dispatcher(text, path=self._path, config=self._config)
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            update_highlights=self._update_highlights,
            handle_event=self._handle_event,
            log=self._log_line,
        )
        self.adapter = TextualIndentAdapter(dispatcher, hooks)

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter or event.key in {"ctrl+c", "ctrl+q"}:
            return
        self.adapter.handle_textual_key(event.key, text=event.character)
        event.stop()

    def _update_buffer(self, mirror: BufferMirror) -> None:
        self._state.mirror = mirror

    def _update_highlights(self, spans: List[HighlightSpan]) -> None:
        self._state.spans = spans
        if self._buffer_widget and self._state.mirror is not None:
            self._buffer_widget.update(render_buffer(self._state.mirror, spans))

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _handle_event(self, name: str, payload: Any | None) -> None:
        if name == "command.error" and isinstance(payload, str):
            self._update_status(f"error: {payload}")

    def _log_line(self, line: str) -> None:
        telemetry.get_logger("nim_mode.adapters.textual").debug(line)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the nim-mode Textual demo.")
    parser.add_argument("path", nargs="?", help="Nim file to open")
    parser.add_argument(
        "--offset", type=int, default=None, help="Indentation offset (default: 2)"
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    overrides = {"indent_offset": args.offset} if args.offset else {}
    app = NimModeApp(path=args.path, config=IndentConfig.from_env(**overrides))
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
