"""Named editor commands routed to the indentation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, List, Optional, Sequence

from nim_mode.buffer import Buffer
from nim_mode.config import IndentConfig
from nim_mode.indent import IndentEngine, IndentSession, InsufficientIndentation
from nim_mode.runtime import telemetry
from nim_mode.syntax.keywords import CLOSE_BRACKETS

# Always steps through the levels, whatever ran before it.
CYCLE_COMMAND = "indent-cycle"


@dataclass(slots=True)
class CommandResult:
    """Outcome of ``CommandDispatcher.dispatch``."""

    consumed: bool
    status: str = "ok"
    message: Optional[str] = None
    column: Optional[int] = None


class CommandBus:
    """Minimal event bus hosts subscribe to for command notifications."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


@dataclass(slots=True)
class CommandContext:
    engine: IndentEngine
    bus: CommandBus
    repeated: bool = False
    extras: Dict[str, object] = field(default_factory=dict)

    @property
    def buffer(self) -> Buffer:
        return self.engine.buffer


CommandHandler = Callable[[CommandContext, List[str]], CommandResult]


class CommandDispatcher:
    """Runs commands by name and remembers the last one for cycling.

    A trigger command issued twice in a row is a repeated cycle request.
    """

    def __init__(
        self,
        engine: IndentEngine,
        *,
        bus: Optional[CommandBus] = None,
    ) -> None:
        self.engine = engine
        self.bus = bus or CommandBus()

    @classmethod
    def for_buffer(
        cls,
        buffer: Buffer,
        *,
        config: Optional[IndentConfig] = None,
        session: Optional[IndentSession] = None,
        bus: Optional[CommandBus] = None,
    ) -> "CommandDispatcher":
        return cls(IndentEngine(buffer, config, session), bus=bus)

    @property
    def session(self) -> IndentSession:
        return self.engine.session

    @property
    def commands(self) -> Sequence[str]:
        return tuple(_COMMAND_HANDLERS)

    def is_repeated(self, command: str) -> bool:
        if command == CYCLE_COMMAND:
            return True
        return (
            command in self.engine.config.trigger_commands
            and self.session.last_command == command
        )

    def dispatch(self, command: str, args: Sequence[str] = ()) -> CommandResult:
        handler = _COMMAND_HANDLERS.get(command)
        if handler is None:
            self.session.last_command = command
            self.bus.emit("command.error", command)
            return CommandResult(consumed=False, status="command_unknown", message=command)

        context = CommandContext(
            engine=self.engine, bus=self.bus, repeated=self.is_repeated(command)
        )
        with telemetry.span(
            f"commands::{command}",
            component="commands",
            metadata={"buffer": self.engine.buffer.name, "repeated": context.repeated},
        ):
            try:
                result = handler(context, list(args))
            except InsufficientIndentation as exc:
                result = CommandResult(
                    consumed=True, status="command_refused", message=str(exc)
                )
                self.bus.emit("command.error", str(exc))
            finally:
                self.session.last_command = command
        self.bus.emit("command.done", {"command": command, "status": result.status})
        return result


def _row_span(context: CommandContext, args: List[str]) -> tuple[int, int]:
    if len(args) >= 2:
        return int(args[0]), int(args[1])
    selected = context.buffer.state.selected_rows()
    if selected is not None:
        return selected
    row = context.buffer.state.cursor[0]
    return row, row + 1


def _count(args: List[str]) -> Optional[int]:
    return int(args[2]) if len(args) >= 3 else None


def _handle_indent_line(context: CommandContext, args: List[str]) -> CommandResult:
    del args
    column = context.engine.indent_line(is_repeated_cycle_request=context.repeated)
    status = "indent_cycled" if context.repeated else "indented"
    context.bus.emit("indent.line", column)
    return CommandResult(consumed=True, status=status, column=column)


def _handle_newline(context: CommandContext, args: List[str]) -> CommandResult:
    del args
    column = context.engine.newline_and_indent()
    return CommandResult(consumed=True, status="newline", column=column)


def _handle_dedent(context: CommandContext, args: List[str]) -> CommandResult:
    del args
    column = context.engine.dedent_line()
    if column is None:
        return CommandResult(consumed=True, status="dedent_none")
    return CommandResult(consumed=True, status="dedented", column=column)


def _handle_backspace(context: CommandContext, args: List[str]) -> CommandResult:
    del args
    dedented = context.engine.dedent_line_backspace()
    return CommandResult(consumed=True, status="dedented" if dedented else "deleted")


def _handle_electric(
    context: CommandContext, args: List[str], *, char: Optional[str] = None
) -> CommandResult:
    typed = char or (args[0] if args else "")
    if not typed:
        return CommandResult(consumed=False, status="miss", message="no character")
    engine = context.engine
    context.buffer.insert_text(typed)
    if typed == ":":
        changed = engine.electric_colon()
        message = engine.closing_block_message()
    elif typed in CLOSE_BRACKETS:
        changed = engine.electric_close()
        message = None
    else:
        return CommandResult(consumed=True, status="inserted")
    if message:
        context.bus.emit("indent.closing_block", message)
    return CommandResult(
        consumed=True, status="electric" if changed else "inserted", message=message
    )


def _handle_indent_region(context: CommandContext, args: List[str]) -> CommandResult:
    start, end = _row_span(context, args)
    changed = context.engine.indent_region(start, end)
    context.bus.emit("indent.region", {"start": start, "end": end, "changed": changed})
    return CommandResult(consumed=True, status="region_indented", message=str(changed))


def _handle_shift(
    context: CommandContext, args: List[str], *, direction: int
) -> CommandResult:
    start, end = _row_span(context, args)
    if direction < 0:
        context.engine.shift_left(start, end, _count(args))
        status = "shifted_left"
    else:
        context.engine.shift_right(start, end, _count(args))
        status = "shifted_right"
    return CommandResult(consumed=True, status=status)


def _handle_show_context(context: CommandContext, args: List[str]) -> CommandResult:
    del args
    described = context.engine.context_at().describe()
    context.bus.emit("indent.context", described)
    return CommandResult(consumed=True, status="context", message=described)


def _handle_which_function(context: CommandContext, args: List[str]) -> CommandResult:
    del args
    name = context.engine.current_defun()
    return CommandResult(consumed=True, status="defun", message=name)


_COMMAND_HANDLERS: Dict[str, CommandHandler] = {
    "indent-line": _handle_indent_line,
    "indent-for-tab": _handle_indent_line,
    CYCLE_COMMAND: _handle_indent_line,
    "newline-and-indent": _handle_newline,
    "dedent-line": _handle_dedent,
    "dedent-backspace": _handle_backspace,
    "electric-colon": partial(_handle_electric, char=":"),
    "self-insert": _handle_electric,
    "indent-region": _handle_indent_region,
    "shift-left": partial(_handle_shift, direction=-1),
    "shift-right": partial(_handle_shift, direction=1),
    "show-context": _handle_show_context,
    "which-function": _handle_which_function,
}


__all__ = [
    "CYCLE_COMMAND",
    "CommandBus",
    "CommandContext",
    "CommandDispatcher",
    "CommandHandler",
    "CommandResult",
]
