"""Command line entry point: batch reindent, shift, inspect and query nimsuggest."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from nim_mode.buffer import Buffer
from nim_mode.config import IndentConfig
from nim_mode.indent import IndentEngine, InsufficientIndentation
from nim_mode.runtime import telemetry
from nim_mode.suggest import LookupFailed, SuggestMethod, SuggestService
from nim_mode.syntax import SourceText, highlight


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _write(path: str, text: str, out: TextIO) -> None:
    if path == "-":
        out.write(text)
    else:
        Path(path).write_text(text, encoding="utf-8")


def _config(args: argparse.Namespace) -> IndentConfig:
    overrides = {}
    if getattr(args, "offset", None):
        overrides["indent_offset"] = args.offset
    return IndentConfig.from_env(**overrides)


def _row_span(args: argparse.Namespace, buffer: Buffer) -> tuple[int, int]:
    start = max(0, (args.start or 1) - 1)
    end = args.end if args.end else buffer.line_count
    return start, min(end, buffer.line_count)


def _cmd_reindent(args: argparse.Namespace, out: TextIO) -> int:
    config = _config(args)
    pending: List[str] = []
    for path in args.paths:
        buffer = Buffer.from_text(_read(path), name=path)
        start, end = _row_span(args, buffer)
        changed = IndentEngine(buffer, config).indent_region(start, end)
        if args.check:
            if changed:
                pending.append(path)
                out.write(f"{path}: {changed} line(s) would be reindented\n")
        elif changed or path == "-":
            _write(path, buffer.text, out)
    return 1 if pending else 0


def _cmd_shift(args: argparse.Namespace, out: TextIO) -> int:
    config = _config(args)
    buffer = Buffer.from_text(_read(args.path), name=args.path)
    start, end = _row_span(args, buffer)
    engine = IndentEngine(buffer, config)
    try:
        if args.direction == "left":
            engine.shift_left(start, end, args.count)
        else:
            engine.shift_right(start, end, args.count)
    except InsufficientIndentation as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2
    _write(args.path, buffer.text, out)
    return 0


def _cmd_context(args: argparse.Namespace, out: TextIO) -> int:
    buffer = Buffer.from_text(_read(args.path), name=args.path)
    row = args.line - 1
    if not 0 <= row < buffer.line_count:
        sys.stderr.write(f"error: line {args.line} is out of range\n")
        return 2
    engine = IndentEngine(buffer, _config(args))
    context = engine.context_at(row)
    cycle = engine.calculate_levels(row)
    levels = ",".join(str(level) for level in cycle.levels)
    out.write(f"{context.describe()}\tcolumn={cycle.current}\tlevels={levels}\n")
    closing = engine.closing_block_message(row)
    if closing:
        out.write(f"{closing}\n")
    return 0


def _cmd_highlight(args: argparse.Namespace, out: TextIO) -> int:
    source = SourceText(_read(args.path))
    for span in highlight(source):
        start_row, start_col = source.row_of(span.start), source.column_of(span.start)
        text = source.text[span.start:span.end]
        out.write(f"{start_row + 1}:{start_col}\t{span.face}\t{text!r}\n")
    return 0


def _cmd_suggest(args: argparse.Namespace, out: TextIO) -> int:
    method = SuggestMethod.parse(args.method)

    async def run() -> list:
        service = SuggestService()
        try:
            return await service.lookup(method, args.path, args.line, args.column)
        finally:
            await service.close()

    try:
        records = asyncio.run(run())
    except LookupFailed as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2
    for record in records:
        out.write(
            f"{record.symbol_kind}\t{record.qualified_path}\t"
            f"{record.file_path}:{record.line}:{record.column}\t{record.forth_text}\n"
        )
    return 0 if records else 1


def _add_span_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--start", type=int, help="First line, 1-based (default: 1)")
    parser.add_argument("--end", type=int, help="Last line, inclusive (default: EOF)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nim-mode", description="Nim indentation and nimsuggest tooling."
    )
    parser.add_argument(
        "--log-preset",
        choices=("development", "editor", "quiet"),
        help="telelog preset to configure before running",
    )
    parser.add_argument("--offset", type=int, help="Indentation offset (default: 2)")
    sub = parser.add_subparsers(dest="command", required=True)

    reindent = sub.add_parser("reindent", help="Recompute indentation of whole files")
    reindent.add_argument("paths", nargs="+", help="Nim files, or - for stdin")
    reindent.add_argument(
        "--check", action="store_true", help="Report files that would change"
    )
    _add_span_options(reindent)
    reindent.set_defaults(handler=_cmd_reindent)

    shift = sub.add_parser("shift", help="Shift a block of lines rigidly")
    shift.add_argument("direction", choices=("left", "right"))
    shift.add_argument("path")
    shift.add_argument("--count", type=int, help="Columns to shift (default: offset)")
    _add_span_options(shift)
    shift.set_defaults(handler=_cmd_shift)

    context = sub.add_parser("context", help="Show the indentation context of a line")
    context.add_argument("path")
    context.add_argument("line", type=int, help="1-based line number")
    context.set_defaults(handler=_cmd_context)

    highlight_cmd = sub.add_parser("highlight", help="Print font-lock spans")
    highlight_cmd.add_argument("path")
    highlight_cmd.set_defaults(handler=_cmd_highlight)

    suggest = sub.add_parser("suggest", help="Query nimsuggest")
    suggest.add_argument(
        "method",
        choices=[name for method in SuggestMethod for name in (method.long_name, method.value)],
        help="suggest, context-suggest, definition or usages (or sug, con, def, use)",
    )
    suggest.add_argument("path")
    suggest.add_argument("line", type=int, help="1-based line")
    suggest.add_argument("column", type=int, help="0-based column")
    suggest.set_defaults(handler=_cmd_suggest)
    return parser


def main(argv: Optional[Sequence[str]] = None, *, out: Optional[TextIO] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    with telemetry.span(f"cli::{args.command}", component="cli"):
        return args.handler(args, out or sys.stdout)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
