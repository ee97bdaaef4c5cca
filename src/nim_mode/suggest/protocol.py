"""nimsuggest request/response wire format."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional


class SuggestMethod(str, Enum):
    """Queries the client can issue; values are the nimsuggest commands."""

    SUGGEST = "sug"
    CONTEXT_SUGGEST = "con"
    DEFINITION = "def"
    USAGES = "use"

    @classmethod
    def parse(cls, name: str) -> "SuggestMethod":
        """Accept either the long name (``context-suggest``) or the command."""

        key = name.strip().lower()
        for method in cls:
            if key in (method.value, method.long_name):
                return method
        raise ValueError(f"Unknown suggest method '{name}'.")

    @property
    def long_name(self) -> str:
        return self.name.lower().replace("_", "-")


@dataclass(frozen=True, slots=True)
class SuggestRequest:
    """One query; ``line`` is 1-based and ``column`` 0-based, as nimsuggest wants."""

    method: SuggestMethod
    file_path: str
    line: int
    column: int
    temp_file_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.line < 1:
            raise ValueError("line must be 1-based")
        if self.column < 0:
            raise ValueError("column must be non-negative")

    def to_command(self) -> str:
        target = self.file_path
        if self.temp_file_path:
            target = f"{target};{self.temp_file_path}"
        return f"{self.method.value} {_quote(target)}:{self.line}:{self.column}"


@dataclass(frozen=True, slots=True)
class SuggestRecord:
    section: str
    symbol_kind: str
    qualified_path: str
    file_path: str
    forth_text: str
    line: int
    column: int
    doc: str = ""

    @property
    def name(self) -> str:
        return self.qualified_path.rsplit(".", 1)[-1]

    @classmethod
    def parse_line(cls, line: str) -> "SuggestRecord":
        fields = line.rstrip("\r\n").split("\t")
        if len(fields) < 7:
            raise ValueError(f"Malformed nimsuggest record: {line!r}")
        try:
            row = int(fields[5])
            column = int(fields[6])
        except ValueError as exc:
            raise ValueError(f"Malformed nimsuggest position: {line!r}") from exc
        doc = _unquote(fields[7]) if len(fields) > 7 else ""
        return cls(
            section=fields[0],
            symbol_kind=fields[1],
            qualified_path=fields[2],
            file_path=fields[3],
            forth_text=fields[4],
            line=row,
            column=column,
            doc=doc,
        )


def parse_records(lines: Iterable[str]) -> List[SuggestRecord]:
    """Parse every record line.

    Blank lines, the ``>`` prompt and diagnostic output (hints, anything with
    fewer than seven tab-separated fields) are skipped.
    """

    records: List[SuggestRecord] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        while line.startswith("> "):
            line = line[2:]
        if not line.strip() or line.count("\t") < 6:
            continue
        records.append(SuggestRecord.parse_line(line))
    return records


class LookupFailed(RuntimeError):
    """A query yielded nothing usable, or nimsuggest could not be reached."""

    def __init__(self, message: str, *, request: Optional[SuggestRequest] = None) -> None:
        super().__init__(message)
        self.request = request


def _quote(path: str) -> str:
    if " " in path or '"' in path:
        escaped = path.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return path


_ESCAPE = re.compile(r"\\(.)")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return _ESCAPE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), value[1:-1])
    return value


__all__ = [
    "LookupFailed",
    "SuggestMethod",
    "SuggestRecord",
    "SuggestRequest",
    "parse_records",
]
