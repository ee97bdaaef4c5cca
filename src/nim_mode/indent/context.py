"""Indentation contexts: one tagged variant per classification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class IndentContext:
    """Base of the tagged union; ``position`` always points into real text."""

    position: int
    kind: ClassVar[str] = "context"

    def describe(self) -> str:
        return f"{self.kind}@{self.position}"


@dataclass(frozen=True, slots=True)
class InsideParen(IndentContext):
    kind: ClassVar[str] = "inside-paren"

    @property
    def open_pos(self) -> int:
        return self.position


@dataclass(frozen=True, slots=True)
class InsideString(IndentContext):
    kind: ClassVar[str] = "inside-string"

    @property
    def string_start(self) -> int:
        return self.position


@dataclass(frozen=True, slots=True)
class AfterBeginningOfBlock(IndentContext):
    kind: ClassVar[str] = "after-beginning-of-block"

    @property
    def block_start(self) -> int:
        return self.position


@dataclass(frozen=True, slots=True)
class AfterOperator(IndentContext):
    kind: ClassVar[str] = "after-operator"

    @property
    def operator_pos(self) -> int:
        return self.position


@dataclass(frozen=True, slots=True)
class AfterLine(IndentContext):
    kind: ClassVar[str] = "after-line"

    @property
    def line_start(self) -> int:
        return self.position


@dataclass(frozen=True, slots=True)
class NoIndent(IndentContext):
    kind: ClassVar[str] = "no-indent"


__all__ = [
    "AfterBeginningOfBlock",
    "AfterLine",
    "AfterOperator",
    "IndentContext",
    "InsideParen",
    "InsideString",
    "NoIndent",
]
