"""Indentation levels and the per-document cycling state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

IndentLevels = Tuple[int, ...]


def compute_levels(column: int, offset: int) -> Tuple[IndentLevels, int]:
    """Every offset multiple up to ``column``, plus ``column`` itself.

    Returns the ascending levels and the index of the full target, which is
    always the last one.
    """

    if column < 0:
        raise ValueError("column must be non-negative")
    if offset <= 0:
        raise ValueError("offset must be positive")
    remainder = column % offset
    steps = (column - remainder) // offset
    levels = [offset * step for step in range(steps + 1)]
    if remainder:
        levels.append(steps * offset + remainder)
    return tuple(levels), len(levels) - 1


@dataclass(slots=True)
class CycleState:
    """Levels computed for one line and the level currently applied."""

    levels: IndentLevels = (0,)
    index: int = 0
    row: Optional[int] = None
    signature: Optional[str] = None

    @classmethod
    def for_column(
        cls,
        column: int,
        offset: int,
        *,
        row: Optional[int] = None,
        signature: Optional[str] = None,
    ) -> "CycleState":
        levels, index = compute_levels(column, offset)
        return cls(levels=levels, index=index, row=row, signature=signature)

    @property
    def current(self) -> int:
        return self.levels[self.index]

    def toggle(self) -> int:
        """Step to the next shallower level, wrapping to the deepest one."""

        self.index -= 1
        if self.index < 0:
            self.index = len(self.levels) - 1
        return self.current

    def matches(self, row: int, signature: str) -> bool:
        return self.row == row and self.signature == signature


@dataclass(slots=True)
class IndentSession:
    """State one open document carries between indentation requests."""

    cycle: CycleState = field(default_factory=CycleState)
    last_command: Optional[str] = None

    def reset(self) -> None:
        self.cycle = CycleState()
        self.last_command = None


__all__ = ["CycleState", "IndentLevels", "IndentSession", "compute_levels"]
