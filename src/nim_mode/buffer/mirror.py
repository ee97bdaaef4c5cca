"""Snapshot handed to host widgets after every edit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .state import Cursor, Selection


@dataclass(frozen=True, slots=True)
class BufferMirror:
    text: str
    cursor: Cursor
    selection: Optional[Selection] = None
    version: int = 0

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")


__all__ = ["BufferMirror"]
