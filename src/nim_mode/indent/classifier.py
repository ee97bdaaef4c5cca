"""Context classifier: which indentation rule governs a line."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from nim_mode.config import IndentConfig
from nim_mode.syntax import Region, SourceText, StatementNavigator, SyntaxOracle
from nim_mode.syntax.keywords import CLOSE_BRACKETS

from .context import (
    AfterBeginningOfBlock,
    AfterLine,
    AfterOperator,
    IndentContext,
    InsideParen,
    InsideString,
    NoIndent,
)


@dataclass(frozen=True, slots=True)
class LineProbe:
    """Everything a rule needs to know about the line being classified."""

    pos: int
    row: int
    line_start: int
    region: Optional[Region]
    navigator: StatementNavigator

    @property
    def open_pos(self) -> Optional[int]:
        return self.region.start - 1 if self.region is not None else None


Rule = Callable[["ContextClassifier", LineProbe], Optional[IndentContext]]


class ContextClassifier:
    """Runs ordered guard rules; the first one that matches wins.

    Analysis is narrowed to the innermost bracket open at the start of the
    line. Inside such a bracket a line that no rule claims is ``InsideParen``;
    elsewhere it is ``NoIndent``. ``classify`` never raises.
    """

    def __init__(
        self,
        source: SourceText,
        oracle: SyntaxOracle,
        navigator: StatementNavigator,
        config: IndentConfig,
    ) -> None:
        self.source = source
        self.oracle = oracle
        self.navigator = navigator
        self.config = config

    def probe(self, pos: int) -> LineProbe:
        row = self.source.row_of(pos)
        line_start = self.source.line_start(row)
        region = self.oracle.narrow_to_innermost_paren(line_start)
        return LineProbe(
            pos=pos,
            row=row,
            line_start=line_start,
            region=region,
            navigator=self.navigator.narrowed(region),
        )

    def classify(self, pos: int) -> IndentContext:
        probe = self.probe(pos)
        for rule in RULES:
            context = rule(self, probe)
            if context is not None:
                return context
        if probe.open_pos is not None:
            return InsideParen(probe.open_pos)
        return NoIndent(pos)

    # ------------------------------------------------------------------
    # Rules, in priority order

    def at_buffer_start(self, probe: LineProbe) -> Optional[IndentContext]:
        if probe.row != 0:
            return None
        if probe.open_pos is not None:
            return InsideParen(probe.open_pos)
        return NoIndent(probe.line_start)

    def inside_string(self, probe: LineProbe) -> Optional[IndentContext]:
        start = self.oracle.string_start(probe.line_start)
        return InsideString(start) if start is not None else None

    def closing_bracket(self, probe: LineProbe) -> Optional[IndentContext]:
        if probe.open_pos is None:
            return None
        first = self.source.indent_end(probe.row)
        char = self.source.char_at(first)
        if char != "" and char in CLOSE_BRACKETS and self.oracle.is_code(first):
            return InsideParen(probe.open_pos)
        return None

    def after_block_opener(self, probe: LineProbe) -> Optional[IndentContext]:
        navigator = probe.navigator
        token = navigator.first_token(probe.row)
        if token is not None and token[0] in self.config.dedenter_keywords:
            return None
        previous = navigator.previous_code_row(probe.row)
        if previous is None:
            return None
        start = navigator.block_opener(previous)
        return AfterBeginningOfBlock(start) if start is not None else None

    def line_starts_with_operator(self, probe: LineProbe) -> Optional[IndentContext]:
        pos = probe.navigator.starts_with_operator(probe.row)
        return AfterOperator(pos) if pos is not None else None

    def previous_line_ends_with_operator(self, probe: LineProbe) -> Optional[IndentContext]:
        navigator = probe.navigator
        previous = navigator.previous_code_row(probe.row)
        if previous is None:
            return None
        pos = navigator.ends_with_operator(previous)
        return AfterOperator(pos) if pos is not None else None

    def after_line(self, probe: LineProbe) -> Optional[IndentContext]:
        navigator = probe.navigator
        previous = navigator.previous_code_row(probe.row)
        if previous is None:
            return None
        start = navigator.content_start(previous)
        if probe.open_pos is not None and navigator.previous_code_row(previous) is None:
            # First content after the bracket: keep aligning to the bracket.
            return InsideParen(probe.open_pos)
        return AfterLine(start)


RULES: Sequence[Rule] = (
    ContextClassifier.at_buffer_start,
    ContextClassifier.inside_string,
    ContextClassifier.closing_bracket,
    ContextClassifier.after_block_opener,
    ContextClassifier.line_starts_with_operator,
    ContextClassifier.previous_line_ends_with_operator,
    ContextClassifier.after_line,
)

__all__ = ["ContextClassifier", "LineProbe", "RULES"]
