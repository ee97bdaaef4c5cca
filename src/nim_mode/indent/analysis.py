"""Per-snapshot bundle wiring the oracle, navigator, classifier and calculator."""

from __future__ import annotations

from nim_mode.config import IndentConfig
from nim_mode.syntax import SourceText, StatementNavigator, SyntaxOracle

from .calculator import IndentCalculator
from .classifier import ContextClassifier
from .context import IndentContext


class IndentAnalysis:
    """Frozen view of one text used for a single indentation request."""

    def __init__(self, text: str, config: IndentConfig) -> None:
        self.config = config
        self.source = SourceText(text)
        self.oracle = SyntaxOracle(self.source)
        self.navigator = StatementNavigator(self.source, self.oracle, config)
        self.classifier = ContextClassifier(
            self.source, self.oracle, self.navigator, config
        )
        self.calculator = IndentCalculator(
            self.source, self.oracle, self.navigator, config
        )

    def context_for_row(self, row: int) -> IndentContext:
        return self.classifier.classify(self.source.indent_end(row))

    def indentation_for_row(self, row: int) -> int:
        return self.calculator.calculate(self.context_for_row(row), row)

    def starts_in_string(self, row: int) -> bool:
        return self.oracle.string_start(self.source.line_start(row)) is not None

    def closes_string(self, row: int) -> bool:
        """Does ``row`` open with the delimiter ending the string it starts in?"""

        if not self.starts_in_string(row):
            return False
        return self.source.text.startswith('"""', self.source.indent_end(row))


__all__ = ["IndentAnalysis"]
