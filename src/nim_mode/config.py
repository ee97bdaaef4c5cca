"""Static configuration shared by the indentation engine and its hosts."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, Optional

from nim_mode.syntax import keywords

ENV_PREFIX = "NIM_MODE_"

DEFAULT_INDENT_OFFSET = 2

DEFAULT_TRIGGER_COMMANDS: frozenset[str] = frozenset(
    {"indent-for-tab", "indent-line", "snippet-expand"}
)


def _as_frozenset(values: Iterable[str]) -> frozenset[str]:
    return frozenset(str(value) for value in values if str(value))


@dataclass(frozen=True, slots=True)
class IndentConfig:
    """Offset, trigger commands, and the keyword/operator tables.

    Keyword sets are data: swapping them re-targets the engine without
    touching any analysis code.
    """

    indent_offset: int = DEFAULT_INDENT_OFFSET
    trigger_commands: frozenset[str] = DEFAULT_TRIGGER_COMMANDS
    dedenter_keywords: frozenset[str] = keywords.DEDENTER_KEYWORDS
    indenter_keywords: frozenset[str] = keywords.INDENTER_KEYWORDS
    block_start_keywords: frozenset[str] = keywords.BLOCK_START_KEYWORDS
    decl_block_keywords: frozenset[str] = keywords.DECL_BLOCK_KEYWORDS
    definition_keywords: frozenset[str] = keywords.DEFINITION_KEYWORDS
    # Word operators plus the single characters symbolic operators are built from.
    operator_tokens: frozenset[str] = field(
        default_factory=lambda: keywords.OPERATOR_WORDS | keywords.OPERATOR_CHARS
    )
    _operator_chars: frozenset[str] = field(
        init=False, repr=False, compare=False, default=frozenset()
    )

    def __post_init__(self) -> None:
        if self.indent_offset <= 0:
            raise ValueError("indent_offset must be positive")
        for name in (
            "trigger_commands",
            "dedenter_keywords",
            "indenter_keywords",
            "block_start_keywords",
            "decl_block_keywords",
            "definition_keywords",
            "operator_tokens",
        ):
            object.__setattr__(self, name, _as_frozenset(getattr(self, name)))
        object.__setattr__(
            self,
            "_operator_chars",
            frozenset(
                token
                for token in self.operator_tokens
                if len(token) == 1 and not token.isalnum()
            ),
        )

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: object
    ) -> "IndentConfig":
        """Build a config from ``NIM_MODE_*`` variables, then apply overrides."""

        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        raw_offset = env.get(f"{ENV_PREFIX}INDENT_OFFSET")
        if raw_offset:
            try:
                values["indent_offset"] = int(raw_offset)
            except ValueError as exc:
                raise ValueError(
                    f"{ENV_PREFIX}INDENT_OFFSET must be an integer, got {raw_offset!r}"
                ) from exc
        raw_triggers = env.get(f"{ENV_PREFIX}TRIGGER_COMMANDS")
        if raw_triggers:
            values["trigger_commands"] = frozenset(
                item.strip() for item in raw_triggers.split(",") if item.strip()
            )
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]

    def with_overrides(self, **changes: object) -> "IndentConfig":
        return replace(self, **changes)  # type: ignore[arg-type]

    @property
    def operator_words(self) -> frozenset[str]:
        return frozenset(token for token in self.operator_tokens if token.isalpha())

    @property
    def operator_chars(self) -> frozenset[str]:
        return self._operator_chars

    def is_operator(self, token: str) -> bool:
        """True for a word operator or a run made only of operator characters."""

        if not token:
            return False
        if token in self.operator_tokens:
            return True
        chars = self.operator_chars
        return all(char in chars for char in token)


__all__ = [
    "DEFAULT_INDENT_OFFSET",
    "DEFAULT_TRIGGER_COMMANDS",
    "IndentConfig",
]
