"""Textual adapter package; the demo app lives in ``app`` and needs the extra."""

from .controller import KEY_COMMANDS, TextualIndentAdapter, TextualUIHooks

__all__ = ["KEY_COMMANDS", "TextualIndentAdapter", "TextualUIHooks"]
