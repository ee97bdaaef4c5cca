"""Indentation engine, font-lock and nimsuggest client for Nim editors."""

__all__ = [
    "adapters",
    "buffer",
    "commands",
    "config",
    "indent",
    "runtime",
    "suggest",
    "syntax",
]

__version__ = "0.1.0"
