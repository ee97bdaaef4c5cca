"""Thin nimsuggest client: wire protocol, async process client, project lookup."""

from .client import ClientFactory, SuggestClient, SuggestService
from .project import find_project_root, nimsuggest_binary, write_dirty_file
from .protocol import (
    LookupFailed,
    SuggestMethod,
    SuggestRecord,
    SuggestRequest,
    parse_records,
)

__all__ = [
    "ClientFactory",
    "LookupFailed",
    "SuggestClient",
    "SuggestMethod",
    "SuggestRecord",
    "SuggestRequest",
    "SuggestService",
    "find_project_root",
    "nimsuggest_binary",
    "parse_records",
    "write_dirty_file",
]
