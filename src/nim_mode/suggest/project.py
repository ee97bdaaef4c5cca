"""Project discovery and on-disk helpers for nimsuggest queries."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Mapping, Optional

ENV_BINARY = "NIM_MODE_NIMSUGGEST"

PROJECT_MARKERS = ("nim.cfg", "config.nims", ".git")


def _is_project_dir(directory: Path) -> bool:
    if any((directory / marker).exists() for marker in PROJECT_MARKERS):
        return True
    return any(directory.glob("*.nimble"))


def find_project_root(path: str | os.PathLike[str]) -> Path:
    """Closest ancestor holding a ``.nimble`` file or another project marker.

    Falls back to the directory of ``path`` itself.
    """

    start = Path(path).resolve()
    directory = start if start.is_dir() else start.parent
    for candidate in (directory, *directory.parents):
        if _is_project_dir(candidate):
            return candidate
    return directory


def nimsuggest_binary(environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ
    configured = env.get(ENV_BINARY)
    if configured:
        return configured
    return shutil.which("nimsuggest") or "nimsuggest"


def write_dirty_file(
    text: str,
    *,
    source_path: Optional[str | os.PathLike[str]] = None,
    directory: Optional[str | os.PathLike[str]] = None,
) -> Path:
    """Save unsaved buffer text where nimsuggest can read it.

    The caller owns the returned file and removes it when done.
    """

    stem = Path(source_path).stem if source_path else "buffer"
    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        prefix=f"nim_mode_{stem}_",
        suffix=".nim",
        dir=directory,
        delete=False,
    )
    with handle:
        handle.write(text)
    return Path(handle.name)


__all__ = [
    "ENV_BINARY",
    "PROJECT_MARKERS",
    "find_project_root",
    "nimsuggest_binary",
    "write_dirty_file",
]
