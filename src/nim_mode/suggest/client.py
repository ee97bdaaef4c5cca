"""Async client for long-lived ``nimsuggest --stdin`` processes."""

from __future__ import annotations

import asyncio
import contextlib
import os
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

from nim_mode.runtime import telemetry

from .project import find_project_root, nimsuggest_binary, write_dirty_file
from .protocol import LookupFailed, SuggestMethod, SuggestRecord, SuggestRequest, parse_records

Spawn = Callable[..., Awaitable[Any]]

_PROMPT = "> "


async def _spawn_subprocess(*argv: str, cwd: Optional[str] = None) -> Any:
    return await asyncio.create_subprocess_exec(
        *argv,
        cwd=cwd,
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.DEVNULL,
    )


class SuggestClient:
    """One nimsuggest process serving one project.

    Queries are serialised: nimsuggest answers each command with its records
    followed by an empty line, so only one command may be in flight.
    """

    def __init__(
        self,
        project_file: str | os.PathLike[str],
        *,
        binary: Optional[str] = None,
        spawn: Optional[Spawn] = None,
        logger_name: Optional[str] = None,
    ) -> None:
        self.project_file = str(project_file)
        self.binary = binary or nimsuggest_binary()
        self._spawn = spawn or _spawn_subprocess
        self._logger_name = logger_name or "nim_mode.suggest"
        self._process: Any = None
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def start(self) -> None:
        if self.running:
            return
        argv = (self.binary, "--stdin", self.project_file)
        try:
            self._process = await self._spawn(
                *argv, cwd=str(Path(self.project_file).parent)
            )
        except OSError as exc:
            telemetry.record_event(
                "suggest.process.unavailable",
                level="error",
                data={"binary": self.binary, "error": str(exc)},
                logger_name=self._logger_name,
            )
            raise LookupFailed(f"Cannot start {self.binary}: {exc}") from exc
        telemetry.record_event(
            "suggest.process.started",
            data={"binary": self.binary, "project": self.project_file},
            logger_name=self._logger_name,
        )

    async def query(self, request: SuggestRequest) -> List[SuggestRecord]:
        """Send ``request`` and collect the records of its reply, in order."""

        async with self._lock:
            if not self.running:
                await self.start()
            with telemetry.span(
                "suggest::query",
                logger_name=self._logger_name,
                component="suggest",
                metadata={"method": request.method.value, "file": request.file_path},
            ) as handle:
                lines = await self._exchange(request)
                try:
                    records = parse_records(lines)
                except ValueError as exc:
                    raise LookupFailed(str(exc), request=request) from exc
                handle.add_metadata("records", len(records))
        return records

    async def _exchange(self, request: SuggestRequest) -> List[str]:
        process = self._process
        try:
            process.stdin.write((request.to_command() + "\n").encode("utf-8"))
            await process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as exc:
            raise LookupFailed("nimsuggest is not running", request=request) from exc

        lines: List[str] = []
        while True:
            raw = await process.stdout.readline()
            if not raw:
                raise LookupFailed("nimsuggest exited mid-reply", request=request)
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            while line.startswith(_PROMPT):
                line = line[len(_PROMPT):]
            if not line.strip():
                return lines
            lines.append(line)

    async def close(self) -> None:
        process = self._process
        self._process = None
        if process is None or process.returncode is not None:
            return
        with contextlib.suppress(BrokenPipeError, ConnectionResetError):
            process.stdin.write(b"quit\n")
            await process.stdin.drain()
            process.stdin.close()
        await process.wait()
        telemetry.record_event(
            "suggest.process.stopped",
            data={"project": self.project_file, "returncode": process.returncode},
            logger_name=self._logger_name,
        )


ClientFactory = Callable[[str], SuggestClient]


class SuggestService:
    """Routes queries to one client per project root, starting them lazily."""

    def __init__(self, client_factory: Optional[ClientFactory] = None) -> None:
        self._factory = client_factory or (lambda project_file: SuggestClient(project_file))
        self._clients: Dict[Path, SuggestClient] = {}

    def client_for(self, file_path: str | os.PathLike[str]) -> SuggestClient:
        root = find_project_root(file_path)
        client = self._clients.get(root)
        if client is None:
            client = self._factory(str(file_path))
            self._clients[root] = client
        return client

    async def query(self, request: SuggestRequest) -> List[SuggestRecord]:
        return await self.client_for(request.file_path).query(request)

    async def lookup(
        self,
        method: SuggestMethod,
        file_path: str,
        line: int,
        column: int,
        *,
        text: Optional[str] = None,
    ) -> List[SuggestRecord]:
        """Query at ``(line, column)``; unsaved ``text`` goes through a dirty file."""

        dirty: Optional[Path] = None
        if text is not None:
            dirty = write_dirty_file(text, source_path=file_path)
        try:
            request = SuggestRequest(
                method=method,
                file_path=str(file_path),
                line=line,
                column=column,
                temp_file_path=str(dirty) if dirty else None,
            )
            return await self.query(request)
        finally:
            if dirty is not None:
                dirty.unlink(missing_ok=True)

    async def goto_definition(
        self, file_path: str, line: int, column: int, *, text: Optional[str] = None
    ) -> SuggestRecord:
        records = await self.lookup(
            SuggestMethod.DEFINITION, file_path, line, column, text=text
        )
        if not records:
            raise LookupFailed(
                f"No definition found at {file_path}:{line}:{column}",
                request=SuggestRequest(SuggestMethod.DEFINITION, str(file_path), line, column),
            )
        return records[0]

    async def completions(
        self, file_path: str, line: int, column: int, *, text: Optional[str] = None
    ) -> List[SuggestRecord]:
        return await self.lookup(SuggestMethod.SUGGEST, file_path, line, column, text=text)

    async def close(self) -> None:
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.close()


__all__ = ["ClientFactory", "SuggestClient", "SuggestService"]
