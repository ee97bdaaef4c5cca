from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import pytest

from nim_mode.suggest import (
    LookupFailed,
    SuggestClient,
    SuggestMethod,
    SuggestRequest,
    SuggestService,
)

DEF_LINE = "def\tskProc\tmod.greet\t/src/mod.nim\tproc ()\t4\t5\t\"\"\t100\n"


class FakeStdin:
    def __init__(self) -> None:
        self.written: List[str] = []
        self.closed = False

    def write(self, data: bytes) -> None:
        self.written.append(data.decode("utf-8"))

    async def drain(self) -> None:
        return None

    def close(self) -> None:
        self.closed = True


class FakeStdout:
    def __init__(self, lines: List[str]) -> None:
        self._lines = list(lines)

    async def readline(self) -> bytes:
        if not self._lines:
            return b""
        return self._lines.pop(0).encode("utf-8")


class FakeProcess:
    def __init__(self, lines: List[str]) -> None:
        self.stdin = FakeStdin()
        self.stdout = FakeStdout(lines)
        self.returncode: Optional[int] = None

    async def wait(self) -> int:
        self.returncode = 0
        return 0


class FakeSpawner:
    def __init__(self, lines: List[str]) -> None:
        self.lines = lines
        self.calls: List[tuple] = []
        self.processes: List[FakeProcess] = []

    async def __call__(self, *argv: str, cwd: Optional[str] = None) -> FakeProcess:
        self.calls.append((argv, cwd))
        process = FakeProcess(self.lines)
        self.processes.append(process)
        return process


def test_query_starts_process_and_parses_reply() -> None:
    spawner = FakeSpawner(["> " + DEF_LINE, "\n"])
    client = SuggestClient("/src/mod.nim", binary="nimsuggest", spawn=spawner)
    request = SuggestRequest(SuggestMethod.DEFINITION, "/src/mod.nim", 2, 3)

    records = asyncio.run(client.query(request))

    assert [record.qualified_path for record in records] == ["mod.greet"]
    assert spawner.calls == [(("nimsuggest", "--stdin", "/src/mod.nim"), "/src")]
    assert spawner.processes[0].stdin.written == ["def /src/mod.nim:2:3\n"]
    assert client.running


def test_process_exit_mid_reply_fails_lookup() -> None:
    client = SuggestClient("/src/mod.nim", binary="nimsuggest", spawn=FakeSpawner([DEF_LINE]))
    request = SuggestRequest(SuggestMethod.USAGES, "/src/mod.nim", 1, 0)

    with pytest.raises(LookupFailed) as excinfo:
        asyncio.run(client.query(request))

    assert excinfo.value.request == request


def test_missing_binary_fails_lookup() -> None:
    async def missing(*argv: str, cwd: Optional[str] = None) -> FakeProcess:
        raise FileNotFoundError(argv[0])

    client = SuggestClient("/src/mod.nim", binary="no-such-nimsuggest", spawn=missing)

    with pytest.raises(LookupFailed):
        asyncio.run(client.start())
    assert not client.running


def test_close_sends_quit() -> None:
    spawner = FakeSpawner([])
    client = SuggestClient("/src/mod.nim", binary="nimsuggest", spawn=spawner)

    async def scenario() -> None:
        await client.start()
        await client.close()

    asyncio.run(scenario())

    process = spawner.processes[0]
    assert process.stdin.written == ["quit\n"]
    assert process.stdin.closed
    assert process.returncode == 0
    assert not client.running


def test_service_reuses_one_client_per_project(tmp_path: Path) -> None:
    (tmp_path / "app.nimble").write_text("")
    created: List[str] = []

    def factory(project_file: str) -> SuggestClient:
        created.append(project_file)
        return SuggestClient(project_file, binary="nimsuggest", spawn=FakeSpawner([]))

    service = SuggestService(factory)
    first = service.client_for(tmp_path / "a.nim")
    second = service.client_for(tmp_path / "b.nim")

    assert first is second
    assert created == [str(tmp_path / "a.nim")]


def test_goto_definition_uses_dirty_file_and_removes_it(tmp_path: Path) -> None:
    spawner = FakeSpawner([DEF_LINE, "\n"])
    service = SuggestService(
        lambda project_file: SuggestClient(project_file, binary="nimsuggest", spawn=spawner)
    )
    source = tmp_path / "mod.nim"
    source.write_text("proc greet() = discard\n")

    record = asyncio.run(service.goto_definition(str(source), 1, 5, text="greet()\n"))

    assert record.name == "greet"
    command = spawner.processes[0].stdin.written[0]
    assert command.startswith(f"def {source};")
    dirty = Path(command.split(";", 1)[1].rsplit(":", 2)[0])
    assert dirty.name.startswith("nim_mode_mod_")
    assert not dirty.exists()


def test_goto_definition_without_records_fails(tmp_path: Path) -> None:
    spawner = FakeSpawner(["\n"])
    service = SuggestService(
        lambda project_file: SuggestClient(project_file, binary="nimsuggest", spawn=spawner)
    )

    with pytest.raises(LookupFailed):
        asyncio.run(service.goto_definition(str(tmp_path / "mod.nim"), 1, 0))


def test_diagnostic_lines_in_reply_are_skipped() -> None:
    spawner = FakeSpawner(["Hint: used config file\tx\n", DEF_LINE, "\n"])
    client = SuggestClient("/src/mod.nim", binary="nimsuggest", spawn=spawner)
    request = SuggestRequest(SuggestMethod.DEFINITION, "/src/mod.nim", 1, 0)

    records = asyncio.run(client.query(request))

    assert [record.name for record in records] == ["greet"]


def test_malformed_record_fails_lookup() -> None:
    bad = "def\tskProc\tmod.greet\t/src/mod.nim\tproc ()\tfour\t5\n"
    client = SuggestClient("/src/mod.nim", binary="nimsuggest", spawn=FakeSpawner([bad, "\n"]))
    request = SuggestRequest(SuggestMethod.DEFINITION, "/src/mod.nim", 1, 0)

    with pytest.raises(LookupFailed) as excinfo:
        asyncio.run(client.query(request))

    assert excinfo.value.request == request
