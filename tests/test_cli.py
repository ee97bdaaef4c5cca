from __future__ import annotations

import io
from pathlib import Path

import pytest

from nim_mode.cli import main


def write(tmp_path: Path, text: str, name: str = "mod.nim") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_reindent_rewrites_file(tmp_path: Path) -> None:
    path = write(tmp_path, "proc f() =\necho 1\n")

    assert main(["reindent", str(path)], out=io.StringIO()) == 0
    assert path.read_text(encoding="utf-8") == "proc f() =\n  echo 1\n"


def test_reindent_check_reports_without_writing(tmp_path: Path) -> None:
    path = write(tmp_path, "if x:\ny\n")
    out = io.StringIO()

    assert main(["reindent", "--check", str(path)], out=out) == 1
    assert out.getvalue() == f"{path}: 1 line(s) would be reindented\n"
    assert path.read_text(encoding="utf-8") == "if x:\ny\n"


def test_reindent_check_passes_on_clean_file(tmp_path: Path) -> None:
    path = write(tmp_path, "if x:\n  y\n")

    assert main(["reindent", "--check", str(path)], out=io.StringIO()) == 0


def test_reindent_honours_offset(tmp_path: Path) -> None:
    path = write(tmp_path, "if x:\ny\n")

    main(["--offset", "4", "reindent", str(path)], out=io.StringIO())

    assert path.read_text(encoding="utf-8") == "if x:\n    y\n"


def test_shift_right_with_count(tmp_path: Path) -> None:
    path = write(tmp_path, "a\nb")

    assert main(["shift", "right", str(path), "--count", "3"], out=io.StringIO()) == 0
    assert path.read_text(encoding="utf-8") == "   a\n   b"


def test_shift_left_refusal_exits_with_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = write(tmp_path, "  a\nb")

    assert main(["shift", "left", str(path)], out=io.StringIO()) == 2
    assert "error:" in capsys.readouterr().err
    assert path.read_text(encoding="utf-8") == "  a\nb"


def test_context_prints_kind_and_column(tmp_path: Path) -> None:
    path = write(tmp_path, "if x:\n  y = 1\n")
    out = io.StringIO()

    assert main(["context", str(path), "2"], out=out) == 0
    assert out.getvalue().startswith("after-beginning-of-block@0\tcolumn=2\t")


def test_context_rejects_out_of_range_line(tmp_path: Path) -> None:
    path = write(tmp_path, "x\n")

    assert main(["context", str(path), "9"], out=io.StringIO()) == 2


def test_highlight_lists_faces(tmp_path: Path) -> None:
    path = write(tmp_path, "if x: discard\n")
    out = io.StringIO()

    main(["highlight", str(path)], out=out)

    assert out.getvalue().splitlines()[0] == "1:0\tkeyword\t'if'"


def test_suggest_without_binary_exits_with_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = write(tmp_path, "echo 1\n")
    monkeypatch.setenv("NIM_MODE_NIMSUGGEST", str(tmp_path / "missing-nimsuggest"))

    assert main(["suggest", "def", str(path), "1", "0"], out=io.StringIO()) == 2


def test_suggest_rejects_unknown_method(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = write(tmp_path, "echo 1\n")

    with pytest.raises(SystemExit) as excinfo:
        main(["suggest", "rename", str(path), "1", "0"], out=io.StringIO())

    assert excinfo.value.code == 2
    assert "invalid choice" in capsys.readouterr().err
