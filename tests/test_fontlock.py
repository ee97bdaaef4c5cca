from __future__ import annotations

from nim_mode.syntax import SourceText, highlight


def faces(text: str) -> list[tuple[str, str]]:
    return [(text[span.start:span.end], span.face) for span in highlight(SourceText(text))]


def test_routine_signature() -> None:
    found = faces("proc add*(a: int): int = a + 1  # sum\n")

    assert ("proc", "keyword") in found
    assert ("add", "function-name") in found
    assert ("int", "builtin") in found
    assert ("1", "number") in found
    assert ("# sum", "comment") in found


def test_type_section_names() -> None:
    found = faces("type\n  Point = object\n    x: float\n")

    assert ("type", "keyword") in found
    assert ("Point", "type-name") in found
    assert ("object", "keyword") in found
    assert ("float", "builtin") in found


def test_strings_doc_comments_and_pragmas() -> None:
    found = faces('## docs\nlet s {.used.} = "if nil"\nlet b = true\n')

    assert ("## docs", "doc") in found
    assert ("{.used.}", "pragma") in found
    assert ('"if nil"', "string") in found
    assert ("true", "constant") in found
    assert ("if", "keyword") not in found


def test_multiline_comment_is_split_per_line() -> None:
    found = faces("#[ one\ntwo ]#\nx")

    assert found == [("#[ one", "comment"), ("two ]#", "comment")]


def test_spans_are_sorted_and_disjoint() -> None:
    spans = highlight(SourceText('proc f() {.inline.} = echo "x", 0x1F, nil # c\n'))

    for left, right in zip(spans, spans[1:]):
        assert left.end <= right.start


def test_non_ascii_identifiers_and_digits() -> None:
    found = faces("let été = 1\necho ², x²\n")

    assert ("let", "keyword") in found
    assert ("1", "number") in found
    assert all("é" not in text and "²" not in text for text, _ in found)


def test_non_ascii_routine_name() -> None:
    assert ("größe", "function-name") in faces("proc größe(): int = 2\n")
