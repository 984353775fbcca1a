"""Unit tests for core/passes/highlight.py"""

import pytest

from mdforge.core.diagnostics import DiagnosticKind
from mdforge.core.models import NodeType
from mdforge.core.passes.highlight import (
    PygmentsHighlighter,
    UnknownLanguageError,
    highlight_code_blocks,
    split_lines,
)


class ExplodingHighlighter:
    """Highlighter stub that fails for every language."""

    def highlight(self, language, code):
        raise RuntimeError("boom")


@pytest.fixture(name="highlighter")
def highlighter_fixture():
    return PygmentsHighlighter()


@pytest.mark.parametrize("fragments,expected", [
    ([("", "a\nb\n")], [[("", "a")], [("", "b")]]),
    ([("", "a\nb")], [[("", "a")], [("", "b")]]),
    ([("", "a\n\n")], [[("", "a")], []]),
    ([("k", "def"), ("", " f\n"), ("", "x\n")], [[("k", "def"), ("", " f")], [("", "x")]]),
    ([], []),
])
def test_split_lines(fragments, expected):
    """Fragments are split on newlines; a trailing newline opens no extra line."""
    assert split_lines(fragments) == expected


def test_pygments_highlighter_known_language(highlighter):
    """Known languages produce classed fragments that reassemble to the source."""
    fragments = highlighter.highlight("python", "def f():\n    pass\n")
    assert "".join(value for _, value in fragments) == "def f():\n    pass\n"
    assert ("k", "def") in fragments


def test_pygments_highlighter_unknown_language(highlighter):
    """Unknown tags raise UnknownLanguageError."""
    with pytest.raises(UnknownLanguageError):
        highlighter.highlight("no-such-language", "x")


def test_pygments_highlighter_stylesheet(highlighter):
    """The stylesheet is scoped to code blocks."""
    assert ".code-block .k" in highlighter.stylesheet()


def test_highlight_code_blocks_numbers_lines(parse, diagnostics, highlighter):
    """Every line becomes a numbered code_line, starting at 1."""
    doc = parse("```python\nx = 1\ny = 2\nprint(x + y)\n```\n")
    highlight_code_blocks(doc, highlighter, diagnostics)
    code = doc.children[0]
    assert code.meta["highlighted"] is True
    assert code.meta["line_count"] == 3
    assert [line.meta["number"] for line in code.children] == [1, 2, 3]
    assert all(line.type == NodeType.code_line for line in code.children)
    assert code.children[2].plain_text() == "print(x + y)"
    assert len(diagnostics) == 0


def test_highlight_code_blocks_unknown_language_falls_back(parse, diagnostics, highlighter):
    """An unknown language renders plain, still line-numbered, with a warning."""
    doc = parse("```klingon\nqapla'\nbatlh\n```\n")
    highlight_code_blocks(doc, highlighter, diagnostics)
    code = doc.children[0]
    assert code.meta["highlighted"] is False
    assert [line.plain_text() for line in code.children] == ["qapla'", "batlh"]
    assert [line.meta["number"] for line in code.children] == [1, 2]
    assert all(not span.attrs for line in code.children for span in line.children)
    assert diagnostics.of_kind(DiagnosticKind.unknown_language)


def test_highlight_code_blocks_without_language(parse, diagnostics, highlighter):
    """Untagged blocks are plain and produce no warning."""
    doc = parse("```\nplain\n```\n")
    highlight_code_blocks(doc, highlighter, diagnostics)
    assert doc.children[0].meta["highlighted"] is False
    assert doc.children[0].meta["line_count"] == 1
    assert len(diagnostics) == 0


def test_highlight_code_blocks_highlighter_error(parse, diagnostics):
    """A failing highlighter never aborts the build."""
    doc = parse("```python\nx = 1\n```\n")
    highlight_code_blocks(doc, ExplodingHighlighter(), diagnostics)
    code = doc.children[0]
    assert code.meta["highlighted"] is False
    assert code.children[0].plain_text() == "x = 1"
    [warning] = diagnostics.of_kind(DiagnosticKind.highlighter_error)
    assert "boom" in warning.message
