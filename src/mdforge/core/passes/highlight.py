"""Code block highlighting through Pygments, with line-number decoration and plain fallback"""

import logging
from typing import Iterable, Optional, Protocol

from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.token import STANDARD_TYPES
from pygments.util import ClassNotFound

from mdforge.core.diagnostics import DiagnosticKind, Diagnostics
from mdforge.core.models import Document, Node, NodeType


logger = logging.getLogger(__name__)

STAGE = "highlight"
CODE_CSS_SELECTOR = ".code-block"

Fragment = tuple[str, str]      # (css class, text)


class UnknownLanguageError(LookupError):
    """The highlighter has no lexer for the requested language tag."""


class Highlighter(Protocol):
    def highlight(self, language: str, code: str) -> Iterable[Fragment]:  # pragma: no cover - structural protocol
        """Return styled fragments for code; raise UnknownLanguageError for unknown tags."""


def _css_class(ttype) -> str:
    """Short Pygments class name (e.g. 'k' for Keyword), falling back to the nearest parent type."""
    while ttype not in STANDARD_TYPES:
        ttype = ttype.parent
    return STANDARD_TYPES[ttype]


class PygmentsHighlighter:
    """Highlighter backed by Pygments lexers; emits classes matching HtmlFormatter's CSS."""

    def __init__(self, style: str = "monokai") -> None:
        self.style = style

    def highlight(self, language: str, code: str) -> list[Fragment]:
        try:
            lexer = get_lexer_by_name(language, stripnl=False, ensurenl=False)
        except ClassNotFound as e:
            raise UnknownLanguageError(language) from e
        return [(_css_class(ttype), value) for ttype, value in lexer.get_tokens(code)]

    def stylesheet(self, selector: str = CODE_CSS_SELECTOR) -> str:
        return HtmlFormatter(style=self.style).get_style_defs(selector)


def split_lines(fragments: Iterable[Fragment]) -> list[list[Fragment]]:
    """Split fragments on literal newlines. A trailing newline closes the last line
    without opening a new one; an empty line before it is still a line."""
    lines: list[list[Fragment]] = []
    current: list[Fragment] = []
    for css, value in fragments:
        for i, part in enumerate(value.split("\n")):
            if i > 0:
                lines.append(current)
                current = []
            if part:
                current.append((css, part))
    if current:
        lines.append(current)
    return lines


def _line_nodes(lines: list[list[Fragment]]) -> list[Node]:
    return [
        Node(
            NodeType.code_line,
            meta={"number": number},
            children=[
                Node(NodeType.code_span, content=value, attrs={"class": css} if css else {})
                for css, value in line
            ],
        )
        for number, line in enumerate(lines, start=1)
    ]


def _highlight(node: Node, highlighter: Highlighter, diagnostics: Diagnostics) -> Optional[list[Fragment]]:
    language = node.meta.get("language")
    if not language:
        return None
    try:
        return list(highlighter.highlight(language, node.content))
    except UnknownLanguageError:
        diagnostics.warn(DiagnosticKind.unknown_language, STAGE,
                         f"Unknown code block language {language!r}; rendered without highlighting")
    except Exception as e:
        logger.debug("Highlighter failure", exc_info=True)
        diagnostics.warn(DiagnosticKind.highlighter_error, STAGE,
                         f"Highlighting {language!r} failed ({e}); rendered without highlighting")
    return None


def highlight_code_blocks(document: Document, highlighter: Highlighter, diagnostics: Diagnostics) -> None:
    """Replace each code block's content with numbered lines of styled spans."""
    for node in list(document.walk()):
        if node.type != NodeType.code_block:
            continue
        fragments = _highlight(node, highlighter, diagnostics)
        node.meta["highlighted"] = fragments is not None
        lines = split_lines(fragments if fragments is not None else [("", node.content)])
        node.children = _line_nodes(lines)
        node.meta["line_count"] = len(lines)
