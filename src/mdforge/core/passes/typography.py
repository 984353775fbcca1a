"""Typographic replacement over plain text runs: symbols, dashes, ellipsis and curly quotes"""

import re

from mdforge.core.diagnostics import Diagnostics
from mdforge.core.models import Document, Node, NodeType, text


# Ordered (pattern, replacement) table. No replacement contains any pattern, so a
# second run finds nothing left to replace.
REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("(c)",  "©"),
    ("(tm)", "™"),
    ("(r)",  "®"),
    ("(p)",  "℗"),
    ("+-",   "±"),
    ("...",  "…"),
    ("---",  "—"),
    ("--",   "–"),
)

_LOOKUP = {pattern.lower(): repl for pattern, repl in REPLACEMENTS}
REPLACEMENT_RE = re.compile(
    "|".join(re.escape(p) for p, _ in sorted(REPLACEMENTS, key=lambda r: len(r[0]), reverse=True)),
    re.IGNORECASE,
)
QUOTE_RE = re.compile(r"[\"']")

OPENING_CONTEXT = set("([{<“‘–—-/")
QUOTES = {'"': ("“", "”"), "'": ("‘", "’")}

BLOCK_TYPES = {
    NodeType.paragraph, NodeType.heading, NodeType.list_item, NodeType.blockquote,
    NodeType.bullet_list, NodeType.ordered_list, NodeType.table, NodeType.thead, NodeType.tbody,
    NodeType.tr, NodeType.th, NodeType.td, NodeType.footnote_block, NodeType.footnote_def,
    NodeType.dl, NodeType.dt, NodeType.dd,
}

# Containers whose text is never typeset.
SKIP_TYPES = {
    NodeType.code_inline, NodeType.code_block, NodeType.image,
    NodeType.html_inline, NodeType.html_block, NodeType.emoji,
}


def _quote(match: re.Match, source: str, prev: str) -> str:
    before = source[match.start() - 1] if match.start() > 0 else prev
    opening, closing = QUOTES[match.group(0)]
    if not before or before.isspace() or before in OPENING_CONTEXT:
        return opening
    return closing


def replace_typography(content: str, prev: str = "") -> str:
    """Return content with typographic substitutions applied.

    `prev` is the character preceding this run in its paragraph, used to pick
    opening or closing quotes at the start of the run.
    """
    replaced = REPLACEMENT_RE.sub(lambda m: _LOOKUP[m.group(0).lower()], content)
    return QUOTE_RE.sub(lambda m: _quote(m, replaced, prev), replaced)


def _typeset(container: Node, prev: str) -> str:
    """Rewrite text children of container; returns the last character seen."""
    children: list[Node] = []
    for child in container.children:
        if child.type == NodeType.text:
            new = replace_typography(child.content, prev)
            children.append(child if new == child.content else text(new))
            prev = new[-1:] or prev
            continue
        if child.type in (NodeType.softbreak, NodeType.hardbreak):
            prev = " "
        elif child.type in SKIP_TYPES or child.is_autolink():
            prev = child.plain_text()[-1:] or prev
        elif child.type in BLOCK_TYPES:
            _typeset(child, "")
            prev = ""
        else:
            prev = _typeset(child, prev)
        children.append(child)
    container.children = children
    return prev


def apply_typography(document: Document, diagnostics: Diagnostics) -> None:
    """Typeset all text runs; quote context restarts at each block."""
    for node in [*document.children, *document.footnotes]:
        if node.type not in SKIP_TYPES:
            _typeset(node, "")
