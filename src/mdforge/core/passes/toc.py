"""Hierarchical heading numbering, anchor allocation and the nested table of contents"""

from mdforge.core.diagnostics import Diagnostics
from mdforge.core.models import Document, Node, NodeType, TocEntry
from mdforge.core.utils.slug import slugify


MAX_LEVEL = 6
ANCHOR_PREFIX = "heading__"


class HeadingNumberer:
    """Counter chain: one counter per level, deeper counters reset by shallower headings."""

    def __init__(self) -> None:
        self.counters = [0] * MAX_LEVEL

    def next(self, level: int) -> str:
        level = max(1, min(MAX_LEVEL, level))
        self.counters[level - 1] += 1
        for i in range(level, MAX_LEVEL):
            self.counters[i] = 0
        return ".".join(str(n) for n in self.counters[:level])


class AnchorAllocator:
    """Hand out document-unique anchor ids; duplicates get a numeric suffix."""

    def __init__(self) -> None:
        self.used: set[str] = set()

    def allocate(self, title: str, level: int, ordinal: int) -> str:
        slug = slugify(title)
        base = f"{ANCHOR_PREFIX}{slug}" if slug else f"{ANCHOR_PREFIX}h{level}-{ordinal}"
        anchor, n = base, 0
        while anchor in self.used:
            n += 1
            anchor = f"{base}-{n}"
        self.used.add(anchor)
        return anchor


def _headings(nodes: list[Node]):
    """Yield heading nodes in document order, skipping footnote definitions."""
    for node in nodes:
        if node.type == NodeType.footnote_block:
            continue
        if node.type == NodeType.heading:
            yield node
        else:
            yield from _headings(node.children)


def build_toc(document: Document, diagnostics: Diagnostics) -> list[TocEntry]:
    """Number and anchor every heading; return (and store) the nested TOC."""
    numberer = HeadingNumberer()
    anchors = AnchorAllocator()
    roots: list[TocEntry] = []
    stack: list[TocEntry] = []

    for ordinal, heading in enumerate(_headings(document.children), start=1):
        level = heading.meta.get("level", 1)
        title = heading.plain_text().strip()
        number = numberer.next(level)
        anchor = anchors.allocate(title, level, ordinal)

        heading.meta["number"] = number
        heading.attrs["id"] = anchor

        entry = TocEntry(level=level, number=number, anchor=anchor, title=title)
        while stack and stack[-1].level >= level:
            stack.pop()
        (stack[-1].children if stack else roots).append(entry)
        stack.append(entry)

    document.toc = roots
    return roots


def flatten_toc(entries: list[TocEntry]) -> list[TocEntry]:
    """Depth-first list of every TOC entry."""
    flat: list[TocEntry] = []
    for entry in entries:
        flat.append(entry)
        flat.extend(flatten_toc(entry.children))
    return flat
