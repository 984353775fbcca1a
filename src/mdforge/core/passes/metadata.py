"""Word count, read time and page metadata assembled from front-matter and the author registry"""

import logging
import math
import re
from datetime import date
from typing import Optional

from mdforge.core.diagnostics import DiagnosticKind, Diagnostics
from mdforge.core.models import Author, Document, FrontMatter, Metadata, Node, NodeType
from mdforge.crud.authors import AuthorRegistry


logger = logging.getLogger(__name__)

STAGE = "metadata"
WORDS_PER_MINUTE = 120
WORD_RE = re.compile(r"\w[\w'’-]*")

COUNTED_TYPES = {NodeType.text, NodeType.code_inline}
UNCOUNTED_TYPES = {NodeType.code_block, NodeType.footnote_backref, NodeType.html_block, NodeType.html_inline}


def _words(node: Node) -> int:
    if node.type in UNCOUNTED_TYPES:
        return 0
    if node.type in COUNTED_TYPES:
        return len(WORD_RE.findall(node.content))
    return sum(_words(child) for child in node.children)


def count_words(document: Document) -> int:
    """Words of visible prose, footnotes included; code blocks and punctuation excluded."""
    return sum(_words(node) for node in [*document.children, *document.footnotes])


def read_time(words: int, wpm: int = WORDS_PER_MINUTE) -> int:
    """Whole minutes to read `words`, rounded up and never below one."""
    return max(1, math.ceil(words / wpm))


def _fallback_title(document: Document) -> str:
    if document.source_path is not None:
        return document.source_path.stem
    for node in document.children:
        if node.type == NodeType.heading:
            return node.plain_text().strip()
    return ""


def _resolve_author(
    key: str,
    front_matter: Optional[FrontMatter],
    registry: Optional[AuthorRegistry],
    diagnostics: Diagnostics,
) -> Optional[Author]:
    if not key:
        return None
    found = registry.lookup(key) if registry is not None else None
    if found is None:
        diagnostics.warn(DiagnosticKind.unknown_author, STAGE, f"Author {key!r} not found in registry")
        return None
    fallback = front_matter.avatar if front_matter else ""
    return found.model_copy(update={"avatar": found.avatar or fallback})


def assemble_metadata(
    document: Document,
    front_matter: Optional[FrontMatter],
    registry: Optional[AuthorRegistry],
    diagnostics: Diagnostics,
    words_per_minute: int = WORDS_PER_MINUTE,
    today: Optional[date] = None,
) -> Metadata:
    """Build (and store) the document's Metadata; an unknown author is a warning, not an error."""
    words = count_words(document)
    key = front_matter.author if front_matter else ""
    author = _resolve_author(key, front_matter, registry, diagnostics)

    metadata = Metadata(
        title=front_matter.title if front_matter else _fallback_title(document),
        author_key=key,
        author=author,
        tags=list(front_matter.tags) if front_matter else [],
        avatar=(author.avatar if author else "") or (front_matter.avatar if front_matter else ""),
        word_count=words,
        read_time=read_time(words, words_per_minute),
        date=today or date.today(),
    )
    logger.info("Metadata: %d words, %d min read", words, metadata.read_time)
    document.metadata = metadata
    return metadata
