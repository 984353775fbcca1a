"""Inline extensions: subscript (~x~), superscript (^x^), highlight (==x==), insert (++x++) and emoticon/shortcode emoji

Text runs are rewritten into small subtrees. Emoticons are matched first as whole
whitespace-bounded tokens, then `:shortcode:` names, then delimiter pairs left to
right. A pair's content is scanned again for the other delimiter kinds only, so
`==~x~==` becomes highlight(subscript(x)). Superscript content may not contain
whitespace. Unpaired delimiters stay literal text, and `<url>` autolinks keep
their URL label untouched.
"""

import re
from typing import Iterator, Optional, Union

from mdforge.core.diagnostics import DiagnosticKind, Diagnostics
from mdforge.core.models import Document, Node, NodeType, text


STAGE = "extensions"

EMOJI: dict[str, str] = {
    "angry":            "\U0001F620",
    "blush":            "\U0001F60A",
    "broken_heart":     "\U0001F494",
    "confused":         "\U0001F615",
    "cry":              "\U0001F622",
    "frowning":         "\U0001F626",
    "heart":            "❤️",
    "imp":              "\U0001F47F",
    "innocent":         "\U0001F607",
    "joy":              "\U0001F602",
    "kissing":          "\U0001F617",
    "laughing":         "\U0001F606",
    "neutral_face":     "\U0001F610",
    "open_mouth":       "\U0001F62E",
    "rage":             "\U0001F621",
    "smile":            "\U0001F604",
    "smiley":           "\U0001F603",
    "smiling_imp":      "\U0001F608",
    "sob":              "\U0001F62D",
    "stuck_out_tongue": "\U0001F61B",
    "sunglasses":       "\U0001F60E",
    "sweat":            "\U0001F613",
    "sweat_smile":      "\U0001F605",
    "unamused":         "\U0001F612",
    "wink":             "\U0001F609",
}

EMOTICONS: dict[str, str] = {
    ">:(": "angry", ">:-(": "angry",
    ':")': "blush", ':-")': "blush",
    "</3": "broken_heart", "<\\3": "broken_heart",
    ":/": "confused", ":-/": "confused",
    ":'(": "cry", ":'-(": "cry", ":,(": "cry", ":,-(": "cry",
    ":(": "frowning", ":-(": "frowning",
    "<3": "heart",
    "]:(": "imp", "]:-(": "imp",
    "o:)": "innocent", "O:)": "innocent", "o:-)": "innocent", "O:-)": "innocent",
    "0:)": "innocent", "0:-)": "innocent",
    ":')": "joy", ":'-)": "joy", ":,)": "joy", ":,-)": "joy",
    ":'D": "joy", ":'-D": "joy", ":,D": "joy", ":,-D": "joy",
    ":*": "kissing", ":-*": "kissing",
    "x-)": "laughing", "X-)": "laughing",
    ":|": "neutral_face", ":-|": "neutral_face",
    ":o": "open_mouth", ":-o": "open_mouth", ":O": "open_mouth", ":-O": "open_mouth",
    ":@": "rage", ":-@": "rage",
    ":D": "smile", ":-D": "smile",
    ":)": "smiley", ":-)": "smiley",
    "]:)": "smiling_imp", "]:-)": "smiling_imp",
    ":,'(": "sob", ":,'-(": "sob", ";(": "sob", ";-(": "sob",
    ":P": "stuck_out_tongue", ":-P": "stuck_out_tongue",
    "8-)": "sunglasses", "B-)": "sunglasses",
    ",:(": "sweat", ",:-(": "sweat",
    ",:)": "sweat_smile", ",:-)": "sweat_smile",
    ":s": "unamused", ":-S": "unamused", ":z": "unamused", ":-Z": "unamused",
    ":$": "unamused", ":-$": "unamused",
    ";)": "wink", ";-)": "wink",
}

# Longest alternatives first so `:-)` is never shadowed by `:)`-style prefixes.
EMOTICON_RE = re.compile(
    r"(?<!\S)(" + "|".join(re.escape(e) for e in sorted(EMOTICONS, key=len, reverse=True)) + r")(?!\S)"
)
SHORTCODE_RE = re.compile(r":([a-z_]+):")

# (delimiter, node type); subscript is a single tilde, `~~` belongs to strikethrough.
DELIMITERS: tuple[tuple[str, NodeType], ...] = (
    ("==", NodeType.highlight),
    ("++", NodeType.insert),
    ("~",  NodeType.subscript),
    ("^",  NodeType.superscript),
)
ALL_KINDS = frozenset(kind for _, kind in DELIMITERS)

# Nodes whose text must never be rewritten.
OPAQUE_TYPES = {NodeType.code_inline, NodeType.code_block, NodeType.image, NodeType.html_inline, NodeType.html_block}


def _emoji(name: str, source: str) -> Node:
    return Node(NodeType.emoji, content=EMOJI[name], meta={"shortcode": name, "source": source})


def _split_pattern(segments, pattern, resolve) -> Iterator[Union[str, Node]]:
    """Split str segments on pattern; resolve(match) returns a Node or None to keep the text."""
    for segment in segments:
        if isinstance(segment, Node):
            yield segment
            continue
        pos = 0
        for m in pattern.finditer(segment):
            node = resolve(m)
            if node is None:
                continue
            if m.start() > pos:
                yield segment[pos:m.start()]
            yield node
            pos = m.end()
        if pos < len(segment):
            yield segment[pos:]


def _split_emoji(content: str) -> Iterator[Union[str, Node]]:
    """Emoticons first, then shortcodes in what remains."""
    emoticons = _split_pattern([content], EMOTICON_RE, lambda m: _emoji(EMOTICONS[m.group(1)], m.group(1)))
    return _split_pattern(
        emoticons, SHORTCODE_RE,
        lambda m: _emoji(m.group(1), m.group(0)) if m.group(1) in EMOJI else None,
    )


def _is_lone_tilde(s: str, i: int) -> bool:
    """True if s[i] is a tilde that is not part of a `~~` run."""
    return (
        s[i] == "~"
        and (i == 0 or s[i - 1] != "~")
        and (i + 1 >= len(s) or s[i + 1] != "~")
    )


def _is_delimiter(s: str, i: int, delim: str) -> bool:
    """True if delim starts at s[i]; `~~` runs and the caret of `[^label]` do not count."""
    if not s.startswith(delim, i):
        return False
    if delim == "~":
        return _is_lone_tilde(s, i)
    if delim == "^":
        return i == 0 or s[i - 1] != "["
    return True


def _find_close(s: str, start: int, delim: str) -> int:
    """Index of the closing delimiter at or after start, or -1."""
    i = s.find(delim, start)
    while i != -1 and not _is_delimiter(s, i, delim):
        i = s.find(delim, i + 1)
    return i


def _match_pair(s: str, i: int, kinds: frozenset) -> Optional[tuple[str, NodeType, int]]:
    """Return (delimiter, kind, close_index) for a valid pair opening at i, else None."""
    for delim, kind in DELIMITERS:
        if kind not in kinds or not _is_delimiter(s, i, delim):
            continue
        close = _find_close(s, i + len(delim), delim)
        if close == -1:
            return None
        inner = s[i + len(delim):close]
        if not inner or inner[0].isspace() or inner[-1].isspace():
            return None
        if delim == "^" and any(c.isspace() for c in inner):
            return None
        return delim, kind, close
    return None


def _opening_delimiter(s: str, i: int, kinds: frozenset) -> Optional[str]:
    for delim, kind in DELIMITERS:
        if kind in kinds and _is_delimiter(s, i, delim):
            return delim
    return None


def _split_delimiters(s: str, kinds: frozenset, diagnostics: Optional[Diagnostics]) -> Iterator[Node]:
    """Scan left to right for non-overlapping delimiter pairs; first match wins."""
    start = i = 0
    while i < len(s):
        pair = _match_pair(s, i, kinds)
        if pair is None:
            delim = _opening_delimiter(s, i, kinds)
            if delim is None:
                i += 1
                continue
            if diagnostics is not None:
                diagnostics.warn(DiagnosticKind.unmatched_delimiter, STAGE,
                                 f"Unmatched {delim!r} left as text in {s!r}")
            i += len(delim)
            continue
        delim, kind, close = pair
        if i > start:
            yield text(s[start:i])
        inner = s[i + len(delim):close]
        yield Node(kind, children=list(_split_delimiters(inner, kinds - {kind}, diagnostics)))
        i = start = close + len(delim)
    if start < len(s):
        yield text(s[start:])


def transform_text(content: str, diagnostics: Optional[Diagnostics] = None) -> Iterator[Node]:
    """Lazily yield the replacement nodes for one text run."""
    for segment in _split_emoji(content):
        if isinstance(segment, Node):
            yield segment
        else:
            yield from _split_delimiters(segment, ALL_KINDS, diagnostics)


def _replace_text(node: Node, diagnostics: Diagnostics) -> list[Node]:
    nodes = list(transform_text(node.content, diagnostics))
    if len(nodes) == 1 and nodes[0].type == NodeType.text and nodes[0].content == node.content:
        return [node]
    return nodes


def _rewrite(container: Node, diagnostics: Diagnostics) -> None:
    children: list[Node] = []
    for child in container.children:
        if child.is_autolink():
            children.append(child)
            continue
        if child.type == NodeType.text:
            children.extend(_replace_text(child, diagnostics))
            continue
        if child.type not in OPAQUE_TYPES:
            _rewrite(child, diagnostics)
        children.append(child)
    container.children = children


def apply_extensions(document: Document, diagnostics: Diagnostics) -> None:
    """Rewrite every eligible text run of the document in place."""
    for node in [*document.children, *document.footnotes]:
        if node.type not in OPAQUE_TYPES:
            _rewrite(node, diagnostics)
