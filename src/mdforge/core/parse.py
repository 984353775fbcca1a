"""File discovery, frontmatter extraction, and markdown-it tokenization into a Document tree"""

import logging
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from mdit_py_plugins.deflist import deflist_plugin
from mdit_py_plugins.footnote import footnote_plugin
from pydantic import ValidationError

from mdforge.core.models import Document, FrontMatter, Node, NodeType, text
from mdforge.errors import FrontMatterError, MarkdownParseError


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*\n', re.DOTALL)
TASK_PREFIX_RE = re.compile(r'^\[([^\]\n])\](?:[ \t]+|$)')
MD_EXTENSIONS = {'.md', '.markdown'}

NODE_TYPE_MAP: dict[str, NodeType] = {
    'paragraph':      NodeType.paragraph,
    'heading':        NodeType.heading,
    'bullet_list':    NodeType.bullet_list,
    'ordered_list':   NodeType.ordered_list,
    'list_item':      NodeType.list_item,
    'blockquote':     NodeType.blockquote,
    'hr':             NodeType.hr,
    'table':          NodeType.table,
    'thead':          NodeType.thead,
    'tbody':          NodeType.tbody,
    'tr':             NodeType.tr,
    'th':             NodeType.th,
    'td':             NodeType.td,
    'em':             NodeType.em,
    'strong':         NodeType.strong,
    's':              NodeType.strikethrough,
    'link':           NodeType.link,
    'image':          NodeType.image,
    'text':           NodeType.text,
    'softbreak':      NodeType.softbreak,
    'hardbreak':      NodeType.hardbreak,
    'code_inline':    NodeType.code_inline,
    'html_inline':    NodeType.html_inline,
    'html_block':     NodeType.html_block,
    'fence':          NodeType.code_block,
    'code_block':     NodeType.code_block,
    'footnote_ref':   NodeType.footnote_ref,
    'footnote_block': NodeType.footnote_block,
    'footnote':       NodeType.footnote_def,
    'dl':             NodeType.dl,
    'dt':             NodeType.dt,
    'dd':             NodeType.dd,
}

SKIPPED_TYPES = {'footnote_anchor'}     # back-references are rebuilt by the footnote linker


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name, with footnotes and definition lists enabled."""
    return MarkdownIt(preset, options_update={"linkify": False}).use(footnote_plugin).use(deflist_plugin)


def _strip_frontmatter(text: str) -> tuple[Optional[dict[str, Any]], str]:
    """Return (frontmatter_dict or None, body) with YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if not m:
        return None, text
    try:
        fm = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        raise FrontMatterError(f"Invalid YAML frontmatter: {e}") from e
    if not isinstance(fm, dict):
        raise FrontMatterError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
    return fm, text[m.end():]


def parse_front_matter(raw: str) -> tuple[Optional[FrontMatter], str]:
    """Split raw text into a validated FrontMatter (None if absent) and the markdown body."""
    fm, body = _strip_frontmatter(raw)
    if fm is None:
        return None, body
    try:
        return FrontMatter(**fm), body
    except ValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise FrontMatterError(f"Front-matter missing or invalid keys: {', '.join(missing)}") from e


def discover_files(path: Path) -> list[Path]:
    """Return sorted markdown files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in MD_EXTENSIONS)


def _footnote_key(meta: dict) -> str:
    """Labelled footnotes key by label; inline (^[...]) footnotes by parser id."""
    label = meta.get('label')
    return label if label else f"_{meta.get('id', 0) + 1}"


def _convert_children(src: SyntaxTreeNode) -> list[Node]:
    nodes: list[Node] = []
    for child in src.children:
        nodes.extend(_convert(child))
    return nodes


def _convert(src: SyntaxTreeNode) -> list[Node]:
    """Convert one SyntaxTreeNode into zero or more Document nodes."""
    if src.type == 'inline':
        return _convert_children(src)
    if src.type in SKIPPED_TYPES:
        return []

    node_type = NODE_TYPE_MAP.get(src.type)
    if node_type is None:
        logger.debug("Flattening unsupported token type %r", src.type)
        if src.children:
            return _convert_children(src)
        return [text(src.content)] if src.content else []

    node = Node(node_type)

    if node_type == NodeType.heading:
        node.meta['level'] = int(src.tag[1:])
    elif node_type == NodeType.paragraph and src.hidden:
        node.meta['tight'] = True       # paragraph inside a tight list: no <p> wrapper
    elif node_type == NodeType.ordered_list and src.attrs.get('start') is not None:
        node.attrs['start'] = str(src.attrs['start'])
    elif node_type in (NodeType.th, NodeType.td) and src.attrs.get('style'):
        node.attrs['style'] = str(src.attrs['style'])
    elif node_type == NodeType.link:
        node.attrs['href'] = str(src.attrs.get('href', ''))
        if src.attrs.get('title'):
            node.attrs['title'] = str(src.attrs['title'])
        if src.markup == 'autolink':
            node.meta['autolink'] = True
    elif node_type == NodeType.image:
        node.attrs['src'] = str(src.attrs.get('src', ''))
        node.attrs['alt'] = src.content
        if src.attrs.get('title'):
            node.attrs['title'] = str(src.attrs['title'])
        return [node]                   # alt text lives in attrs, not in child text nodes
    elif node_type == NodeType.code_block:
        info = (src.info or '').strip() if src.type == 'fence' else ''
        node.content = src.content
        node.meta['language'] = info.split()[0] if info else None
        return [node]
    elif node_type in (NodeType.text, NodeType.code_inline, NodeType.html_inline, NodeType.html_block):
        node.content = src.content
        return [node]
    elif node_type in (NodeType.footnote_ref, NodeType.footnote_def):
        node.meta['key'] = _footnote_key(src.meta or {})

    node.children = _convert_children(src)

    if node_type == NodeType.list_item:
        _detect_task_marker(node)
    return [node]


def _detect_task_marker(item: Node) -> None:
    """Record a leading `[c]` checkbox marker on a list item and strip it from the text."""
    if not item.children or item.children[0].type != NodeType.paragraph:
        return
    para = item.children[0]
    if not para.children or para.children[0].type != NodeType.text:
        return
    m = TASK_PREFIX_RE.match(para.children[0].content)
    if not m:
        return
    item.meta['task_marker'] = m.group(1)
    item.meta['task_prefix'] = m.group(0)
    rest = para.children[0].content[m.end():]
    para.children[0:1] = [text(rest)] if rest else []


def parse_markdown(body: str, preset: str = 'gfm-like') -> Document:
    """Parse a markdown body (front-matter already stripped) into a Document tree."""
    env: dict[str, Any] = {}
    try:
        tokens = _make_parser(preset).parse(body, env)
        root = SyntaxTreeNode(tokens)
    except Exception as e:
        raise MarkdownParseError(f"Failed to parse markdown: {e}") from e

    refs = env.get('footnotes', {}).get('refs', {})
    unreferenced = [label[1:] for label, idx in refs.items() if idx == -1]
    return Document(children=_convert_children(root), unreferenced_footnotes=unreferenced)
