"""Footnote linking: display indices in first-reference order and per-occurrence back-references

Pass 1 walks the body, then the definitions, assigning each referenced key its
display index the first time it is seen and an anchor id to every occurrence.
Pass 2 appends one back-reference per occurrence to each definition, orders the
definitions by index and moves them to `Document.footnotes`. Definitions that are
never referenced are dropped; references to unknown keys stay literal text.
"""

import re
from typing import Optional

from mdforge.core.diagnostics import DiagnosticKind, Diagnostics
from mdforge.core.models import Document, FootnoteEntry, Node, NodeType, text


STAGE = "footnotes"
UNRESOLVED_RE = re.compile(r"\[\^([^\]\s]+)\]")
SKIP_TYPES = {NodeType.code_inline, NodeType.code_block, NodeType.html_inline, NodeType.html_block}


def definition_id(index: int) -> str:
    """Anchor of the definition shown as `index`."""
    return f"fn-{index}"


def reference_id(index: int, occurrence: int) -> str:
    """Anchor of the n-th (0-based) reference to the footnote shown as `index`."""
    base = f"fnref-{index}"
    return base if occurrence == 0 else f"{base}-{occurrence}"


def _pop_footnote_block(document: Document) -> Optional[Node]:
    for i, node in enumerate(document.children):
        if node.type == NodeType.footnote_block:
            return document.children.pop(i)
    return None


def _resolve_refs(
    container: Node,
    definitions: dict[str, Node],
    table: dict[str, FootnoteEntry],
    diagnostics: Diagnostics,
) -> None:
    children: list[Node] = []
    for child in container.children:
        if child.type == NodeType.footnote_ref:
            key = child.meta.get("key", "")
            if key not in definitions:
                diagnostics.warn(DiagnosticKind.unresolved_footnote, STAGE,
                                 f"Footnote reference [^{key}] has no definition")
                children.append(text(f"[^{key}]"))
                continue
            entry = table.get(key)
            if entry is None:
                entry = table[key] = FootnoteEntry(key=key, index=len(table) + 1, definition=definitions[key])
            occurrence = reference_id(entry.index, len(entry.occurrences))
            entry.occurrences.append(occurrence)
            child.attrs["id"] = occurrence
            child.attrs["href"] = f"#{definition_id(entry.index)}"
            child.meta["index"] = entry.index
            child.meta["occurrence"] = len(entry.occurrences)
        elif child.type == NodeType.text:
            for m in UNRESOLVED_RE.finditer(child.content):
                diagnostics.warn(DiagnosticKind.unresolved_footnote, STAGE,
                                 f"Footnote reference [^{m.group(1)}] has no definition")
        elif child.type not in SKIP_TYPES:
            _resolve_refs(child, definitions, table, diagnostics)
        children.append(child)
    container.children = children


def _append_backrefs(definition: Node, entry: FootnoteEntry) -> None:
    backrefs = [
        Node(NodeType.footnote_backref, attrs={"href": f"#{occurrence}"}, meta={"occurrence": n})
        for n, occurrence in enumerate(entry.occurrences, start=1)
    ]
    last = definition.children[-1] if definition.children else None
    target = last if last is not None and last.type == NodeType.paragraph else definition
    target.children.extend(backrefs)


def link_footnotes(document: Document, diagnostics: Diagnostics) -> dict[str, FootnoteEntry]:
    """Resolve references against definitions; returns the footnote table keyed by label."""
    block = _pop_footnote_block(document)
    definitions: dict[str, Node] = {}
    for definition in (block.children if block else []):
        definitions.setdefault(definition.meta.get("key", ""), definition)

    table: dict[str, FootnoteEntry] = {}
    body = Node(NodeType.paragraph, children=document.children)
    _resolve_refs(body, definitions, table, diagnostics)
    document.children = body.children
    # References inside definitions, in display order; new keys found here extend the table.
    resolved: set[str] = set()
    while len(resolved) < len(table):
        for key in [k for k in table if k not in resolved]:
            resolved.add(key)
            _resolve_refs(definitions[key], definitions, table, diagnostics)

    for entry in table.values():
        entry.definition.attrs["id"] = definition_id(entry.index)
        entry.definition.meta["index"] = entry.index
        _append_backrefs(entry.definition, entry)

    for key in definitions:
        if key not in table:
            diagnostics.warn(DiagnosticKind.unreferenced_footnote, STAGE,
                             f"Footnote [^{key}] is never referenced; omitted")
    for key in document.unreferenced_footnotes:
        if key not in definitions:
            diagnostics.warn(DiagnosticKind.unreferenced_footnote, STAGE,
                             f"Footnote [^{key}] is never referenced; omitted")

    document.footnotes = [entry.definition for entry in sorted(table.values(), key=lambda e: e.index)]
    return table
