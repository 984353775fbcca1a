"""HTML serialization of the enriched document tree

One method per node type, looked up by name the way markdown-it's RendererHTML
dispatches token rules. Every string leaves here as escaped `Markup`, so the
page template can embed it without escaping twice.
"""

import inspect
import logging
from typing import Callable

from markupsafe import Markup, escape

from mdforge.core.models import Document, Node, TocEntry


logger = logging.getLogger(__name__)

TASK_SYMBOLS = {
    "check":     "✓",
    "cross":     "✗",
    "plus":      "+",
    "minus":     "−",
    "unchecked": "☐",
}
EXTERNAL_SYMBOL = "↗"
BACKREF_SYMBOL = "↩"
HEADING_ANCHOR_SYMBOL = "§"


def _attrs(attrs: dict[str, str]) -> Markup:
    return Markup("").join(Markup(' {}="{}"').format(k, v) for k, v in attrs.items() if v is not None)


def _tag(name: str, inner: Markup, attrs: dict[str, str] = None) -> Markup:
    return Markup("<{0}{1}>{2}</{0}>").format(Markup(name), _attrs(attrs or {}), inner)


class HtmlRenderer:
    """Render Node trees to HTML. Subclass and override a rule to change one node type."""

    def __init__(self) -> None:
        self.rules: dict[str, Callable[[Node], Markup]] = {
            k: v for k, v in inspect.getmembers(self, predicate=inspect.ismethod)
            if not (k.startswith("render") or k.startswith("_"))
        }

    def render(self, nodes: list[Node]) -> Markup:
        return Markup("").join(self.render_node(node) for node in nodes)

    def render_node(self, node: Node) -> Markup:
        rule = self.rules.get(node.type.value)
        if rule is None:
            logger.debug("No render rule for %s; rendering children", node.type.value)
            return self.render(node.children)
        return rule(node)

    def _inner(self, node: Node) -> Markup:
        return self.render(node.children)

    def _wrap(self, name: str, node: Node, attrs: dict[str, str] = None) -> Markup:
        return _tag(name, self._inner(node), attrs)

    # --- blocks ---

    def heading(self, node: Node) -> Markup:
        level = node.meta.get("level", 1)
        anchor = node.attrs.get("id", "")
        inner = Markup('<a class="heading-anchor" href="#{0}" aria-hidden="true">{1}</a>').format(
            anchor, HEADING_ANCHOR_SYMBOL)
        if node.meta.get("number"):
            inner += Markup(' <span class="heading-number">{}</span> ').format(node.meta["number"])
        return _tag(f"h{level}", inner + self._inner(node), {"id": anchor}) + Markup("\n")

    def paragraph(self, node: Node) -> Markup:
        if node.meta.get("tight"):
            return self._inner(node)
        return self._wrap("p", node) + Markup("\n")

    def bullet_list(self, node: Node) -> Markup:
        return _tag("ul", Markup("\n") + self._inner(node)) + Markup("\n")

    def ordered_list(self, node: Node) -> Markup:
        return _tag("ol", Markup("\n") + self._inner(node), node.attrs) + Markup("\n")

    def list_item(self, node: Node) -> Markup:
        task = node.meta.get("task")
        attrs = {"class": f"task-item task-{task}"} if task else {}
        return self._wrap("li", node, attrs) + Markup("\n")

    def blockquote(self, node: Node) -> Markup:
        return _tag("blockquote", Markup("\n") + self._inner(node)) + Markup("\n")

    def hr(self, node: Node) -> Markup:
        return Markup("<hr>\n")

    def html_block(self, node: Node) -> Markup:
        return Markup(node.content)

    def table(self, node: Node) -> Markup:
        return _tag("table", Markup("\n") + self._inner(node)) + Markup("\n")

    def thead(self, node: Node) -> Markup:
        return _tag("thead", Markup("\n") + self._inner(node)) + Markup("\n")

    def tbody(self, node: Node) -> Markup:
        return _tag("tbody", Markup("\n") + self._inner(node)) + Markup("\n")

    def tr(self, node: Node) -> Markup:
        return _tag("tr", Markup("\n") + self._inner(node)) + Markup("\n")

    def th(self, node: Node) -> Markup:
        return self._wrap("th", node, node.attrs) + Markup("\n")

    def td(self, node: Node) -> Markup:
        return self._wrap("td", node, node.attrs) + Markup("\n")

    def code_block(self, node: Node) -> Markup:
        attrs = {"class": "code-block"}
        if node.meta.get("language"):
            attrs["data-language"] = node.meta["language"]
        return _tag("pre", _tag("code", self._inner(node)), attrs) + Markup("\n")

    def code_line(self, node: Node) -> Markup:
        number = Markup('<span class="line-number" aria-hidden="true">{}</span>').format(node.meta.get("number", ""))
        content = _tag("span", self._inner(node), {"class": "line-content"})
        return _tag("span", number + content, {"class": "code-line"}) + Markup("\n")

    def code_span(self, node: Node) -> Markup:
        if not node.attrs:
            return escape(node.content)
        return _tag("span", escape(node.content), node.attrs)

    def figure(self, node: Node) -> Markup:
        return self._wrap("figure", node) + Markup("\n")

    def figcaption(self, node: Node) -> Markup:
        return self._wrap("figcaption", node)

    def footnote_def(self, node: Node) -> Markup:
        return self._wrap("li", node, {"id": node.attrs.get("id"), "class": "footnote-item"}) + Markup("\n")

    def dl(self, node: Node) -> Markup:
        return _tag("dl", Markup("\n") + self._inner(node)) + Markup("\n")

    def dt(self, node: Node) -> Markup:
        return self._wrap("dt", node) + Markup("\n")

    def dd(self, node: Node) -> Markup:
        return self._wrap("dd", node) + Markup("\n")

    # --- inline ---

    def text(self, node: Node) -> Markup:
        return escape(node.content)

    def softbreak(self, node: Node) -> Markup:
        return Markup("\n")

    def hardbreak(self, node: Node) -> Markup:
        return Markup("<br>\n")

    def code_inline(self, node: Node) -> Markup:
        return _tag("code", escape(node.content))

    def html_inline(self, node: Node) -> Markup:
        return Markup(node.content)

    def em(self, node: Node) -> Markup:
        return self._wrap("em", node)

    def strong(self, node: Node) -> Markup:
        return self._wrap("strong", node)

    def strikethrough(self, node: Node) -> Markup:
        return self._wrap("s", node)

    def subscript(self, node: Node) -> Markup:
        return self._wrap("sub", node)

    def superscript(self, node: Node) -> Markup:
        return self._wrap("sup", node)

    def highlight(self, node: Node) -> Markup:
        return self._wrap("mark", node)

    def insert(self, node: Node) -> Markup:
        return self._wrap("ins", node)

    def link(self, node: Node) -> Markup:
        attrs = dict(node.attrs)
        if node.meta.get("link_kind"):
            attrs["class"] = f"href-{node.meta['link_kind'].value}"
        return self._wrap("a", node, attrs)

    def image(self, node: Node) -> Markup:
        return Markup("<img{}>").format(_attrs(node.attrs))

    def emoji(self, node: Node) -> Markup:
        title = f":{node.meta['shortcode']}:" if node.meta.get("shortcode") else None
        return _tag("span", escape(node.content), {"class": "emoji", "role": "img", "title": title})

    def external_marker(self, node: Node) -> Markup:
        return Markup('<span class="href-external-marker" aria-hidden="true">{}</span>').format(EXTERNAL_SYMBOL)

    def task_marker(self, node: Node) -> Markup:
        task = node.meta.get("task", "unchecked")
        return Markup('<span class="task-marker task-{0}" aria-hidden="true">{1}</span> ').format(
            task, TASK_SYMBOLS.get(task, ""))

    def footnote_ref(self, node: Node) -> Markup:
        link = _tag("a", Markup("[{}]").format(node.meta.get("index", "?")),
                    {"href": node.attrs.get("href"), "id": node.attrs.get("id")})
        return _tag("sup", link, {"class": "footnote-ref"})

    def footnote_backref(self, node: Node) -> Markup:
        occurrence = node.meta.get("occurrence", 1)
        label = Markup(BACKREF_SYMBOL)
        if occurrence > 1:
            label += Markup("<sup>{}</sup>").format(occurrence)
        return Markup(" ") + _tag("a", label, {"href": node.attrs.get("href"), "class": "footnote-backref"})

    # --- document parts ---

    def render_toc(self, entries: list[TocEntry]) -> Markup:
        if not entries:
            return Markup("")
        items = Markup("").join(
            Markup('<li><a href="#{0}"><span class="toc-number">{1}</span> {2}</a>{3}</li>\n').format(
                entry.anchor, entry.number, entry.title, self.render_toc(entry.children))
            for entry in entries
        )
        return _tag("ol", Markup("\n") + items, {"class": "toc-list"})

    def render_footnotes(self, document: Document) -> Markup:
        if not document.footnotes:
            return Markup("")
        return _tag("ol", Markup("\n") + self.render(document.footnotes), {"class": "footnotes-list"})


def serialize(document: Document, renderer: HtmlRenderer = None) -> str:
    """Render the document body followed by its footnote list."""
    renderer = renderer or HtmlRenderer()
    body = renderer.render(document.children)
    footnotes = renderer.render_footnotes(document)
    if footnotes:
        body += _tag("section", Markup("\n") + footnotes, {"class": "footnotes"}) + Markup("\n")
    return str(body)
