"""Task-list checkbox markers and captioned figures"""

from mdforge.core.diagnostics import Diagnostics
from mdforge.core.models import Document, Node, NodeType, text


TASK_MARKERS: dict[str, str] = {
    "x": "check",
    "X": "cross",
    "+": "plus",
    "-": "minus",
    " ": "unchecked",
}


def _first_paragraph(item: Node) -> Node:
    if item.children and item.children[0].type == NodeType.paragraph:
        return item.children[0]
    para = Node(NodeType.paragraph)
    item.children.insert(0, para)
    return para


def _render_task(item: Node) -> None:
    marker = item.meta.pop("task_marker", None)
    prefix = item.meta.pop("task_prefix", "")
    if marker is None:
        return
    para = _first_paragraph(item)
    task = TASK_MARKERS.get(marker)
    if task is None:
        # Not a task marker after all; give the text back.
        para.children.insert(0, text(prefix))
        return
    item.meta["task"] = task
    para.children.insert(0, Node(NodeType.task_marker, meta={"task": task}))


def _figure(image: Node) -> Node:
    caption = Node(NodeType.figcaption, children=[text(image.attrs["title"])])
    return Node(NodeType.figure, children=[image, caption])


def _wrap_figures(container: Node) -> None:
    children: list[Node] = []
    for child in container.children:
        if child.type == NodeType.image and child.attrs.get("title"):
            children.append(_figure(child))
            continue
        _wrap_figures(child)
        children.append(child)
    container.children = children


def _is_lone_figure(node: Node) -> bool:
    return node.type == NodeType.paragraph and len(node.children) == 1 \
        and node.children[0].type == NodeType.figure


def _unwrap_figures(container: Node) -> None:
    container.children = [
        child.children[0] if _is_lone_figure(child) else child for child in container.children
    ]
    for child in container.children:
        _unwrap_figures(child)


def render_tasks_and_figures(document: Document, diagnostics: Diagnostics) -> None:
    """Insert task markers into checkbox list items and turn titled images into figures."""
    for node in list(document.walk()):
        if node.type == NodeType.list_item:
            _render_task(node)

    root = Node(NodeType.paragraph, children=document.children)
    _wrap_figures(root)
    _unwrap_figures(root)
    document.children = root.children
    for definition in document.footnotes:
        _wrap_figures(definition)
        _unwrap_figures(definition)
