"""Unit tests for core/passes/tasks.py"""

import pytest

from mdforge.core.models import NodeType
from mdforge.core.passes.tasks import TASK_MARKERS, render_tasks_and_figures


@pytest.mark.parametrize("marker,task", [
    ("x", "check"),
    ("X", "cross"),
    ("+", "plus"),
    ("-", "minus"),
    (" ", "unchecked"),
])
def test_task_markers(parse, diagnostics, marker, task):
    """Each supported marker maps to its own task kind."""
    doc = parse(f"- [{marker}] item\n")
    render_tasks_and_figures(doc, diagnostics)
    item = doc.children[0].children[0]
    assert item.meta["task"] == task
    para = item.children[0]
    assert para.children[0].type == NodeType.task_marker
    assert para.children[0].meta["task"] == task
    assert para.plain_text() == "item"


def test_task_markers_table():
    """The marker table covers exactly the supported characters."""
    assert set(TASK_MARKERS) == {"x", "X", "+", "-", " "}


def test_unsupported_marker_stays_text(parse, diagnostics):
    """An unknown marker leaves an ordinary item with its literal text."""
    doc = parse("- [c] item\n")
    render_tasks_and_figures(doc, diagnostics)
    item = doc.children[0].children[0]
    assert "task" not in item.meta
    assert item.plain_text() == "[c] item"
    assert all(n.type != NodeType.task_marker for n in item.walk())


def test_plain_list_item_untouched(parse, diagnostics):
    """Items without a marker get no task annotation."""
    doc = parse("- just text\n")
    render_tasks_and_figures(doc, diagnostics)
    item = doc.children[0].children[0]
    assert "task" not in item.meta
    assert item.plain_text() == "just text"


def test_titled_image_becomes_figure(parse, diagnostics):
    """A lone titled image replaces its paragraph with figure(image, figcaption)."""
    doc = parse('![A cat](cat.png "Our cat")\n')
    render_tasks_and_figures(doc, diagnostics)
    figure = doc.children[0]
    assert figure.type == NodeType.figure
    image, caption = figure.children
    assert image.type == NodeType.image
    assert caption.type == NodeType.figcaption
    assert caption.plain_text() == "Our cat"


def test_untitled_image_stays_inline(parse, diagnostics):
    """Images without a title are left as ordinary inline images."""
    doc = parse("![A cat](cat.png)\n")
    render_tasks_and_figures(doc, diagnostics)
    para = doc.children[0]
    assert para.type == NodeType.paragraph
    assert para.children[0].type == NodeType.image


def test_figure_inside_text_keeps_paragraph(parse, diagnostics):
    """A titled image mixed with text becomes a figure inside the paragraph."""
    doc = parse('Look: ![A cat](cat.png "Our cat")\n')
    render_tasks_and_figures(doc, diagnostics)
    para = doc.children[0]
    assert para.type == NodeType.paragraph
    assert para.children[-1].type == NodeType.figure
