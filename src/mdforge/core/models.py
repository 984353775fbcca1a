"""Document tree, TOC, footnote and metadata models shared by every pipeline pass"""

from dataclasses import dataclass, field
import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Optional

from pydantic import BaseModel, Field, field_validator


class NodeType(str, Enum):
    """Restrict document nodes to the variants the passes know how to handle"""
    heading = "heading"
    paragraph = "paragraph"
    bullet_list = "bullet_list"
    ordered_list = "ordered_list"
    list_item = "list_item"
    blockquote = "blockquote"
    code_block = "code_block"
    code_line = "code_line"
    code_span = "code_span"
    html_block = "html_block"
    hr = "hr"
    table = "table"
    thead = "thead"
    tbody = "tbody"
    tr = "tr"
    th = "th"
    td = "td"
    text = "text"
    softbreak = "softbreak"
    hardbreak = "hardbreak"
    code_inline = "code_inline"
    html_inline = "html_inline"
    em = "em"
    strong = "strong"
    strikethrough = "strikethrough"
    link = "link"
    image = "image"
    footnote_ref = "footnote_ref"
    footnote_block = "footnote_block"
    footnote_def = "footnote_def"
    footnote_backref = "footnote_backref"
    subscript = "subscript"
    superscript = "superscript"
    highlight = "highlight"
    insert = "insert"
    emoji = "emoji"
    external_marker = "external_marker"
    task_marker = "task_marker"
    figure = "figure"
    figcaption = "figcaption"
    dl = "dl"
    dt = "dt"
    dd = "dd"


class LinkKind(str, Enum):
    internal = "internal"
    external = "external"


@dataclass(eq=False)
class Node:
    """A single tree node; owns its children exclusively."""
    type:     NodeType
    children: list["Node"] = field(default_factory=list)
    content:  str = ""                                      # text payload (text, code, emoji, ...)
    attrs:    dict[str, str] = field(default_factory=dict)  # serialized as HTML attributes
    meta:     dict[str, Any] = field(default_factory=dict)  # pass annotations, never serialized as-is

    def walk(self) -> Iterator["Node"]:
        """Yield this node and all descendants depth-first, in document order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def plain_text(self) -> str:
        """Return the visible text of this subtree with markup removed."""
        if self.type in (NodeType.text, NodeType.code_inline, NodeType.emoji, NodeType.code_span):
            return self.content
        if self.type in (NodeType.softbreak, NodeType.hardbreak):
            return " "
        if self.type == NodeType.image:
            return ""
        return "".join(child.plain_text() for child in self.children)

    def is_autolink(self) -> bool:
        """A `<url>` link whose visible label is the URL itself."""
        return self.type == NodeType.link and (
            bool(self.meta.get("autolink")) or self.plain_text() == self.attrs.get("href")
        )

    def to_dict(self) -> dict[str, Any]:
        """Debug representation used by the AST dump."""
        data: dict[str, Any] = {"type": self.type.value}
        if self.content:
            data["content"] = self.content
        if self.attrs:
            data["attrs"] = dict(self.attrs)
        if self.meta:
            data["meta"] = {k: v.value if isinstance(v, Enum) else v for k, v in self.meta.items()}
        if self.children:
            data["children"] = [c.to_dict() for c in self.children]
        return data


def text(content: str) -> Node:
    """Shorthand for a text node."""
    return Node(NodeType.text, content=content)


@dataclass
class TocEntry:
    level:    int
    number:   str
    anchor:   str
    title:    str
    children: list["TocEntry"] = field(default_factory=list)


@dataclass
class FootnoteEntry:
    """Resolved footnote: display index, its definition and every reference site."""
    key:         str
    index:       int
    definition:  Optional[Node] = None
    occurrences: list[str] = field(default_factory=list)   # reference anchor ids in document order


class Author(BaseModel):
    key:    str
    name:   str = ""
    avatar: str = ""
    bio:    str = ""


class FrontMatter(BaseModel):
    """Required front-matter keys; extra keys are kept but ignored by the pipeline."""
    model_config = {"extra": "allow"}

    title:  str
    author: str
    tags:   list[str]
    avatar: str

    @field_validator("title", "author", "avatar", mode="before")
    @classmethod
    def scalar_to_str(cls, v: Any) -> Any:
        """YAML types `title: 2024` as an int; any scalar is accepted as text."""
        if v is None or isinstance(v, (str, dict, list)):
            return v
        return str(v)

    @field_validator("tags", mode="before")
    @classmethod
    def tags_to_list(cls, v: Any) -> Any:
        """Accept `tags: a, b` as well as a YAML list; items become strings."""
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        if isinstance(v, list):
            return [t if isinstance(t, str) else str(t) for t in v if t is not None]
        return v


class Metadata(BaseModel):
    title:      str = ""
    author_key: str = ""
    author:     Optional[Author] = None     # None when the registry has no entry
    tags:       list[str] = []
    avatar:     str = ""
    word_count: int = 0
    read_time:  int = Field(default=1, ge=1, description="Whole minutes, never below 1")
    date:       Optional[datetime.date] = None


@dataclass
class Document:
    """One compiled document: the block tree plus everything the passes attach to it."""
    children:               list[Node] = field(default_factory=list)
    footnotes:              list[Node] = field(default_factory=list)   # ordered footnote_def nodes
    toc:                    list[TocEntry] = field(default_factory=list)
    metadata:               Metadata = field(default_factory=Metadata)
    unreferenced_footnotes: list[str] = field(default_factory=list)    # defined but never referenced
    source_path:            Optional[Path] = None

    def walk(self) -> Iterator[Node]:
        """Yield every node of the body and of the footnote list."""
        for node in self.children:
            yield from node.walk()
        for node in self.footnotes:
            yield from node.walk()
