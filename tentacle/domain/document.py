"""Structured rich-document tree models."""

from typing import Literal

from pydantic import BaseModel


class Mark(BaseModel):
    """An inline decoration attached to a text node.

    Unknown mark types are kept so they survive a load/save of the tree, but the
    Markdown renderer ignores them.
    """

    type: str


class Node(BaseModel):
    """Base class of every node in the tree."""

    type: str


class Text(Node):
    type: Literal["text"] = "text"
    text: str = ""
    marks: list[Mark] = []


class HardBreak(Node):
    type: Literal["hardBreak"] = "hardBreak"


class Paragraph(Node):
    type: Literal["paragraph"] = "paragraph"
    content: list[Node] = []


class Heading(Node):
    type: Literal["heading"] = "heading"
    level: int = 1
    content: list[Node] = []


class BulletList(Node):
    type: Literal["bulletList"] = "bulletList"
    content: list[Node] = []


class OrderedList(Node):
    type: Literal["orderedList"] = "orderedList"
    start: int = 1
    content: list[Node] = []


class ListItem(Node):
    type: Literal["listItem"] = "listItem"
    content: list[Node] = []


class Blockquote(Node):
    type: Literal["blockquote"] = "blockquote"
    content: list[Node] = []


class CodeBlock(Node):
    type: Literal["codeBlock"] = "codeBlock"
    content: list[Node] = []


class HorizontalRule(Node):
    type: Literal["horizontalRule"] = "horizontalRule"


class OpaqueNode(Node):
    """A node whose type is not part of the supported schema.

    Only its text payload and children are kept. It takes part in text extraction
    and inline flattening, never in structural rendering.
    """

    type: str = ""
    text: str | None = None
    content: list[Node] = []


class StructuredDocument(BaseModel):
    """Root of the tree the editor manipulates."""

    type: Literal["doc"] = "doc"
    content: list[Node] = []


def text(value: str, *marks: str) -> Text:
    """Shorthand for a text node carrying the given marks in order."""
    return Text(text=value, marks=[Mark(type=mark) for mark in marks])


def empty_document() -> StructuredDocument:
    """The document a freshly created note starts with: one empty paragraph."""
    return StructuredDocument(content=[Paragraph()])
