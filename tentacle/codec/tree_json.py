"""Conversion between the editor's JSON tree and the document models.

Both directions walk the tree with an explicit stack. Nodes nested deeper than
``max_depth`` keep their own payload but lose their children, and conversion stops
adding nodes once ``max_nodes`` have been built.
"""

import json
import logging
import math
from typing import Any

from tentacle.domain.document import (
    Blockquote,
    BulletList,
    CodeBlock,
    HardBreak,
    Heading,
    HorizontalRule,
    ListItem,
    Mark,
    Node,
    OpaqueNode,
    OrderedList,
    Paragraph,
    StructuredDocument,
    Text,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64
DEFAULT_MAX_NODES = 50_000

_SIMPLE_CONTAINERS: dict[str, type[Node]] = {
    "paragraph": Paragraph,
    "bulletList": BulletList,
    "listItem": ListItem,
    "blockquote": Blockquote,
    "codeBlock": CodeBlock,
}


def _attr(raw: dict, name: str) -> Any:
    attrs = raw.get("attrs")
    if isinstance(attrs, dict):
        return attrs.get(name)
    return None


def _finite_int(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return int(value)


def _marks_from_json(raw_marks: Any) -> list[Mark]:
    if not isinstance(raw_marks, list):
        return []
    return [
        Mark(type=mark["type"])
        for mark in raw_marks
        if isinstance(mark, dict) and isinstance(mark.get("type"), str)
    ]


def _node_from_json(raw: Any) -> Node | None:
    """Build a single node without its children."""
    if isinstance(raw, str):
        return OpaqueNode(text=raw)
    if not isinstance(raw, dict):
        return None

    node_type = raw.get("type")
    if node_type == "text":
        value = raw.get("text")
        return Text(
            text=value if isinstance(value, str) else "",
            marks=_marks_from_json(raw.get("marks")),
        )
    if node_type == "hardBreak":
        return HardBreak()
    if node_type == "horizontalRule":
        return HorizontalRule()
    if node_type == "heading":
        return Heading(level=_finite_int(_attr(raw, "level"), 1))
    if node_type == "orderedList":
        start = _finite_int(_attr(raw, "start"), 1)
        return OrderedList(start=start if start >= 1 else 1)
    if node_type in _SIMPLE_CONTAINERS:
        return _SIMPLE_CONTAINERS[node_type]()

    value = raw.get("text")
    return OpaqueNode(
        type=node_type if isinstance(node_type, str) else "",
        text=value if isinstance(value, str) else None,
    )


def document_from_json(
    value: str | dict | None,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_nodes: int = DEFAULT_MAX_NODES,
) -> StructuredDocument | None:
    """Build a document from editor JSON.

    Args:
        value: JSON text or an already-decoded mapping
        max_depth: Deepest level whose children are still read
        max_nodes: Maximum number of nodes to build

    Returns:
        The document, or None when ``value`` is not a ``doc`` object with a content list
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except (ValueError, RecursionError):
            return None

    if not isinstance(value, dict) or value.get("type") != "doc":
        return None
    raw_content = value.get("content")
    if not isinstance(raw_content, list):
        return None

    document = StructuredDocument()
    stack: list[tuple[Any, int, list[Node]]] = [
        (raw, 1, document.content) for raw in reversed(raw_content)
    ]
    built = 0

    while stack:
        raw, depth, siblings = stack.pop()
        node = _node_from_json(raw)
        if node is None:
            continue
        if built >= max_nodes:
            logger.debug("Tree truncated at %d nodes", max_nodes)
            break

        siblings.append(node)
        built += 1

        children = raw.get("content") if isinstance(raw, dict) else None
        if not isinstance(children, list) or not hasattr(node, "content"):
            continue
        if depth >= max_depth:
            logger.debug("Dropping children of %s nested deeper than %d", node.type, max_depth)
            continue
        stack.extend((child, depth + 1, node.content) for child in reversed(children))

    return document


def _node_to_json(node: Node) -> Any:
    if isinstance(node, Text):
        data: dict[str, Any] = {"type": "text", "text": node.text}
        if node.marks:
            data["marks"] = [{"type": mark.type} for mark in node.marks]
        return data
    if isinstance(node, OpaqueNode):
        if not node.type and not node.content and node.text is not None:
            return node.text
        data = {"type": node.type}
        if node.text is not None:
            data["text"] = node.text
        return data

    data = {"type": node.type}
    if isinstance(node, Heading):
        data["attrs"] = {"level": node.level}
    elif isinstance(node, OrderedList):
        data["attrs"] = {"start": node.start}
    return data


def document_to_json(document: StructuredDocument) -> dict:
    """Convert a document back into the editor's JSON shape."""
    root: dict[str, Any] = {"type": "doc", "content": []}
    stack: list[tuple[Node, list]] = [
        (node, root["content"]) for node in reversed(document.content)
    ]

    while stack:
        node, siblings = stack.pop()
        data = _node_to_json(node)
        siblings.append(data)

        children = getattr(node, "content", None)
        if children and isinstance(data, dict):
            data["content"] = []
            stack.extend((child, data["content"]) for child in reversed(children))

    return root


def dumps(document: StructuredDocument) -> str:
    return json.dumps(document_to_json(document), ensure_ascii=False, separators=(",", ":"))
