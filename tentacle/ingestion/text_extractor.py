"""Plain-text extraction from document trees and stored bodies."""

import json
import logging
from typing import Any

from tentacle.codec.tree_json import DEFAULT_MAX_NODES
from tentacle.domain.document import HardBreak, Node, OpaqueNode, StructuredDocument, Text
from tentacle.utils.text import collapse_whitespace

logger = logging.getLogger(__name__)


def _clean(value: str) -> str:
    return collapse_whitespace(value.replace("\x00", ""))


def _collect_node_fragments(roots: list[Node], max_nodes: int) -> list[str]:
    fragments: list[str] = []
    stack = list(reversed(roots))
    visited = 0

    while stack and visited < max_nodes:
        node = stack.pop()
        visited += 1
        if isinstance(node, HardBreak):
            fragments.append("\n")
        elif isinstance(node, Text):
            fragments.append(node.text)
        elif isinstance(node, OpaqueNode) and node.text:
            fragments.append(node.text)
        stack.extend(reversed(getattr(node, "content", [])))

    return [fragment for fragment in fragments if fragment]


def _collect_json_fragments(value: Any, max_nodes: int) -> list[str]:
    """Collect text from arbitrary decoded JSON: strings, ``text`` fields and hard breaks."""
    fragments: list[str] = []
    stack = [value]
    visited = 0

    while stack and visited < max_nodes:
        item = stack.pop()
        visited += 1
        if isinstance(item, str):
            fragments.append(item)
        elif isinstance(item, list):
            stack.extend(reversed(item))
        elif isinstance(item, dict):
            if item.get("type") == "hardBreak":
                fragments.append("\n")
            if isinstance(item.get("text"), str):
                fragments.append(item["text"])
            if isinstance(item.get("content"), list):
                stack.append(item["content"])

    return [fragment for fragment in fragments if fragment]


def extract_node_text(node: Node, *, max_nodes: int = DEFAULT_MAX_NODES) -> str:
    """Plain text of a single node and its descendants."""
    return _clean(" ".join(_collect_node_fragments([node], max_nodes)))


def extract_plain_text(
    value: StructuredDocument | str | None, *, max_nodes: int = DEFAULT_MAX_NODES
) -> str:
    """Flatten a document, or a stored body, into whitespace-collapsed plain text.

    Args:
        value: A document tree, or a raw body that is either editor JSON or plain text
        max_nodes: Maximum number of nodes visited

    Returns:
        The joined text payloads. A raw body that is not JSON, or whose JSON holds no
        text, comes back trimmed and whitespace-collapsed.
    """
    if value is None:
        return ""
    if isinstance(value, StructuredDocument):
        return _clean(" ".join(_collect_node_fragments(value.content, max_nodes)))

    raw = value.replace("\x00", "")
    if not raw.strip():
        return ""

    try:
        parsed = json.loads(raw)
    except (ValueError, RecursionError):
        return _clean(raw)

    extracted = _clean(" ".join(_collect_json_fragments(parsed, max_nodes)))
    if extracted:
        return extracted
    if isinstance(parsed, dict) and parsed.get("type") == "doc":
        logger.debug("Document body holds no text")
        return ""
    return _clean(raw)


def extract_block_texts(
    document: StructuredDocument, *, max_nodes: int = DEFAULT_MAX_NODES
) -> list[str]:
    """Plain text of each top-level block, empty blocks dropped."""
    texts = (extract_node_text(block, max_nodes=max_nodes) for block in document.content)
    return [text for text in texts if text]


def build_embedding_source_text(title: str, body: StructuredDocument | str | None) -> str:
    """Text a whole document is embedded from: ``title``, a blank line, then the body text."""
    normalized_title = title.strip()
    plain_body = extract_plain_text(body)
    if not plain_body:
        return normalized_title
    if not normalized_title:
        return plain_body
    return f"{normalized_title}\n\n{plain_body}"
