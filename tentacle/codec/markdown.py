"""Conversion between document trees and Markdown body text."""

import re

from tentacle.codec.inline import apply_marks, parse_inline
from tentacle.codec.tree_json import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_NODES,
    document_from_json,
    dumps,
)
from tentacle.domain.document import (
    Blockquote,
    BulletList,
    CodeBlock,
    HardBreak,
    Heading,
    HorizontalRule,
    ListItem,
    Node,
    OpaqueNode,
    OrderedList,
    Paragraph,
    StructuredDocument,
    Text,
)
from tentacle.ingestion.text_extractor import extract_node_text
from tentacle.utils.text import normalize_line_endings

FENCE = "```"
RULE = "---"
HARD_BREAK = "  \n"
LIST_INDENT = "  "

HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
HEADING_START_RE = re.compile(r"^#{1,6}\s+")
BULLET_RE = re.compile(r"^\s*[-*]\s+")
ORDERED_RE = re.compile(r"^\s*(\d+)\.\s+")
QUOTE_RE = re.compile(r"^\s*>\s?")


class MarkdownRenderer:
    """Renders a document tree as Markdown.

    Subtrees nested deeper than ``max_depth`` are written as their plain text.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        self.max_depth = max_depth

    def render(self, document: StructuredDocument) -> str:
        blocks = (self._render_block(node, 1).strip() for node in document.content)
        return "\n\n".join(block for block in blocks if block).strip()

    def _render_block(self, node: Node, depth: int) -> str:
        if depth > self.max_depth:
            return extract_node_text(node)

        if isinstance(node, Heading):
            level = max(1, min(6, node.level))
            return f"{'#' * level} {self._render_children_inline(node, depth)}".strip()
        if isinstance(node, Paragraph):
            return self._render_children_inline(node, depth)
        if isinstance(node, BulletList):
            return "\n".join(
                f"- {self._render_list_item(item, depth + 1)}".rstrip() for item in node.content
            )
        if isinstance(node, OrderedList):
            start = node.start if node.start >= 1 else 1
            return "\n".join(
                f"{start + index}. {self._render_list_item(item, depth + 1)}".rstrip()
                for index, item in enumerate(node.content)
            )
        if isinstance(node, ListItem):
            return self._render_list_item(node, depth)
        if isinstance(node, Blockquote):
            quoted = self._render_child_blocks(node, depth, separator="\n\n")
            return "\n".join(f"> {line}" for line in quoted.split("\n"))
        if isinstance(node, CodeBlock):
            code = "".join(getattr(child, "text", None) or "" for child in node.content)
            return f"{FENCE}\n{code}\n{FENCE}"
        if isinstance(node, HorizontalRule):
            return RULE
        return self._render_inline(node, depth)

    def _render_child_blocks(self, node: Node, depth: int, separator: str) -> str:
        parts = (self._render_block(child, depth + 1).strip() for child in node.content)
        return separator.join(part for part in parts if part)

    def _render_list_item(self, item: Node, depth: int) -> str:
        if depth > self.max_depth:
            return extract_node_text(item)

        children = getattr(item, "content", [])
        parts = [self._render_block(child, depth + 1).strip() for child in children]
        parts = [part for part in parts if part]
        if not parts:
            return ""

        first, *rest = parts
        nested = (
            "\n".join(LIST_INDENT + line for line in part.split("\n")) for part in rest
        )
        return "\n".join([first, *nested])

    def _render_children_inline(self, node: Node, depth: int) -> str:
        return "".join(self._render_inline(child, depth + 1) for child in node.content)

    def _render_inline(self, node: Node, depth: int) -> str:
        if isinstance(node, Text):
            return apply_marks(node.text, node.marks)
        if isinstance(node, HardBreak):
            return HARD_BREAK
        if depth > self.max_depth:
            return extract_node_text(node)

        prefix = node.text if isinstance(node, OpaqueNode) and node.text else ""
        children = getattr(node, "content", [])
        return prefix + "".join(self._render_inline(child, depth + 1) for child in children)


def serialize_markdown(document: StructuredDocument, *, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Render a document tree as a Markdown body."""
    return MarkdownRenderer(max_depth=max_depth).render(document)


def is_block_start(line: str) -> bool:
    return bool(
        HEADING_START_RE.match(line)
        or BULLET_RE.match(line)
        or ORDERED_RE.match(line)
        or QUOTE_RE.match(line)
        or line.startswith(FENCE)
        or line.strip() == RULE
    )


def _strip_hard_break_marker(line: str) -> str:
    return line[:-2] if line.endswith("  ") else line


def paragraph_from_text(value: str) -> Paragraph:
    """Build a paragraph, separating lines with hard breaks."""
    lines = value.split("\n")
    content: list[Node] = []
    for index, line in enumerate(lines):
        is_last = index == len(lines) - 1
        content.extend(parse_inline(line if is_last else _strip_hard_break_marker(line)))
        if not is_last:
            content.append(HardBreak())
    return Paragraph(content=content)


class MarkdownParser:
    """Line scanner building a document tree from a Markdown body.

    At the cursor line the checks run in a fixed order: blank line, code fence, ATX
    heading, bullet run, ordered run, blockquote run, horizontal rule, and finally a
    paragraph run that stops at a blank line or the start of any other block.
    """

    def __init__(self, markdown: str):
        self._lines = normalize_line_endings(markdown).split("\n")
        self._index = 0

    def parse(self) -> StructuredDocument:
        blocks: list[Node] = []
        while self._index < len(self._lines):
            line = self._lines[self._index]
            if not line.strip():
                self._index += 1
                continue
            blocks.append(self._parse_block(line))
        return StructuredDocument(content=blocks)

    def _parse_block(self, line: str) -> Node:
        if line.startswith(FENCE):
            return self._parse_code_block()

        heading = HEADING_RE.match(line)
        if heading:
            self._index += 1
            return Heading(level=len(heading.group(1)), content=parse_inline(heading.group(2)))

        if BULLET_RE.match(line):
            items = [
                ListItem(content=[paragraph_from_text(BULLET_RE.sub("", item, count=1))])
                for item in self._take_run(BULLET_RE)
            ]
            return BulletList(content=items)

        ordered = ORDERED_RE.match(line)
        if ordered:
            start = int(ordered.group(1))
            items = [
                ListItem(content=[paragraph_from_text(ORDERED_RE.sub("", item, count=1))])
                for item in self._take_run(ORDERED_RE)
            ]
            return OrderedList(start=start if start >= 1 else 1, content=items)

        if QUOTE_RE.match(line):
            quoted = "\n".join(QUOTE_RE.sub("", item, count=1) for item in self._take_run(QUOTE_RE))
            return Blockquote(content=[paragraph_from_text(quoted.strip())])

        if line.strip() == RULE:
            self._index += 1
            return HorizontalRule()

        return self._parse_paragraph(line)

    def _take_run(self, pattern: re.Pattern) -> list[str]:
        run = []
        while self._index < len(self._lines) and pattern.match(self._lines[self._index]):
            run.append(self._lines[self._index])
            self._index += 1
        return run

    def _parse_code_block(self) -> CodeBlock:
        self._index += 1
        code_lines = []
        while self._index < len(self._lines) and not self._lines[self._index].startswith(FENCE):
            code_lines.append(self._lines[self._index])
            self._index += 1
        if self._index < len(self._lines):
            self._index += 1

        code = "\n".join(code_lines)
        return CodeBlock(content=[Text(text=code)] if code else [])

    def _parse_paragraph(self, line: str) -> Paragraph:
        run = [line]
        self._index += 1
        while self._index < len(self._lines):
            candidate = self._lines[self._index]
            if not candidate.strip() or is_block_start(candidate):
                break
            run.append(candidate)
            self._index += 1
        return paragraph_from_text("\n".join(run))


def parse_markdown(markdown: str | None) -> StructuredDocument:
    """Parse a Markdown body (title heading already removed) into a document tree."""
    return MarkdownParser(markdown or "").parse()


def body_json_to_markdown(
    body: str | None,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_nodes: int = DEFAULT_MAX_NODES,
) -> str:
    """Render an editor JSON body as Markdown.

    Bodies that are not a JSON document are returned as trimmed text.
    """
    if not body or not body.strip():
        return ""
    document = document_from_json(body, max_depth=max_depth, max_nodes=max_nodes)
    if document is None:
        return normalize_line_endings(body).strip()
    return serialize_markdown(document, max_depth=max_depth)


def markdown_to_body_json(markdown: str | None) -> str:
    normalized = normalize_line_endings(markdown).strip()
    if not normalized:
        return ""
    return dumps(parse_markdown(normalized))
