"""Layout of a stored document file: frontmatter, title heading, Markdown body."""

import re

from tentacle.codec.frontmatter import parse_frontmatter, serialize_frontmatter
from tentacle.codec.markdown import parse_markdown, serialize_markdown
from tentacle.domain.document import StructuredDocument
from tentacle.domain.metadata import FrontmatterMetadata
from tentacle.domain.records import StoredDocument
from tentacle.utils.text import normalize_line_endings

DEFAULT_TITLE = "Untitled"

TITLE_LINE_RE = re.compile(r"^#\s+(.+)$")
HEADING_MARKERS_RE = re.compile(r"^#+\s*")
NEWLINES_RE = re.compile(r"\r?\n|\r")


def normalize_title(title: str | None) -> str:
    """Single-line, trimmed title; ``Untitled`` when nothing is left."""
    normalized = NEWLINES_RE.sub(" ", title or "").strip()
    return normalized or DEFAULT_TITLE


def sanitize_title_for_heading(title: str | None) -> str:
    sanitized = HEADING_MARKERS_RE.sub("", normalize_title(title))
    return sanitized or DEFAULT_TITLE


def split_title_and_body(markdown: str) -> tuple[str, str]:
    """Separate the ``# title`` line from the Markdown below it.

    Leading blank lines are skipped. When the first non-blank line is not a level-one
    heading the title is ``Untitled`` and everything is body.
    """
    lines = normalize_line_endings(markdown).split("\n")
    index = 0
    while index < len(lines) and not lines[index].strip():
        index += 1

    if index < len(lines):
        heading = TITLE_LINE_RE.match(lines[index])
        if heading:
            body = "\n".join(lines[index + 1 :]).strip()
            return normalize_title(heading.group(1)), body

    return DEFAULT_TITLE, "\n".join(lines).strip()


def build_markdown_file(
    metadata: FrontmatterMetadata, title: str | None, body: StructuredDocument | str
) -> str:
    """Assemble the full text of a document file.

    Args:
        metadata: Frontmatter header
        title: Document title, sanitized before being written as the heading
        body: Document tree, or Markdown that is already rendered

    Returns:
        File contents. A document without body still ends with ``# <title>`` and a newline.
    """
    heading = f"# {sanitize_title_for_heading(title)}"
    if isinstance(body, StructuredDocument):
        body = serialize_markdown(body)
    markdown_body = normalize_line_endings(body).strip()

    if markdown_body:
        return f"{serialize_frontmatter(metadata)}{heading}\n\n{markdown_body}"
    return f"{serialize_frontmatter(metadata)}{heading}\n"


def read_markdown_file(text: str, *, fallback_id: str, now: str | None = None) -> StoredDocument:
    """Read a document file, filling in whatever its header is missing.

    Args:
        text: File contents, possibly hand-edited or without frontmatter
        fallback_id: Id used when the header has none, normally the file name stem
        now: Timestamp used for missing creation dates
    """
    partial, markdown = parse_frontmatter(text)
    title, body_markdown = split_title_and_body(markdown)
    return StoredDocument(
        metadata=FrontmatterMetadata.resolve(partial, fallback_id=fallback_id, now=now),
        title=title,
        body=parse_markdown(body_markdown),
    )


def write_markdown_file(document: StoredDocument) -> str:
    return build_markdown_file(document.metadata, document.title, document.body)
