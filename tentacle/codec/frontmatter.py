"""Reading and writing the ``---`` delimited metadata header of a document file."""

import json
import re

from tentacle.domain.metadata import FrontmatterMetadata, PartialMetadata
from tentacle.domain.tags import normalize_tags
from tentacle.utils.text import normalize_line_endings

DELIMITER = "---"
NULL_TOKEN = "null"

_ESCAPED_CHAR_RE = re.compile(r"\\(.)")


def quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def unquote(value: str) -> str:
    """Reverse ``quote``; values without surrounding double quotes are returned as is."""
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return _ESCAPED_CHAR_RE.sub(lambda match: match.group(1), value[1:-1])
    return value


def serialize_frontmatter(metadata: FrontmatterMetadata) -> str:
    """Render the header block, closing delimiter and blank line included.

    Example:
        ---
        id: "abc"
        created_at: "2025-01-01T00:00:00.000Z"
        updated_at: "2025-01-01T00:00:00.000Z"
        banner_image_url: null
        tags: ["work"]
        ---
    """
    banner = (
        quote(metadata.banner_image_url)
        if metadata.banner_image_url is not None
        else NULL_TOKEN
    )
    tags = json.dumps(normalize_tags(metadata.tags), ensure_ascii=False, separators=(",", ":"))
    lines = [
        DELIMITER,
        f"id: {quote(metadata.id)}",
        f"created_at: {quote(metadata.created_at)}",
        f"updated_at: {quote(metadata.updated_at)}",
        f"banner_image_url: {banner}",
        f"tags: {tags}",
        DELIMITER,
        "",
        "",
    ]
    return "\n".join(lines)


def _split_inline_array(inner: str) -> list[str]:
    parts = []
    for token in inner.split(","):
        part = token.strip()
        if len(part) >= 2 and part[0] == part[-1] and part[0] in "\"'":
            part = _ESCAPED_CHAR_RE.sub(lambda match: match.group(1), part[1:-1])
        parts.append(part)
    return parts


def parse_tags_value(raw_value: str) -> list[str]:
    """Parse a ``tags`` value: a JSON array, else a loosely quoted comma list.

    Anything that is not bracketed yields no tags.
    """
    value = raw_value.strip()
    if not (value.startswith("[") and value.endswith("]")):
        return []

    try:
        parsed = json.loads(value)
    except ValueError:
        inner = value[1:-1].strip()
        parsed = _split_inline_array(inner) if inner else []

    if not isinstance(parsed, list):
        return []
    return normalize_tags(parsed)


def _find_closing_delimiter(lines: list[str]) -> int | None:
    for index in range(1, len(lines)):
        if lines[index].rstrip() == DELIMITER:
            return index
    return None


def parse_frontmatter(text: str | None) -> tuple[PartialMetadata, str]:
    """Split a file into its header metadata and the remaining Markdown.

    Args:
        text: Full file contents

    Returns:
        Parsed metadata (empty when the header is missing or unterminated) and the body.
        The body starts right after the closing delimiter line.
    """
    normalized = normalize_line_endings(text)
    lines = normalized.split("\n")
    if lines[0].rstrip() != DELIMITER:
        return PartialMetadata(), normalized

    closing = _find_closing_delimiter(lines)
    if closing is None:
        return PartialMetadata(), normalized

    fields: dict[str, object] = {}
    for line in lines[1:closing]:
        key, separator, raw_value = line.partition(":")
        if not separator:
            continue
        key, raw_value = key.strip(), raw_value.strip()
        value = None if raw_value == NULL_TOKEN else unquote(raw_value)

        if key in ("id", "created_at", "updated_at"):
            if value is not None:
                fields[key] = value
        elif key == "banner_image_url":
            fields[key] = value
        elif key == "tags":
            fields[key] = parse_tags_value(raw_value)

    return PartialMetadata(**fields), "\n".join(lines[closing + 1 :])
