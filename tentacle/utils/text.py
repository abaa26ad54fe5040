"""Small string helpers shared by the codecs."""

import re

CONTROL_CHARS_RE = re.compile(r"[\u0000-\u001f\u007f]")


def normalize_line_endings(value: str | None) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    if not value:
        return ""
    return value.replace("\r\n", "\n").replace("\r", "\n")


def collapse_whitespace(value: str) -> str:
    """Collapse every run of whitespace to a single space and trim."""
    return " ".join(value.split())


def replace_control_chars(value: str, replacement: str = " ") -> str:
    return CONTROL_CHARS_RE.sub(replacement, value)
