"""Tag canonicalization.

Workspace tags use one canonical rule (``normalize_tags``): lowercase, ``_`` as the word
separator, no minimum length. Tags proposed by an AI tagger follow a stricter policy
(``normalize_suggested_tags``) and are filtered by that function only; callers that want
both apply them one after the other.
"""

import re
from typing import Iterable

from tentacle.utils.text import replace_control_chars

LEADING_MARKERS_RE = re.compile(r"^[#\s]+")
WORD_SEPARATOR_RE = re.compile(r"[\s_]+")

SUGGESTED_TAG_MIN_LENGTH = 3
MAX_SUGGESTED_TAGS = 5


def _sanitize_tag(raw_tag: str, separator: str) -> str:
    value = replace_control_chars(raw_tag).strip()
    value = LEADING_MARKERS_RE.sub("", value)
    return WORD_SEPARATOR_RE.sub(separator, value).lower()


def _dedupe(tags: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    unique = []
    for tag in tags:
        if tag and tag not in seen:
            seen.add(tag)
            unique.append(tag)
    return unique


def normalize_tags(raw_tags: Iterable[object] | None) -> list[str]:
    """Canonicalize free-text tags, keeping first-seen order.

    Args:
        raw_tags: Tags as typed by the user or read from a file. Non-string entries are
            ignored.

    Returns:
        Trimmed, ``#``-stripped, lowercased tags with whitespace/underscore runs collapsed
        to ``_``, without empties or duplicates.
    """
    if raw_tags is None:
        return []
    return _dedupe(_sanitize_tag(tag, "_") for tag in raw_tags if isinstance(tag, str))


def normalize_suggested_tags(raw_tags: Iterable[object] | None) -> list[str]:
    """Alternate policy for tags suggested by a language model.

    Uses ``-`` as the separator, drops tags shorter than three characters and keeps at
    most five.
    """
    if raw_tags is None:
        return []
    candidates = (
        _sanitize_tag(tag, "-").strip("-") for tag in raw_tags if isinstance(tag, str)
    )
    suggested = [tag for tag in candidates if len(tag) >= SUGGESTED_TAG_MIN_LENGTH]
    return _dedupe(suggested)[:MAX_SUGGESTED_TAGS]
