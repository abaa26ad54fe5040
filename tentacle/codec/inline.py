"""Inline Markdown: rendering marks and scanning emphasis spans.

The scanner recognizes single-mark spans only. A span written with several stacked
marks (``***bold italic***``) comes back with at most one mark.
"""

from dataclasses import dataclass
from enum import Enum

from tentacle.domain.document import Mark, Text


class _State(Enum):
    PLAIN = "plain"
    BOLD = "bold"
    STRIKE = "strike"
    CODE = "code"
    ITALIC = "italic"


@dataclass(frozen=True)
class SpanRule:
    state: _State
    delimiter: str

    @property
    def mark(self) -> str:
        return self.state.value


# Tried in this order at every position.
SPAN_RULES: tuple[SpanRule, ...] = (
    SpanRule(_State.BOLD, "**"),
    SpanRule(_State.STRIKE, "~~"),
    SpanRule(_State.CODE, "`"),
    SpanRule(_State.ITALIC, "*"),
)

ESCAPED_BACKTICK = "\\`"
ESCAPED_BACKSLASH = "\\\\"


def apply_marks(value: str, marks: list[Mark]) -> str:
    """Wrap ``value`` with each mark in list order; the first mark ends up innermost."""
    result = value
    for mark in marks:
        if mark.type == "code":
            escaped = result.replace("\\", ESCAPED_BACKSLASH).replace("`", ESCAPED_BACKTICK)
            result = f"`{escaped}`"
        elif mark.type == "bold":
            result = f"**{result}**"
        elif mark.type == "italic":
            result = f"*{result}*"
        elif mark.type == "strike":
            result = f"~~{result}~~"
    return result


class InlineScanner:
    """Left-to-right scanner turning one line of Markdown into text nodes.

    In the plain state every position is tested against ``SPAN_RULES``; a matching
    opener switches to that span's state, which reads content until the closing
    delimiter. A span is rejected, and scanning resumes in the plain state, when its
    content is empty, contains its delimiter character, or runs off the end of the line.

    A rule whose span once ran off the end of the line has no closer further right
    either, so it is not tried again for the rest of the line.
    """

    def __init__(self, source: str):
        self._source = source
        self._state = _State.PLAIN
        self._position = 0
        self._plain_start = 0
        self._nodes: list[Text] = []
        self._unclosed: set[_State] = set()

    def scan(self) -> list[Text]:
        while self._position < len(self._source):
            if not self._enter_span():
                self._position += 1
        self._flush_plain(len(self._source))
        return self._nodes

    def _flush_plain(self, end: int) -> None:
        if end > self._plain_start:
            self._nodes.append(Text(text=self._source[self._plain_start : end]))

    def _enter_span(self) -> bool:
        for rule in SPAN_RULES:
            if rule.state in self._unclosed:
                continue
            if not self._source.startswith(rule.delimiter, self._position):
                continue
            self._state = rule.state
            span = self._read_span(rule, self._position + len(rule.delimiter))
            self._state = _State.PLAIN
            if span is None:
                continue

            content, end = span
            self._flush_plain(self._position)
            self._nodes.append(Text(text=content, marks=[Mark(type=rule.mark)]))
            self._position = self._plain_start = end
            return True
        return False

    def _read_span(self, rule: SpanRule, start: int) -> tuple[str, int] | None:
        """Read span content from ``start``; returns the content and the index after the closer."""
        source = self._source
        closing_char = rule.delimiter[0]
        content: list[str] = []
        index = start

        while index < len(source):
            char = source[index]
            if self._state is _State.CODE:
                if source.startswith(ESCAPED_BACKSLASH, index):
                    content.append("\\")
                    index += len(ESCAPED_BACKSLASH)
                    continue
                if source.startswith(ESCAPED_BACKTICK, index):
                    content.append("`")
                    index += len(ESCAPED_BACKTICK)
                    continue
            if char == closing_char:
                if content and source.startswith(rule.delimiter, index):
                    return "".join(content), index + len(rule.delimiter)
                return None
            content.append(char)
            index += 1

        self._unclosed.add(rule.state)
        return None


def parse_inline(source: str) -> list[Text]:
    """Parse one line into plain and single-marked text nodes."""
    if not source:
        return []
    return InlineScanner(source).scan()
