"""ISO-8601 timestamp helpers."""

from datetime import datetime, timezone


def now_iso() -> str:
    """Current UTC time as ``2025-01-01T00:00:00.000Z``."""
    return format_iso(datetime.now(timezone.utc))


def format_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None for anything unparseable.

    Naive timestamps are read as UTC.
    """
    if not value:
        return None
    candidate = value.strip()
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_not_before(value: str, reference: str) -> bool:
    """True when ``value`` is the same instant as ``reference`` or later.

    Unparseable timestamps are compared as plain strings.
    """
    parsed_value, parsed_reference = parse_iso(value), parse_iso(reference)
    if parsed_value is None or parsed_reference is None:
        return value >= reference
    return parsed_value >= parsed_reference
