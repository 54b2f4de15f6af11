"""Timestamp parsing and formatting for the Kount wire format."""

from datetime import datetime, timezone
from typing import Any

from .nulls import is_blank

KOUNT_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a caller timestamp into an aware UTC datetime.

    Accepts datetime objects, ISO 8601 strings (a trailing "Z" included)
    and epoch seconds. Naive values are taken as UTC.

    Returns:
        Parsed datetime, or None if the value is missing or unparseable
    """
    if is_blank(value) or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a datetime as Kount expects it (UTC, second precision)."""
    return value.astimezone(timezone.utc).strftime(KOUNT_TIME_FORMAT)


def format_order_time(value: Any, now: datetime) -> str:
    """
    Format an order creation time.

    Missing or unparseable values fall back to now, and future values are
    clamped to now since Kount rejects them.
    """
    parsed = parse_timestamp(value)
    if parsed is None or parsed > now:
        parsed = now
    return format_timestamp(parsed)


def format_optional_time(value: Any) -> str | None:
    """Format a secondary timestamp, or None if it cannot be parsed."""
    parsed = parse_timestamp(value)
    return format_timestamp(parsed) if parsed else None
