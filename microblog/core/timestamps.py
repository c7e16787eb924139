"""Parsing and formatting of stored post timestamps.

Posts carry ``created_at`` as text, either ``YYYY-MM-DD HH:MM:SS`` or
ISO-8601 with an optional ``Z`` or ``+HH:MM`` suffix. Values without a
timezone are UTC.
"""
from datetime import datetime, timezone

EPOCH = datetime.min.replace(tzinfo=timezone.utc)

def parse_timestamp(value: str) -> datetime:
    """Aware UTC datetime for a stored timestamp; raises ValueError."""
    text = value.strip().replace(" ", "T", 1)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)

def sort_key(value: str) -> datetime:
    try:
        return parse_timestamp(value)
    except ValueError:
        return EPOCH

def format_utc(moment: datetime) -> str:
    """``2025-12-02T16:42:15Z``, keeping milliseconds or microseconds when present."""
    if not moment.microsecond:
        timespec = "seconds"
    elif moment.microsecond % 1000 == 0:
        timespec = "milliseconds"
    else:
        timespec = "microseconds"
    return moment.replace(tzinfo=None).isoformat(timespec=timespec) + "Z"
