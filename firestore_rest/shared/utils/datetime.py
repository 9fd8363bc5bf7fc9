"""
UTC datetime utilities for Firestore timestamps.

All datetime values crossing the wire are timezone-aware UTC. Naive
datetimes are assumed to already be UTC.
"""

import re
from datetime import UTC, date, datetime, time

# RFC3339 with optional fraction of any length (Firestore sends nanoseconds).
_RFC3339_RE = re.compile(
    r"(?P<base>[0-9]{4}-[0-9]{2}-[0-9]{2}[Tt ][0-9]{2}:[0-9]{2}:[0-9]{2})"
    r"(?:\.(?P<frac>[0-9]+))?"
    r"(?P<tz>[Zz]|[+-][0-9]{2}:[0-9]{2})"
)


def ensure_utc(dt: datetime | date) -> datetime:
    """
    Normalize a datetime (or date) to an aware UTC datetime.

    - A date becomes midnight UTC of that day
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Args:
        dt: A date, or a datetime that may be naive or aware

    Returns:
        UTC-aware datetime
    """
    if not isinstance(dt, datetime):
        return datetime.combine(dt, time.min, tzinfo=UTC)

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def format_rfc3339(dt: datetime | date) -> str:
    """Format as RFC3339 UTC with microseconds, e.g. 2024-01-02T03:04:05.000000Z."""
    return ensure_utc(dt).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC3339 timestamp into an aware UTC datetime.

    Fractions beyond microseconds are truncated.

    Raises:
        ValueError: if value is not RFC3339 text.
    """
    match = _RFC3339_RE.fullmatch(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Not an RFC3339 timestamp: {value!r}")
    frac = (match.group("frac") or "")[:6].ljust(6, "0")
    tz = match.group("tz")
    tz = "+00:00" if tz in ("Z", "z") else tz
    base = match.group("base").replace("t", "T").replace(" ", "T")
    return datetime.fromisoformat(f"{base}.{frac}{tz}").astimezone(UTC)
