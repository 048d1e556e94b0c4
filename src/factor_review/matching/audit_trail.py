"""
Audit trail labels for factor search results.

Shows how often a factor was used and how long ago, e.g.
"Used 12x" and "Yesterday".
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union

Timestamp = Union[str, datetime, date]

SECONDS_PER_DAY = 86400


def _to_utc(value: Timestamp) -> datetime:
    """Normalize a timestamp to an aware UTC datetime.

    Date-only values are midnight UTC. Naive datetimes are taken as UTC.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_absolute_date(value: datetime) -> str:
    """Format like 'Nov 5, 2024'."""
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def format_relative_time(timestamp: Timestamp, now: Optional[Timestamp] = None) -> str:
    """
    Describe how long ago a timestamp was.

    Whole elapsed days (floored) decide the label:
    - 0: "Today"
    - 1: "Yesterday"
    - 2-6: "N days ago"
    - 7-29: "N weeks ago"
    - otherwise (including future timestamps): absolute date

    Args:
        timestamp: ISO string, datetime or date
        now: Reference time (defaults to the current UTC time)

    Returns:
        Label text. An unparseable string is returned unchanged.
    """
    try:
        then = _to_utc(timestamp)
    except (TypeError, ValueError):
        return str(timestamp)

    current = _to_utc(now) if now is not None else datetime.now(timezone.utc)
    diff_days = int((current - then).total_seconds() // SECONDS_PER_DAY)

    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if 0 < diff_days < 7:
        return f"{diff_days} days ago"
    if 0 < diff_days < 30:
        return f"{diff_days // 7} weeks ago"

    return format_absolute_date(then)


def format_usage(usage_count: Optional[int]) -> Optional[str]:
    """'Used 12x', or None when usage is unknown."""
    if usage_count is None:
        return None
    return f"Used {usage_count}x"


def format_audit_trail(
    usage_count: Optional[int],
    last_used: Optional[Timestamp],
    now: Optional[Timestamp] = None,
) -> Optional[str]:
    """Combine usage and recency, e.g. 'Used 12x · Last: 3 days ago'."""
    parts = []
    usage = format_usage(usage_count)
    if usage:
        parts.append(usage)
    if last_used:
        parts.append(f"Last: {format_relative_time(last_used, now)}")
    return " · ".join(parts) if parts else None
