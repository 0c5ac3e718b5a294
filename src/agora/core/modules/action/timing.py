"""Elapsed-time arithmetic for action time margins."""

import math
from datetime import UTC, datetime


def parse_start_time(value: object) -> datetime | None:
    """Normalize a stored start time to an aware datetime, or None if missing or malformed."""
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    return None


def compute_time_margin(start_time: datetime | None, current: datetime) -> float | None:
    """Seconds elapsed from start_time to current. Negative values are passed through."""
    if start_time is None:
        return None
    return (current - start_time).total_seconds()


def format_time_margin(seconds: float | None) -> str | None:
    """Render elapsed seconds as coarse relative text, e.g. '2 minutes ago'."""
    if seconds is None:
        return None

    whole_seconds = math.floor(seconds)
    minutes = whole_seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return _plural(days, "day")
    if hours > 0:
        return _plural(hours, "hour")
    if minutes > 0:
        return _plural(minutes, "minute")
    return _plural(whole_seconds, "second")


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"
