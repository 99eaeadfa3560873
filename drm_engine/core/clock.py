"""
Clock helpers.

The evaluator reads day-of-week and hour from a timezone-aware local clock;
timestamps are persisted as naive UTC.
"""

from collections.abc import Callable
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def local_clock(tz_name: str = "") -> Clock:
    """Clock in the given IANA zone, or in server local time when empty."""
    tz = ZoneInfo(tz_name) if tz_name else None

    def now() -> datetime:
        if tz is not None:
            return datetime.now(tz)
        return datetime.now().astimezone()

    return now


def to_utc_naive(value: datetime) -> datetime:
    """Normalize to naive UTC. Naive inputs are assumed to be UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def js_weekday(value: datetime) -> int:
    """Day of week with 0 = Sunday ... 6 = Saturday."""
    return (value.weekday() + 1) % 7
