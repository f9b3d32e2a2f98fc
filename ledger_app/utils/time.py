"""
Auction clock helpers.

The ledger never schedules anything. Whether an auction has ended is
decided by comparing its end time with a wall-clock instant passed in
by the caller, so every function here is pure apart from ``utc_now``.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

Duration = Union[int, float, timedelta]


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def get_wall_time(now: Optional[datetime] = None) -> datetime:
    """
    Return the supplied instant, or the current wall-clock time.

    Naive datetimes are interpreted as UTC.
    """
    if now is None:
        return utc_now()

    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)

    return now


def to_duration(duration: Duration) -> timedelta:
    """
    Normalize a duration given in seconds or as a timedelta.

    Raises:
        TypeError: If the value is neither a number nor a timedelta
        ValueError: If the number of seconds is not finite
        OverflowError: If the span exceeds what timedelta can hold
    """
    if isinstance(duration, timedelta):
        return duration

    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise TypeError(f"Unsupported duration type: {type(duration).__name__}")

    if not math.isfinite(duration):
        raise ValueError(f"Duration must be finite, got {duration!r}")

    return timedelta(seconds=duration)


def auction_end_time(start: datetime, duration: Duration) -> datetime:
    """Compute the end instant for an auction starting at ``start``."""
    return get_wall_time(start) + to_duration(duration)


def is_auction_expired(ends_at: datetime, now: Optional[datetime] = None) -> bool:
    """
    Check whether an auction has ended.

    An auction is live while ``now < ends_at``; the end instant itself
    already counts as expired.
    """
    return get_wall_time(now) >= get_wall_time(ends_at)


def seconds_remaining(ends_at: datetime, now: Optional[datetime] = None) -> float:
    """Seconds until the auction ends, never negative."""
    remaining = (get_wall_time(ends_at) - get_wall_time(now)).total_seconds()
    return max(remaining, 0.0)


def format_wall_time(ts: Optional[datetime]) -> Optional[str]:
    """Format a timestamp as ISO8601, passing ``None`` through."""
    if ts is None:
        return None
    return get_wall_time(ts).isoformat()


def parse_wall_time(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO8601 timestamp produced by ``format_wall_time``."""
    if value is None:
        return None
    return get_wall_time(datetime.fromisoformat(value))
