"""
Cycle calendar helpers.

Pure functions over a stored cycle-start timestamp. Elapsed time is
counted in whole 24h periods, not calendar days: a partial day only
counts once a full 24 hours have passed.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

DEFAULT_CYCLE_DAYS = 7

_ONE_DAY = timedelta(days=1)


def utc_now() -> datetime:
    """Default clock: the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_elapsed(cycle_start: datetime, now: Optional[datetime] = None) -> int:
    """Whole days between cycle_start and now (floored, may be negative)."""
    now = ensure_aware(now or utc_now())
    return (now - ensure_aware(cycle_start)) // _ONE_DAY


def days_left_in_cycle(
    cycle_start: datetime,
    now: Optional[datetime] = None,
    cycle_days: int = DEFAULT_CYCLE_DAYS,
) -> int:
    """Days remaining in the current cycle, never below 0."""
    return max(0, cycle_days - days_elapsed(cycle_start, now))


def is_cycle_expired(
    cycle_start: datetime,
    now: Optional[datetime] = None,
    cycle_days: int = DEFAULT_CYCLE_DAYS,
) -> bool:
    """True once cycle_days full days have elapsed since cycle_start."""
    return days_left_in_cycle(cycle_start, now, cycle_days) == 0
