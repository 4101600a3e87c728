"""
Weekly cycle package.

Calendar helpers are re-exported here. The reset engine depends on the
ledger model, so import it from src.cycle.reset_engine directly.
"""

from src.cycle.calendar import (
    DEFAULT_CYCLE_DAYS,
    days_elapsed,
    days_left_in_cycle,
    ensure_aware,
    is_cycle_expired,
    utc_now,
)

__all__ = [
    "DEFAULT_CYCLE_DAYS",
    "days_elapsed",
    "days_left_in_cycle",
    "ensure_aware",
    "is_cycle_expired",
    "utc_now",
]
