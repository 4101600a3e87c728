"""
Cycle Reset Engine

A cycle is either Active (inside its window) or Expired. Expiry is not
scheduled: the host calls check_and_maybe_reset() after every load and
every mutation, and an expired ledger is rolled into a new cycle on the
spot.

Rolling a cycle:
1. Capture a snapshot of the finished week
2. Hand it to every before-reset listener (the backup email)
3. Zero this week's completions, start the new cycle at now

Backlog and targets carry over; only weekly progress resets.
"""

from datetime import datetime
from typing import Callable, Optional

from src.cycle.calendar import DEFAULT_CYCLE_DAYS, is_cycle_expired, utc_now
from src.models.ledger import Ledger, TrackerSnapshot


BeforeResetListener = Callable[[TrackerSnapshot], None]


class CycleResetEngine:
    """Detects cycle expiry and resets the ledger."""

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        cycle_days: int = DEFAULT_CYCLE_DAYS,
    ):
        self._clock = clock
        self._cycle_days = cycle_days
        self._listeners: list[BeforeResetListener] = []

    @property
    def cycle_days(self) -> int:
        return self._cycle_days

    def add_before_reset_listener(self, listener: BeforeResetListener) -> None:
        """Register a callback that receives the pre-reset snapshot."""
        self._listeners.append(listener)

    def is_expired(self, ledger: Ledger, now: Optional[datetime] = None) -> bool:
        return is_cycle_expired(ledger.cycle_start, now or self._clock(), self._cycle_days)

    def check_and_maybe_reset(self, ledger: Ledger) -> Optional[TrackerSnapshot]:
        """
        Reset the ledger if its cycle has expired.

        Idempotent: right after a reset the fresh cycle_start is not
        expired, so calling again at the same instant does nothing.

        Returns:
            The pre-reset snapshot if a reset happened, else None
        """
        now = self._clock()
        if not self.is_expired(ledger, now):
            return None
        return self.reset_cycle(ledger, now)

    def reset_cycle(
        self,
        ledger: Ledger,
        now: Optional[datetime] = None,
    ) -> TrackerSnapshot:
        """
        Unconditionally roll the ledger into a new cycle.

        Listeners run synchronously before the counters are zeroed and
        see the finished week. They must not raise.

        Returns:
            The pre-reset snapshot
        """
        now = now or self._clock()
        snapshot = ledger.to_snapshot()

        for listener in self._listeners:
            listener(snapshot)

        ledger.reset_weekly_progress(now)
        return snapshot
