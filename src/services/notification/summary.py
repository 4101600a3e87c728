"""
Weekly backup summary.

At most one summary is delivered per calendar day. The day of the last
successful delivery is kept in the local cache (the notification guard);
it is only written after the sink reports success, so a failed attempt
never blocks a later retry. Sends are serialized: a call waiting on an
in-flight send checks the guard only after that send has finished.
"""

import asyncio
import json
from datetime import date, datetime
from typing import Callable, Optional

from src.cycle.calendar import utc_now
from src.models.ledger import Ledger, TrackerSnapshot
from src.services.notification.interface import (
    NotificationError,
    NotificationSinkInterface,
)
from src.services.storage.interface import (
    LocalCacheInterface,
    StorageReadError,
)


GUARD_CACHE_KEY = "solat-qada-last-backup"


def build_summary_lines(snapshot: TrackerSnapshot) -> list[str]:
    """One "<name>: <completed> completed | <remaining> remaining" line per prayer."""
    ledger = Ledger.from_snapshot(snapshot)
    return [
        f"{name.value}: {counters.completed_this_week} completed | "
        f"{counters.total_qada} remaining"
        for name, counters in ledger.prayers.items()
    ]


def build_summary_body(snapshot: TrackerSnapshot) -> str:
    """Summary lines followed by the full snapshot, restorable via import."""
    lines = [
        f"Week starting {snapshot.week_start_date.date().isoformat()}",
        "",
        *build_summary_lines(snapshot),
        "",
        "Backup data:",
        json.dumps(snapshot.to_wire(), indent=2),
    ]
    return "\n".join(lines)


class WeeklySummaryNotifier:
    """Sends the weekly summary through a sink, guarded per day."""

    def __init__(
        self,
        sink: NotificationSinkInterface,
        cache: LocalCacheInterface,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._sink = sink
        self._cache = cache
        self._clock = clock
        # Held across the guard check and the send
        self._send_lock = asyncio.Lock()

    def _today(self) -> date:
        return self._clock().date()

    def last_sent(self) -> Optional[date]:
        """Day of the last successful delivery, if known."""
        try:
            raw = self._cache.get(GUARD_CACHE_KEY)
        except StorageReadError:
            return None
        if not raw:
            return None
        try:
            return date.fromisoformat(raw)
        except ValueError:
            return None

    async def maybe_send_weekly_summary(
        self,
        snapshot: TrackerSnapshot,
        force_bypass_guard: bool = False,
    ) -> bool:
        """
        Send the summary unless one already went out today.

        Args:
            snapshot: The ledger state to report (pre-reset on cycle end)
            force_bypass_guard: Send even if already sent today

        Returns:
            True if sent, False if skipped by the guard

        Raises:
            NotificationError: If delivery fails (guard left untouched)
        """
        async with self._send_lock:
            today = self._today()
            if not force_bypass_guard and self.last_sent() == today:
                return False

            subject = f"Solat Qada weekly backup - {today.isoformat()}"
            body = build_summary_body(snapshot)

            try:
                await self._sink.send(subject, body)
            except NotificationError:
                raise
            except Exception as e:
                raise NotificationError(f"Notification sink failed: {e}") from e

            self._cache.set(GUARD_CACHE_KEY, today.isoformat())
            return True
