"""
Shared fixtures.

No test touches the network: the remote store, the notification sink and
the clock are all replaced with in-memory fakes.
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.config import TrackerSettings
from src.models.ledger import TrackerSnapshot
from src.orchestrator import QadaTracker, TrackerContext
from src.services.notification import (
    NotificationError,
    NotificationSinkInterface,
    WeeklySummaryNotifier,
)
from src.services.storage import (
    InMemoryCache,
    InMemoryUserStore,
    StorageReadError,
    StorageWriteError,
)


NOW = datetime(2026, 10, 16, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingUserStore(InMemoryUserStore):
    """In-memory store that counts calls and can be told to fail."""

    def __init__(self):
        super().__init__()
        self.saves: list[tuple[str, TrackerSnapshot]] = []
        self.fail_saves = False
        self.fail_reads = False

    async def get_user(self, username):
        if self.fail_reads:
            raise StorageReadError("remote unavailable")
        return await super().get_user(username)

    async def save_tracker(self, username, snapshot):
        self.saves.append((username, snapshot))
        if self.fail_saves:
            raise StorageWriteError("remote unavailable")
        await super().save_tracker(username, snapshot)


class RecordingSink(NotificationSinkInterface):
    """Sink that keeps every message, or fails on demand."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    async def send(self, subject: str, body: str) -> None:
        if self.fail:
            raise NotificationError("smtp down")
        self.sent.append((subject, body))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache():
    return InMemoryCache()


@pytest.fixture
def store():
    return RecordingUserStore()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def notifier(sink, cache, clock):
    return WeeklySummaryNotifier(sink, cache, clock=clock)


@pytest.fixture
def tracker(cache, store, notifier, clock):
    context = TrackerContext(
        cache=cache,
        user_store=store,
        notifier=notifier,
        settings=TrackerSettings(),
        clock=clock,
    )
    return QadaTracker(context)


@pytest.fixture
def make_snapshot():
    """Build a snapshot from (total, target, completed) tuples keyed by name."""
    def build(week_start: datetime, **prayers) -> TrackerSnapshot:
        return TrackerSnapshot(
            prayers={
                name: {
                    "totalQada": total,
                    "weeklyTarget": target,
                    "completedThisWeek": completed,
                }
                for name, (total, target, completed) in prayers.items()
            },
            week_start_date=week_start,
        )
    return build
