"""
Integration tests for the tracker flows.

Every collaborator is in-memory (see conftest.py); the clock is frozen and
only moves when a test advances it. Background saves and backup emails
are awaited with wait_for_background_tasks() before asserting on them.
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone

import pytest

from src.config import TrackerSettings
from src.models.ledger import SyncStatus
from src.models.prayer import PrayerName
from src.orchestrator import SESSION_CACHE_KEY, QadaTracker, TrackerContext
from src.services.notification import (
    GUARD_CACHE_KEY,
    NotificationError,
    NotificationSinkInterface,
    WeeklySummaryNotifier,
)
from src.services.storage import InMemoryCache, StorageWriteError
from src.sync import TRACKER_CACHE_KEY, ImportFormatError, LedgerSource


NOW = datetime(2026, 10, 16, 9, 0, tzinfo=timezone.utc)


def seed_cache(cache, snapshot, username=None):
    cache.set(TRACKER_CACHE_KEY, json.dumps(snapshot.to_wire()))
    if username:
        cache.set(SESSION_CACHE_KEY, username)


def cached_prayers(cache):
    return json.loads(cache.get(TRACKER_CACHE_KEY))["prayers"]


class SlowSink(NotificationSinkInterface):
    """Sink that suspends mid-send, like SMTP in a worker thread."""

    def __init__(self):
        self.sent = []

    async def send(self, subject, body):
        await asyncio.sleep(0.01)
        self.sent.append((subject, body))


class GuardlessCache(InMemoryCache):
    """Cache that cannot record the daily backup guard."""

    def set(self, key, value):
        if key == GUARD_CACHE_KEY:
            raise StorageWriteError("disk full")
        super().set(key, value)


def make_tracker(cache, store, sink, clock):
    return QadaTracker(TrackerContext(
        cache=cache,
        user_store=store,
        notifier=WeeklySummaryNotifier(sink, cache, clock=clock),
        settings=TrackerSettings(),
        clock=clock,
    ))


async def seed_remote(store, username, pin, snapshot=None):
    await store.create_user(username, pin)
    if snapshot is not None:
        await store.save_tracker(username, snapshot)
    store.saves.clear()


class TestLoad:
    """Tests for the startup load."""

    @pytest.mark.asyncio
    async def test_fresh_start(self, tracker, cache):
        """Test an empty cache yields a default ledger starting now."""
        result = await tracker.load()

        assert result.source == LedgerSource.DEFAULT
        assert tracker.ledger.cycle_start == NOW
        assert tracker.sync_status == SyncStatus.OFFLINE
        assert cached_prayers(cache)["Subuh"]["totalQada"] == 0

    @pytest.mark.asyncio
    async def test_expired_cache_resets_and_sends_backup(
        self, tracker, cache, sink, make_snapshot
    ):
        """Test an 8-day-old cycle rolls over on load and emails the old week."""
        seed_cache(cache, make_snapshot(NOW - timedelta(days=8), Subuh=(10, 5, 3)))

        await tracker.load()
        await tracker.wait_for_background_tasks()

        counters = tracker.ledger.prayers[PrayerName.SUBUH]
        assert counters.completed_this_week == 0
        assert counters.total_qada == 10
        assert counters.weekly_target == 5
        assert tracker.ledger.cycle_start == NOW

        assert len(sink.sent) == 1
        assert "Subuh: 3 completed | 10 remaining" in sink.sent[0][1]
        assert cache.get(GUARD_CACHE_KEY) == "2026-10-16"
        assert cached_prayers(cache)["Subuh"]["completedThisWeek"] == 0

    @pytest.mark.asyncio
    async def test_backup_failure_does_not_block_reset(
        self, tracker, cache, sink, make_snapshot
    ):
        """Test a failing email leaves the reset in place and the guard unset."""
        sink.fail = True
        seed_cache(cache, make_snapshot(NOW - timedelta(days=8), Subuh=(10, 5, 3)))

        await tracker.load()
        await tracker.wait_for_background_tasks()

        assert tracker.ledger.prayers[PrayerName.SUBUH].completed_this_week == 0
        assert tracker.last_notification_error is not None
        assert cache.get(GUARD_CACHE_KEY) is None

    @pytest.mark.asyncio
    async def test_legacy_cache_is_migrated(self, tracker, cache, make_snapshot):
        """Test a cache written with legacy keys loads under current names."""
        seed_cache(cache, make_snapshot(NOW - timedelta(days=1), Fajr=(5, 2, 1), Isha=(3, 0, 0)))

        result = await tracker.load()

        assert result.migrated is True
        assert tracker.ledger.prayers[PrayerName.SUBUH].total_qada == 5
        assert tracker.ledger.prayers[PrayerName.ISYAK].total_qada == 3
        assert set(cached_prayers(cache)) == {p.value for p in PrayerName}

    @pytest.mark.asyncio
    async def test_corrupt_cache_falls_back_to_default(self, tracker, cache):
        """Test an unreadable cache entry is replaced with a fresh ledger."""
        cache.set(TRACKER_CACHE_KEY, "{not json")

        result = await tracker.load()

        assert result.source == LedgerSource.DEFAULT
        assert "Subuh" in cached_prayers(cache)

    @pytest.mark.asyncio
    async def test_cache_without_week_start_keeps_backlog(self, tracker, cache):
        """Test a cached tracker missing weekStartDate loads its prayers."""
        cache.set(TRACKER_CACHE_KEY, json.dumps({
            "prayers": {"Subuh": {"totalQada": 40, "weeklyTarget": 5, "completedThisWeek": 2}},
        }))

        result = await tracker.load()

        assert result.source == LedgerSource.CACHE
        counters = tracker.ledger.prayers[PrayerName.SUBUH]
        assert counters.total_qada == 40
        assert counters.completed_this_week == 2
        assert tracker.ledger.cycle_start == NOW
        assert json.loads(cache.get(TRACKER_CACHE_KEY))["weekStartDate"].startswith("2026-10-16")

    @pytest.mark.asyncio
    async def test_remote_wins_over_cache(self, tracker, cache, store, make_snapshot):
        """Test a session's remote tracker replaces the cache without an echo save."""
        seed_cache(
            cache,
            make_snapshot(NOW - timedelta(days=3), Subuh=(2, 2, 2), Asar=(8, 0, 0)),
            username="alice",
        )
        await seed_remote(
            store, "alice", "1234", make_snapshot(NOW - timedelta(days=1), Subuh=(9, 3, 1))
        )

        result = await tracker.load()
        await tracker.wait_for_background_tasks()

        assert result.source == LedgerSource.REMOTE
        assert tracker.username == "alice"
        assert tracker.ledger.prayers[PrayerName.SUBUH].total_qada == 9
        assert tracker.ledger.prayers[PrayerName.ASAR].total_qada == 0
        assert tracker.ledger.cycle_start == NOW - timedelta(days=1)
        assert store.saves == []
        assert tracker.sync_status == SyncStatus.SYNCED
        assert cached_prayers(cache)["Subuh"]["totalQada"] == 9

    @pytest.mark.asyncio
    async def test_first_mutation_after_remote_load_saves(
        self, tracker, cache, store, make_snapshot
    ):
        """Test suppression only swallows the load's own save."""
        cache.set(SESSION_CACHE_KEY, "alice")
        await seed_remote(
            store, "alice", "1234", make_snapshot(NOW - timedelta(days=1), Subuh=(9, 3, 1))
        )
        await tracker.load()
        await tracker.wait_for_background_tasks()

        await tracker.set_total(PrayerName.SUBUH, 7)
        await tracker.wait_for_background_tasks()

        assert len(store.saves) == 1
        username, snapshot = store.saves[0]
        assert username == "alice"
        assert snapshot.prayers["Subuh"].total_qada == 7
        assert tracker.sync_status == SyncStatus.SYNCED

    @pytest.mark.asyncio
    async def test_session_without_remote_tracker_uploads_cache(
        self, tracker, cache, store, make_snapshot
    ):
        """Test a user with no stored tracker gets the cached ledger pushed."""
        seed_cache(cache, make_snapshot(NOW - timedelta(days=2), Zohor=(4, 1, 0)), username="alice")
        await seed_remote(store, "alice", "1234")

        result = await tracker.load()
        await tracker.wait_for_background_tasks()

        assert result.source == LedgerSource.CACHE
        assert (await store.load_tracker("alice")).prayers["Zohor"].total_qada == 4

    @pytest.mark.asyncio
    async def test_remote_read_failure_uses_cache(
        self, tracker, cache, store, make_snapshot
    ):
        """Test an unreachable remote store falls back to the cache."""
        seed_cache(cache, make_snapshot(NOW - timedelta(days=2), Zohor=(4, 1, 0)), username="alice")
        store.fail_reads = True

        result = await tracker.load()
        await tracker.wait_for_background_tasks()

        assert result.source == LedgerSource.CACHE
        assert tracker.ledger.prayers[PrayerName.ZOHOR].total_qada == 4


class TestMutations:
    """Tests for the mutate, persist, save flow."""

    @pytest.mark.asyncio
    async def test_cache_written_before_remote_save(self, tracker, cache, store):
        """Test the cache holds the change before the remote save runs."""
        await tracker.register("alice", "1234")
        await tracker.wait_for_background_tasks()
        store.saves.clear()

        await tracker.set_total(PrayerName.ASAR, 12)

        assert cached_prayers(cache)["Asar"]["totalQada"] == 12
        assert store.saves == []
        assert tracker.sync_status == SyncStatus.PENDING

        await tracker.wait_for_background_tasks()
        assert len(store.saves) == 1
        assert tracker.sync_status == SyncStatus.SYNCED

    @pytest.mark.asyncio
    async def test_remote_save_failure_keeps_ledger(self, tracker, cache, store):
        """Test a failed save flags an error and keeps the local change."""
        await tracker.register("alice", "1234")
        await tracker.wait_for_background_tasks()
        store.fail_saves = True

        await tracker.set_weekly_target(PrayerName.MAGHRIB, "3")
        await tracker.wait_for_background_tasks()

        assert tracker.sync_status == SyncStatus.ERROR
        assert tracker.ledger.prayers[PrayerName.MAGHRIB].weekly_target == 3
        assert cached_prayers(cache)["Maghrib"]["weeklyTarget"] == 3

    @pytest.mark.asyncio
    async def test_saves_arrive_in_order(self, tracker, store):
        """Test back-to-back mutations reach the store oldest first."""
        await tracker.register("alice", "1234")
        await tracker.wait_for_background_tasks()
        store.saves.clear()

        await tracker.set_total(PrayerName.SUBUH, 10)
        await tracker.record_completion(PrayerName.SUBUH, 4)
        await tracker.wait_for_background_tasks()

        assert [s.prayers["Subuh"].total_qada for _, s in store.saves] == [10, 6]
        assert (await store.load_tracker("alice")).prayers["Subuh"].total_qada == 6

    @pytest.mark.asyncio
    async def test_zero_completion_is_noop(self, tracker, cache, store):
        """Test recording 0 changes nothing and schedules no save."""
        await tracker.register("alice", "1234")
        await tracker.set_total(PrayerName.SUBUH, 5)
        await tracker.wait_for_background_tasks()
        store.saves.clear()
        before = cache.get(TRACKER_CACHE_KEY)

        assert await tracker.record_completion(PrayerName.SUBUH, "0") is False
        await tracker.wait_for_background_tasks()

        assert store.saves == []
        assert cache.get(TRACKER_CACHE_KEY) == before

    @pytest.mark.asyncio
    async def test_local_only_mutation(self, tracker, cache, store):
        """Test mutations without a session never touch the remote store."""
        await tracker.record_completion(PrayerName.ISYAK, 2)
        await tracker.wait_for_background_tasks()

        assert store.saves == []
        assert tracker.sync_status == SyncStatus.OFFLINE
        assert cached_prayers(cache)["Isyak"]["completedThisWeek"] == 2

    @pytest.mark.asyncio
    async def test_mutation_after_expiry_resets(self, tracker, clock, sink):
        """Test the cycle check runs after every mutation."""
        await tracker.set_weekly_target(PrayerName.SUBUH, 5)
        await tracker.record_completion(PrayerName.SUBUH, 2)
        clock.advance(days=7)

        await tracker.set_total(PrayerName.ZOHOR, 1)
        await tracker.wait_for_background_tasks()

        assert tracker.ledger.prayers[PrayerName.SUBUH].completed_this_week == 0
        assert tracker.ledger.cycle_start == clock()
        assert len(sink.sent) == 1

    @pytest.mark.asyncio
    async def test_manual_reset(self, tracker, sink):
        """Test reset_week returns the finished week and starts a new one."""
        await tracker.record_completion(PrayerName.ASAR, 3)

        snapshot = await tracker.reset_week()
        await tracker.wait_for_background_tasks()

        assert snapshot.prayers["Asar"].completed_this_week == 3
        assert tracker.ledger.prayers[PrayerName.ASAR].completed_this_week == 0
        assert len(sink.sent) == 1

    @pytest.mark.asyncio
    async def test_active_cycle_is_not_reset(self, tracker, clock):
        """Test checking inside the window changes nothing."""
        await tracker.record_completion(PrayerName.ASAR, 3)
        clock.advance(days=6, hours=23)

        assert await tracker.check_and_maybe_reset_cycle() is False
        assert tracker.ledger.prayers[PrayerName.ASAR].completed_this_week == 3


class TestDerivedValues:
    """Tests for values computed from the ledger and the clock."""

    @pytest.mark.asyncio
    async def test_behind_target_near_cycle_end(self, tracker, cache, make_snapshot):
        """Test the warning fires with 2 days left and an unmet target."""
        seed_cache(
            cache,
            make_snapshot(NOW - timedelta(days=5), Subuh=(10, 5, 3), Asar=(4, 2, 2)),
        )
        await tracker.load()

        assert tracker.days_left == 2
        assert tracker.is_behind_target(PrayerName.SUBUH) is True
        assert tracker.is_behind_target(PrayerName.ASAR) is False
        assert tracker.is_behind_target(PrayerName.ZOHOR) is False
        assert tracker.progress(PrayerName.SUBUH) == 60

    @pytest.mark.asyncio
    async def test_no_warning_early_in_cycle(self, tracker, cache, make_snapshot):
        """Test an unmet target is fine with plenty of days left."""
        seed_cache(cache, make_snapshot(NOW - timedelta(days=1), Subuh=(10, 5, 0)))
        await tracker.load()

        assert tracker.days_left == 6
        assert tracker.is_behind_target(PrayerName.SUBUH) is False


class TestSession:
    """Tests for login, registration and logout."""

    @pytest.mark.asyncio
    async def test_login_replaces_local_ledger(self, tracker, cache, store, make_snapshot):
        """Test a stored tracker wins wholesale and is not echoed back."""
        await tracker.set_total(PrayerName.ASAR, 9)
        await seed_remote(
            store, "alice", "1234", make_snapshot(NOW - timedelta(days=2), Subuh=(4, 1, 0))
        )

        result = await tracker.login("Alice", "1234")
        await tracker.wait_for_background_tasks()

        assert result.success is True
        assert tracker.username == "alice"
        assert tracker.source == LedgerSource.REMOTE
        assert tracker.ledger.prayers[PrayerName.SUBUH].total_qada == 4
        assert tracker.ledger.prayers[PrayerName.ASAR].total_qada == 0
        assert store.saves == []
        assert cache.get(SESSION_CACHE_KEY) == "alice"
        assert cached_prayers(cache)["Subuh"]["totalQada"] == 4

    @pytest.mark.asyncio
    async def test_login_without_tracker_uploads_local(self, tracker, store):
        """Test logging into an empty account pushes the local ledger."""
        await tracker.set_total(PrayerName.ASAR, 9)
        await seed_remote(store, "alice", "1234")

        await tracker.login("alice", "1234")
        await tracker.wait_for_background_tasks()

        assert (await store.load_tracker("alice")).prayers["Asar"].total_qada == 9
        assert tracker.sync_status == SyncStatus.SYNCED

    @pytest.mark.asyncio
    async def test_wrong_pin(self, tracker, store, cache):
        """Test a bad PIN leaves the tracker logged out."""
        await seed_remote(store, "alice", "1234")

        result = await tracker.login("alice", "0000")

        assert result.success is False
        assert result.error == "Wrong PIN"
        assert tracker.username is None
        assert cache.get(SESSION_CACHE_KEY) is None

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, tracker):
        """Test logging in as a missing user reports it."""
        result = await tracker.login("ghost", "1234")
        assert result.error == "User not found"

    @pytest.mark.asyncio
    async def test_login_store_unreachable(self, tracker, store):
        """Test a store failure during login is reported, not raised."""
        store.fail_reads = True

        result = await tracker.login("alice", "1234")

        assert result.success is False
        assert result.error == "Could not reach the server, try again later"
        assert tracker.username is None

    @pytest.mark.asyncio
    async def test_register_short_pin(self, tracker, store):
        """Test a too-short PIN is refused before reaching the store."""
        result = await tracker.register("bob", "12")

        assert result.success is False
        assert result.error_type == "InvalidPinError"
        assert await store.get_user("bob") is None

    @pytest.mark.asyncio
    async def test_register_uploads_ledger(self, tracker, cache, store):
        """Test registration saves the current ledger to the new account."""
        await tracker.set_total(PrayerName.ZOHOR, 3)

        result = await tracker.register("Bob", "1234")
        await tracker.wait_for_background_tasks()

        assert result.success is True
        assert tracker.username == "bob"
        assert cache.get(SESSION_CACHE_KEY) == "bob"
        record = await store.get_user("bob")
        assert record.pin == "1234"
        assert record.tracker.prayers["Zohor"].total_qada == 3
        assert tracker.sync_status == SyncStatus.SYNCED

    @pytest.mark.asyncio
    async def test_register_taken(self, tracker, store):
        """Test registering an existing name fails."""
        await seed_remote(store, "bob", "1234")

        result = await tracker.register("BOB", "5678")

        assert result.success is False
        assert result.error == "Username already taken"
        assert tracker.username is None

    @pytest.mark.asyncio
    async def test_logout(self, tracker, cache, store):
        """Test logout keeps the ledger and stops remote saves."""
        await tracker.register("alice", "1234")
        await tracker.set_total(PrayerName.SUBUH, 4)
        await tracker.wait_for_background_tasks()
        store.saves.clear()

        await tracker.logout()
        await tracker.set_total(PrayerName.SUBUH, 5)
        await tracker.wait_for_background_tasks()

        assert tracker.username is None
        assert tracker.sync_status == SyncStatus.OFFLINE
        assert cache.get(SESSION_CACHE_KEY) is None
        assert tracker.ledger.prayers[PrayerName.SUBUH].total_qada == 5
        assert store.saves == []

    @pytest.mark.asyncio
    async def test_logout_during_pending_save(self, tracker, store):
        """Test a save finishing after logout does not revive the status."""
        await tracker.register("alice", "1234")
        await tracker.set_total(PrayerName.SUBUH, 4)

        await tracker.logout()
        await tracker.wait_for_background_tasks()

        assert tracker.sync_status == SyncStatus.OFFLINE
        assert (await store.load_tracker("alice")).prayers["Subuh"].total_qada == 4

    @pytest.mark.asyncio
    async def test_local_only_tracker_cannot_login(self, cache, clock):
        """Test login without a remote store fails cleanly."""
        tracker = QadaTracker(TrackerContext(cache=cache, clock=clock))

        result = await tracker.login("alice", "1234")

        assert result.success is False
        assert tracker.username is None


class TestTransfer:
    """Tests for export and import through the tracker."""

    @pytest.mark.asyncio
    async def test_export(self, tracker):
        """Test export returns a dated filename and the wire document."""
        await tracker.set_total(PrayerName.SUBUH, 6)

        filename, text = await tracker.export_data()

        assert filename == "solat-qada-backup-2026-10-16.json"
        assert json.loads(text)["prayers"]["Subuh"]["totalQada"] == 6

    @pytest.mark.asyncio
    async def test_import_week_start_only(self, tracker, cache, store):
        """Test importing just weekStartDate keeps prayers and skips the echo save."""
        await tracker.register("alice", "1234")
        await tracker.set_total(PrayerName.SUBUH, 6)
        await tracker.wait_for_background_tasks()
        store.saves.clear()

        start = (NOW - timedelta(days=3)).isoformat()
        applied = await tracker.import_data(json.dumps({"weekStartDate": start}))
        await tracker.wait_for_background_tasks()

        assert applied == ["weekStartDate"]
        assert tracker.source == LedgerSource.IMPORT
        assert tracker.ledger.prayers[PrayerName.SUBUH].total_qada == 6
        assert tracker.ledger.cycle_start == NOW - timedelta(days=3)
        assert tracker.days_left == 4
        assert store.saves == []
        assert tracker.suppress_next_save is False
        assert json.loads(cache.get(TRACKER_CACHE_KEY))["weekStartDate"].startswith("2026-10-13")

    @pytest.mark.asyncio
    async def test_import_then_mutation_saves(self, tracker, store):
        """Test the mutation after an import reaches the store."""
        await tracker.register("alice", "1234")
        await tracker.wait_for_background_tasks()
        store.saves.clear()

        await tracker.import_data(json.dumps({
            "prayers": {"Subuh": {"totalQada": 20, "weeklyTarget": 5, "completedThisWeek": 0}},
        }))
        await tracker.record_completion(PrayerName.SUBUH, 1)
        await tracker.wait_for_background_tasks()

        assert len(store.saves) == 1
        assert store.saves[0][1].prayers["Subuh"].total_qada == 19

    @pytest.mark.asyncio
    async def test_import_expired_week_resets(self, tracker, sink):
        """Test importing an old cycle start triggers the rollover."""
        await tracker.import_data(json.dumps({
            "prayers": {"Isha": {"totalQada": 3, "weeklyTarget": 2, "completedThisWeek": 2}},
            "weekStartDate": (NOW - timedelta(days=10)).isoformat(),
        }))
        await tracker.wait_for_background_tasks()

        counters = tracker.ledger.prayers[PrayerName.ISYAK]
        assert counters.total_qada == 3
        assert counters.completed_this_week == 0
        assert tracker.ledger.cycle_start == NOW
        assert "Isyak: 2 completed | 3 remaining" in sink.sent[0][1]

    @pytest.mark.asyncio
    async def test_malformed_import(self, tracker, cache):
        """Test a bad document raises and leaves everything untouched."""
        await tracker.set_total(PrayerName.SUBUH, 6)
        before = cache.get(TRACKER_CACHE_KEY)

        with pytest.raises(ImportFormatError):
            await tracker.import_data("{not json")

        assert tracker.ledger.prayers[PrayerName.SUBUH].total_qada == 6
        assert tracker.source == LedgerSource.DEFAULT
        assert cache.get(TRACKER_CACHE_KEY) == before


class TestBackupNow:
    """Tests for the forced backup email."""

    @pytest.mark.asyncio
    async def test_send_ignores_guard(self, tracker, cache, sink):
        """Test a manual backup goes out even if one was sent today."""
        cache.set(GUARD_CACHE_KEY, "2026-10-16")
        await tracker.set_total(PrayerName.SUBUH, 2)

        assert await tracker.send_backup_now() is True
        assert "Subuh: 0 completed | 2 remaining" in sink.sent[0][1]

    @pytest.mark.asyncio
    async def test_send_failure(self, tracker, sink):
        """Test a delivery failure is raised and remembered."""
        sink.fail = True

        with pytest.raises(NotificationError):
            await tracker.send_backup_now()
        assert tracker.last_notification_error == "smtp down"

    @pytest.mark.asyncio
    async def test_back_to_back_resets_send_once(self, cache, store, clock):
        """Test two resets on one day email once even when the send suspends."""
        sink = SlowSink()
        tracker = make_tracker(cache, store, sink, clock)
        await tracker.record_completion(PrayerName.SUBUH, 2)

        await tracker.reset_week()
        await tracker.reset_week()
        await tracker.wait_for_background_tasks()

        assert len(sink.sent) == 1
        assert "Subuh: 2 completed" in sink.sent[0][1]

    @pytest.mark.asyncio
    async def test_guard_write_failure_after_send(self, store, sink, clock):
        """Test a delivered backup is reported as sent when the guard cannot be saved."""
        tracker = make_tracker(GuardlessCache(), store, sink, clock)

        assert await tracker.send_backup_now() is True
        assert len(sink.sent) == 1
        assert tracker.last_notification_error is None

    @pytest.mark.asyncio
    async def test_guard_write_failure_on_cycle_backup(self, store, sink, clock):
        """Test the automatic backup survives a failed guard write."""
        tracker = make_tracker(GuardlessCache(), store, sink, clock)

        await tracker.reset_week()
        await tracker.wait_for_background_tasks()

        assert len(sink.sent) == 1
        assert tracker.last_notification_error is None

    @pytest.mark.asyncio
    async def test_no_notifier(self, cache, clock):
        """Test a tracker without email configured refuses to send."""
        tracker = QadaTracker(TrackerContext(cache=cache, clock=clock))
        with pytest.raises(NotificationError):
            await tracker.send_backup_now()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
