"""Tests for the cycle calendar helpers and the reset engine."""

from datetime import datetime, timedelta, timezone

import pytest

from src.cycle.calendar import days_left_in_cycle, is_cycle_expired
from src.cycle.reset_engine import CycleResetEngine
from src.models.ledger import Ledger
from src.models.prayer import PrayerCounters, PrayerName


NOW = datetime(2026, 10, 16, 9, 0, tzinfo=timezone.utc)


class TestCalendar:
    """Tests for days-left and expiry computation."""

    @pytest.mark.parametrize(
        "elapsed, expected",
        [
            (timedelta(0), 7),
            (timedelta(hours=23, minutes=59), 7),
            (timedelta(days=1), 6),
            (timedelta(days=5), 2),
            (timedelta(days=6.99), 1),
            (timedelta(days=7), 0),
            (timedelta(days=30), 0),
        ],
    )
    def test_days_left_truncates_whole_days(self, elapsed, expected):
        """Test partial days only count once 24h have passed."""
        assert days_left_in_cycle(NOW - elapsed, NOW) == expected

    def test_not_expired_just_before_seven_days(self):
        """Test 6.99 days elapsed is still inside the cycle."""
        assert is_cycle_expired(NOW - timedelta(days=6.99), NOW) is False

    def test_expired_at_seven_days(self):
        """Test exactly 7 days elapsed expires the cycle."""
        assert is_cycle_expired(NOW - timedelta(days=7), NOW) is True
        assert is_cycle_expired(NOW - timedelta(days=8), NOW) is True

    def test_future_start_is_not_expired(self):
        """Test a cycle start in the future leaves more than a full cycle."""
        assert days_left_in_cycle(NOW + timedelta(hours=12), NOW) == 8
        assert is_cycle_expired(NOW + timedelta(days=1), NOW) is False

    def test_naive_start_is_utc(self):
        """Test naive timestamps are compared as UTC."""
        naive = (NOW - timedelta(days=3)).replace(tzinfo=None)
        assert days_left_in_cycle(naive, NOW) == 4

    def test_custom_cycle_length(self):
        """Test the cycle length can be changed."""
        assert days_left_in_cycle(NOW - timedelta(days=3), NOW, cycle_days=14) == 11


class TestCycleResetEngine:
    """Tests for expiry detection and reset."""

    def _ledger(self, cycle_start: datetime) -> Ledger:
        return Ledger(
            prayers={
                PrayerName.SUBUH: PrayerCounters(
                    total_qada=20, weekly_target=5, completed_this_week=3
                ),
                PrayerName.ISYAK: PrayerCounters(
                    total_qada=4, weekly_target=2, completed_this_week=2
                ),
            },
            cycle_start=cycle_start,
        )

    def test_active_cycle_is_left_alone(self):
        """Test no reset happens inside the window."""
        engine = CycleResetEngine(clock=lambda: NOW)
        ledger = self._ledger(NOW - timedelta(days=3))
        before = ledger.model_dump()

        assert engine.check_and_maybe_reset(ledger) is None
        assert ledger.model_dump() == before

    def test_expired_cycle_resets(self):
        """Test an 8-day-old cycle is rolled over on check."""
        engine = CycleResetEngine(clock=lambda: NOW)
        ledger = self._ledger(NOW - timedelta(days=8))

        snapshot = engine.check_and_maybe_reset(ledger)

        assert snapshot is not None
        assert snapshot.prayers["Subuh"].completed_this_week == 3
        for counters in ledger.prayers.values():
            assert counters.completed_this_week == 0
        assert ledger.prayers[PrayerName.SUBUH].total_qada == 20
        assert ledger.prayers[PrayerName.SUBUH].weekly_target == 5
        assert ledger.prayers[PrayerName.ISYAK].weekly_target == 2
        assert ledger.cycle_start == NOW

    def test_reset_is_idempotent(self):
        """Test a second check at the same instant does not fire again."""
        calls = []
        engine = CycleResetEngine(clock=lambda: NOW)
        engine.add_before_reset_listener(calls.append)
        ledger = self._ledger(NOW - timedelta(days=8))

        engine.check_and_maybe_reset(ledger)
        assert engine.check_and_maybe_reset(ledger) is None
        assert len(calls) == 1

    def test_listener_sees_pre_reset_state(self):
        """Test listeners run before the counters are zeroed."""
        seen = []
        engine = CycleResetEngine(clock=lambda: NOW)
        engine.add_before_reset_listener(
            lambda snap: seen.append(snap.prayers["Isyak"].completed_this_week)
        )

        engine.reset_cycle(self._ledger(NOW - timedelta(days=1)))

        assert seen == [2]

    def test_manual_reset_inside_window(self):
        """Test reset_cycle works even when the cycle has not expired."""
        engine = CycleResetEngine(clock=lambda: NOW)
        ledger = self._ledger(NOW - timedelta(days=2))

        engine.reset_cycle(ledger)

        assert ledger.prayers[PrayerName.SUBUH].completed_this_week == 0
        assert ledger.cycle_start == NOW


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
