"""
Ledger Models for Solat Qada Tracker

The ledger is the single piece of state the tracker owns:
one PrayerCounters per prayer plus the start of the current cycle.

Wire format (local cache, remote store, export files, backup email):

    {
        "prayers": {"Subuh": {"totalQada": 5, "weeklyTarget": 2,
                              "completedThisWeek": 1}, ...},
        "weekStartDate": "2026-10-12T08:30:00+00:00"
    }

DESIGN DECISION: Ledger mutations are total.
Bad input is clamped by parse_count, never rejected, so none of the
mutation methods can raise.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.cycle.calendar import ensure_aware, utc_now
from src.models.prayer import PrayerCounters, PrayerName, parse_count


DEFAULT_WARNING_DAYS_LEFT = 2


def default_prayers() -> dict[PrayerName, PrayerCounters]:
    """Fresh {0, 0, 0} counters for every prayer, in display order."""
    return {name: PrayerCounters() for name in PrayerName}


# =============================================================================
# WIRE MODELS
# =============================================================================

class TrackerSnapshot(BaseModel):
    """
    Serialized ledger as stored and transferred.

    Prayer keys are kept as plain strings here because stored data may
    still use legacy identifiers; key migration turns them into
    PrayerName values when a Ledger is built from a snapshot.
    """
    model_config = ConfigDict(populate_by_name=True)

    prayers: dict[str, PrayerCounters] = Field(
        default_factory=dict,
        description="Counters keyed by prayer identifier"
    )
    week_start_date: datetime = Field(
        ...,
        alias="weekStartDate",
        description="When the current weekly cycle began"
    )

    @field_validator("week_start_date")
    @classmethod
    def make_aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @classmethod
    def from_stored(cls, data: Any, now: Optional[datetime] = None) -> "TrackerSnapshot":
        """
        Validate a document read back from the cache or the remote store.

        The two fields are read independently: a document without a
        weekStartDate keeps its prayers and starts the cycle at now.

        Raises:
            ValidationError: If a present field is invalid
        """
        if isinstance(data, dict) and data.get("weekStartDate") is None:
            data = {**data, "weekStartDate": now or utc_now()}
        return cls.model_validate(data)

    def to_wire(self) -> dict[str, Any]:
        """Plain JSON-compatible dict using the stored field names."""
        return self.model_dump(mode="json", by_alias=True)


class ImportDocument(BaseModel):
    """
    A user-supplied backup document.

    Both fields are optional and applied independently: a document
    carrying only weekStartDate leaves the prayers untouched.
    """
    model_config = ConfigDict(populate_by_name=True)

    prayers: Optional[dict[str, PrayerCounters]] = None
    week_start_date: Optional[datetime] = Field(
        default=None,
        alias="weekStartDate",
    )

    @field_validator("week_start_date")
    @classmethod
    def make_aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(v) if v is not None else None

    @property
    def has_prayers(self) -> bool:
        return self.prayers is not None

    @property
    def has_week_start_date(self) -> bool:
        return self.week_start_date is not None


class UserRecord(BaseModel):
    """Remote per-user document: the PIN and the last synced tracker."""

    pin: str
    tracker: Optional[TrackerSnapshot] = None


# =============================================================================
# LEDGER
# =============================================================================

class Ledger(BaseModel):
    """
    In-memory tracker state and its mutation API.

    Always holds exactly the current PrayerName set as keys.
    """

    prayers: dict[PrayerName, PrayerCounters] = Field(
        default_factory=default_prayers,
    )
    cycle_start: datetime = Field(
        default_factory=utc_now,
    )

    @field_validator("cycle_start")
    @classmethod
    def make_aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @model_validator(mode="after")
    def fill_missing_prayers(self) -> "Ledger":
        """Ensure every prayer has counters, in display order."""
        self.prayers = {
            name: self.prayers.get(name) or PrayerCounters()
            for name in PrayerName
        }
        return self

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def default(cls, now: Optional[datetime] = None) -> "Ledger":
        return cls(prayers=default_prayers(), cycle_start=now or utc_now())

    @classmethod
    def from_snapshot(cls, snapshot: TrackerSnapshot) -> "Ledger":
        """Build a ledger from stored data, migrating legacy keys."""
        # Local import: src.sync imports this module
        from src.sync.migration import normalize_prayers

        return cls(
            prayers=normalize_prayers(snapshot.prayers),
            cycle_start=snapshot.week_start_date,
        )

    def to_snapshot(self) -> TrackerSnapshot:
        return TrackerSnapshot(
            prayers={
                name.value: counters.model_copy()
                for name, counters in self.prayers.items()
            },
            week_start_date=self.cycle_start,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def set_total(self, name: PrayerName, raw_value: Any) -> None:
        """Replace the outstanding backlog for a prayer."""
        self.prayers[PrayerName(name)].total_qada = parse_count(raw_value)

    def set_weekly_target(self, name: PrayerName, raw_value: Any) -> None:
        """Replace the weekly target for a prayer (0 clears it)."""
        self.prayers[PrayerName(name)].weekly_target = parse_count(raw_value)

    def record_completion(self, name: PrayerName, raw_count: Any) -> bool:
        """
        Record completed Qada prayers.

        Each completion both reduces the backlog (never below zero) and
        counts towards this week's target.

        Returns:
            False if the parsed count was 0 and nothing changed
        """
        count = parse_count(raw_count)
        if count == 0:
            return False

        counters = self.prayers[PrayerName(name)]
        counters.total_qada = max(0, counters.total_qada - count)
        counters.completed_this_week += count
        return True

    def reset_weekly_progress(self, now: datetime) -> None:
        """Zero this week's completions and start a new cycle at now."""
        for counters in self.prayers.values():
            counters.completed_this_week = 0
        self.cycle_start = ensure_aware(now)

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    def progress(self, name: PrayerName) -> int:
        """
        Weekly progress as a whole percentage, 0..100.

        Rounds half up. Capped at 100 for display only; the underlying
        completion count is never capped.
        """
        counters = self.prayers[PrayerName(name)]
        target = counters.weekly_target
        if target == 0:
            return 0
        percent = (200 * counters.completed_this_week + target) // (2 * target)
        return min(100, percent)

    def is_behind_target(
        self,
        name: PrayerName,
        days_left: int,
        warning_days_left: int = DEFAULT_WARNING_DAYS_LEFT,
    ) -> bool:
        """True when the cycle is nearly over and the target is unmet."""
        counters = self.prayers[PrayerName(name)]
        return (
            days_left <= warning_days_left
            and counters.weekly_target > 0
            and counters.completed_this_week < counters.weekly_target
        )

    def is_backlog_cleared(self, name: PrayerName) -> bool:
        return self.prayers[PrayerName(name)].total_qada == 0


# =============================================================================
# SESSION STATUS
# =============================================================================

class SyncStatus(str, Enum):
    """State of the remote copy as last observed."""
    OFFLINE = "offline"     # No session, nothing is synced
    PENDING = "pending"     # A remote save is in flight
    SYNCED = "synced"       # Last remote save succeeded
    ERROR = "error"         # Last remote load or save failed
