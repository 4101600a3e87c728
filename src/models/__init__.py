"""
Data Models Package

This package contains all Pydantic models used in the Solat Qada Tracker.
All stored and transferred data must conform to these schemas.
"""

from src.models.prayer import (
    LEGACY_NAME_MAP,
    LegacyPrayerName,
    PrayerCounters,
    PrayerName,
    parse_count,
)
from src.models.ledger import (
    ImportDocument,
    Ledger,
    SyncStatus,
    TrackerSnapshot,
    UserRecord,
)
from src.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Prayer models
    "LEGACY_NAME_MAP",
    "LegacyPrayerName",
    "PrayerCounters",
    "PrayerName",
    "parse_count",
    # Ledger models
    "ImportDocument",
    "Ledger",
    "SyncStatus",
    "TrackerSnapshot",
    "UserRecord",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
