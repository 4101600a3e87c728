"""
Prayer key migration.

Stored data written by the first generation of the tracker uses the
legacy prayer identifiers (Fajr, Dhuhr, Asr, Maghrib, Isha). This module
renames them to the current identifiers on every load.

Rules:
- A mapping that already contains every current key passes through
  unchanged, even if stray legacy keys are also present.
- Otherwise each legacy key is renamed through LEGACY_NAME_MAP with its
  counters preserved. A current key that is already present wins over
  its legacy counterpart.
- Current keys with no data default to {0, 0, 0}.
"""

from typing import Mapping, TypeVar

from src.models.prayer import (
    LEGACY_NAME_MAP,
    LegacyPrayerName,
    PrayerCounters,
    PrayerName,
)

T = TypeVar("T")

CURRENT_KEYS = frozenset(name.value for name in PrayerName)
LEGACY_KEYS = frozenset(name.value for name in LegacyPrayerName)


def needs_migration(prayers: Mapping[str, object]) -> bool:
    """True if some current key is missing and some legacy key is present."""
    keys = set(prayers)
    return not CURRENT_KEYS <= keys and bool(keys & LEGACY_KEYS)


def migrate_prayer_keys(prayers: Mapping[str, T]) -> dict[str, T]:
    """
    Rename legacy prayer keys to current ones.

    Works on raw dicts as well as validated counters so it can run
    before or after schema validation. Values are passed through as-is.
    Keys that are neither current nor legacy are kept; normalize_prayers
    drops them.
    """
    if not needs_migration(prayers):
        return dict(prayers)

    migrated: dict[str, T] = {
        key: value for key, value in prayers.items() if key in CURRENT_KEYS
    }
    for legacy_name, current_name in LEGACY_NAME_MAP.items():
        if legacy_name.value in prayers and current_name.value not in migrated:
            migrated[current_name.value] = prayers[legacy_name.value]

    return migrated


def normalize_prayers(
    prayers: Mapping[str, PrayerCounters],
) -> dict[PrayerName, PrayerCounters]:
    """
    Migrate, then reduce to exactly the current prayer set.

    Counters are copied so the result never aliases the input.
    """
    migrated = migrate_prayer_keys(prayers)
    return {
        name: migrated[name.value].model_copy() if name.value in migrated else PrayerCounters()
        for name in PrayerName
    }
