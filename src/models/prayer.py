"""
Prayer Models for Solat Qada Tracker

Defines the fixed set of prayer identifiers and the per-prayer counters
that make up the ledger.

DESIGN DECISION: Counters never reject user input.
Whatever the user types is parsed leniently and clamped at zero, so a
stray keystroke can never put the ledger into an invalid state.
"""

import math
import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class PrayerName(str, Enum):
    """
    Current prayer identifiers, in display order.

    Order only matters for display; nothing else depends on it.
    """
    SUBUH = "Subuh"
    ZOHOR = "Zohor"
    ASAR = "Asar"
    MAGHRIB = "Maghrib"
    ISYAK = "Isyak"


class LegacyPrayerName(str, Enum):
    """
    Prayer identifiers used by the first generation of stored data.

    Still accepted on load and renamed through LEGACY_NAME_MAP.
    """
    FAJR = "Fajr"
    DHUHR = "Dhuhr"
    ASR = "Asr"
    MAGHRIB = "Maghrib"
    ISHA = "Isha"


LEGACY_NAME_MAP: dict[LegacyPrayerName, PrayerName] = {
    LegacyPrayerName.FAJR: PrayerName.SUBUH,
    LegacyPrayerName.DHUHR: PrayerName.ZOHOR,
    LegacyPrayerName.ASR: PrayerName.ASAR,
    LegacyPrayerName.MAGHRIB: PrayerName.MAGHRIB,
    LegacyPrayerName.ISHA: PrayerName.ISYAK,
}


# =============================================================================
# COUNTERS
# =============================================================================

class PrayerCounters(BaseModel):
    """
    Backlog and weekly progress for a single prayer.

    Field aliases match the stored document format (camelCase), while
    Python code uses snake_case names.

    completed_this_week is deliberately NOT capped at weekly_target.
    Overshoot is kept and only the displayed progress is capped.
    """
    model_config = ConfigDict(populate_by_name=True)

    total_qada: int = Field(
        default=0,
        ge=0,
        alias="totalQada",
        description="Outstanding missed prayers still owed"
    )
    weekly_target: int = Field(
        default=0,
        ge=0,
        alias="weeklyTarget",
        description="Planned completions this cycle (0 = no target)"
    )
    completed_this_week: int = Field(
        default=0,
        ge=0,
        alias="completedThisWeek",
        description="Completions recorded since the cycle started"
    )


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_count(raw: Any) -> int:
    """
    Parse user input into a non-negative count.

    Accepts ints, floats (truncated) and strings with a leading integer
    ("12", " 7 ", "3.9", "12abc"). Anything unparsable, including a
    digit run too long to convert, and any negative result becomes 0.
    Never raises.
    """
    if raw is None or isinstance(raw, bool):
        return 0

    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not math.isfinite(raw):
            return 0
        value = int(raw)
    else:
        match = _LEADING_INT.match(str(raw))
        if not match:
            return 0
        try:
            value = int(match.group(1))
        except ValueError:
            # Beyond the interpreter's digit limit for int()
            return 0

    return max(0, value)
