"""
Load precedence between the remote store and the local cache.

Highest priority first:
1. A remote tracker for the active session replaces everything
   (prayers and cycle start). Last writer wins; no field-level merge.
2. Otherwise a structurally valid local cache entry.
3. Otherwise a fresh default ledger.

Legacy prayer keys are migrated whichever source wins.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ValidationError

from src.models.ledger import Ledger, TrackerSnapshot
from src.services.storage.interface import LocalCacheInterface, StorageReadError
from src.sync.migration import needs_migration


TRACKER_CACHE_KEY = "solat-qada-tracker"


class LedgerSource(str, Enum):
    """Where the current ledger came from."""
    REMOTE = "remote"
    CACHE = "cache"
    DEFAULT = "default"
    IMPORT = "import"


class LoadResult(BaseModel):
    """A resolved ledger and how it was obtained."""
    ledger: Ledger
    source: LedgerSource
    migrated: bool = False


def read_cached_snapshot(
    cache: LocalCacheInterface,
    now: Optional[datetime] = None,
) -> Optional[TrackerSnapshot]:
    """
    Read the tracker from the local cache.

    An entry without weekStartDate keeps its prayers; its cycle starts
    at now.

    Raises:
        StorageReadError: If the entry exists but is unreadable or invalid
    """
    raw = cache.get(TRACKER_CACHE_KEY)
    if not raw:
        return None
    try:
        return TrackerSnapshot.from_stored(json.loads(raw), now)
    except (ValueError, ValidationError) as e:
        raise StorageReadError(f"Cached tracker is malformed: {e}")


def write_cached_snapshot(cache: LocalCacheInterface, ledger: Ledger) -> None:
    """
    Persist the ledger to the local cache.

    Raises:
        StorageWriteError: If the cache cannot be written
    """
    cache.set(TRACKER_CACHE_KEY, json.dumps(ledger.to_snapshot().to_wire()))


def _from_snapshot(snapshot: TrackerSnapshot, source: LedgerSource) -> LoadResult:
    return LoadResult(
        ledger=Ledger.from_snapshot(snapshot),
        source=source,
        migrated=needs_migration(snapshot.prayers),
    )


def resolve_ledger(
    remote: Optional[TrackerSnapshot],
    cached: Optional[TrackerSnapshot],
    now: datetime,
) -> LoadResult:
    """
    Pick the ledger to use on load.

    Args:
        remote: Tracker fetched for the active session, or None if there
                is no session, no record, or the fetch failed
        cached: Tracker read from the local cache, or None if absent or
                unreadable
        now: Cycle start for a fresh default ledger
    """
    if remote is not None:
        return _from_snapshot(remote, LedgerSource.REMOTE)

    if cached is not None:
        return _from_snapshot(cached, LedgerSource.CACHE)

    return LoadResult(ledger=Ledger.default(now), source=LedgerSource.DEFAULT)
