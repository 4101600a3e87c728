"""Sync package: load precedence, key migration and backup transfer."""

from src.sync.merge import (
    TRACKER_CACHE_KEY,
    LedgerSource,
    LoadResult,
    read_cached_snapshot,
    resolve_ledger,
    write_cached_snapshot,
)
from src.sync.migration import (
    migrate_prayer_keys,
    needs_migration,
    normalize_prayers,
)
from src.sync.transfer import (
    ImportFormatError,
    apply_import,
    export_document,
    export_filename,
    parse_import_document,
)

__all__ = [
    "TRACKER_CACHE_KEY",
    "ImportFormatError",
    "LedgerSource",
    "LoadResult",
    "apply_import",
    "export_document",
    "export_filename",
    "migrate_prayer_keys",
    "needs_migration",
    "normalize_prayers",
    "parse_import_document",
    "read_cached_snapshot",
    "resolve_ledger",
    "write_cached_snapshot",
]
