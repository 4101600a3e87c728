"""
Import and export of tracker backups.

Export writes the same {prayers, weekStartDate} document used everywhere
else. Import accepts a partial document: each field that is present
overwrites the matching ledger field on its own, and a document that
cannot be parsed leaves the ledger untouched.
"""

import json
from datetime import date

from pydantic import ValidationError

from src.models.ledger import ImportDocument, Ledger
from src.sync.migration import normalize_prayers


EXPORT_FILENAME_PREFIX = "solat-qada-backup"


class ImportFormatError(Exception):
    """The import document is not a valid tracker backup."""
    pass


def export_filename(today: date) -> str:
    return f"{EXPORT_FILENAME_PREFIX}-{today.isoformat()}.json"


def export_document(ledger: Ledger) -> str:
    """Serialize the ledger as a pretty-printed JSON backup."""
    return json.dumps(ledger.to_snapshot().to_wire(), indent=2)


def parse_import_document(text: str) -> ImportDocument:
    """
    Parse a backup document.

    Raises:
        ImportFormatError: If the text is not JSON, not an object, or a
                           present field has an invalid value
    """
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ImportFormatError(f"Backup is not valid JSON: {e}")

    if not isinstance(data, dict):
        raise ImportFormatError("Backup must be a JSON object")

    # An explicit null is treated the same as a missing field
    data = {key: value for key, value in data.items() if value is not None}

    try:
        return ImportDocument.model_validate(data)
    except ValidationError as e:
        raise ImportFormatError(f"Backup contains invalid data: {e}")


def apply_import(ledger: Ledger, document: ImportDocument) -> list[str]:
    """
    Overwrite ledger fields present in the document.

    Returns:
        Names of the fields that were applied
    """
    applied = []
    if document.has_prayers:
        ledger.prayers = normalize_prayers(document.prayers)
        applied.append("prayers")
    if document.has_week_start_date:
        ledger.cycle_start = document.week_start_date
        applied.append("weekStartDate")
    return applied
