"""
Google Sheets User Store

DESIGN DECISION: Google Sheets is used as the remote document store because:
1. Users can inspect (and rescue) their own data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- No transactions: save_tracker is a read-modify-write, so two devices
  saving at once race and the last write wins
- The whole tracker is kept as one JSON cell per user

The implementation follows UserStoreInterface, so another document store
can replace it without changing the sync logic.
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import GoogleSheetsSettings, get_settings
from src.models.ledger import TrackerSnapshot, UserRecord
from src.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    StorageReadError,
    StorageWriteError,
    UserStoreInterface,
    normalize_username,
)


# Column mappings for Users sheet
USER_COLUMNS = [
    "username",
    "pin",
    "tracker_json",
    "updated_at",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_users_sheet(self) -> gspread.Worksheet:
        """Get or create the Users worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.users_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.users_sheet_name,
                rows=200,
                cols=len(USER_COLUMNS),
            )
            sheet.append_row(USER_COLUMNS)
        return sheet


class GoogleSheetsUserStore(UserStoreInterface):
    """
    Google Sheets implementation of the remote user store.

    One row per user. The tracker snapshot is JSON-serialized into a
    single cell; an empty cell means the user has no tracker yet.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self._client = client or GoogleSheetsClient()
        self._timeout = timeout_seconds or get_settings().tracker.remote_timeout_seconds

    async def _call(self, func, *args):
        """Run a blocking gspread call off the event loop, with a timeout."""
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args),
            timeout=self._timeout,
        )

    def _find_row(self, username: str) -> tuple[Optional[int], Optional[list]]:
        """Return (1-based row index, row values) for a user, or (None, None)."""
        sheet = self._client.get_users_sheet()
        all_rows = sheet.get_all_values()

        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is header
            if row and row[0] == username:
                return idx, row
        return None, None

    def _row_to_record(self, row: list) -> UserRecord:
        """Convert a spreadsheet row to a UserRecord."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        tracker = None
        tracker_json = safe_get(2)
        if tracker_json:
            tracker_data = json.loads(tracker_json)
            if tracker_data:
                tracker = TrackerSnapshot.from_stored(tracker_data)

        return UserRecord(pin=safe_get(1), tracker=tracker)

    def _record_to_row(self, username: str, record: UserRecord) -> list:
        """Convert a UserRecord to a spreadsheet row."""
        return [
            username,
            record.pin,
            json.dumps(record.tracker.to_wire()) if record.tracker else "",
            datetime.now(timezone.utc).isoformat(),
        ]

    async def get_user(self, username: str) -> Optional[UserRecord]:
        key = normalize_username(username)
        try:
            _, row = await self._call(self._find_row, key)
        except Exception as e:
            raise StorageReadError(f"Failed to read user {key}: {e}")

        if row is None:
            return None

        try:
            return self._row_to_record(row)
        except (ValueError, ValidationError) as e:
            raise StorageReadError(f"Malformed record for user {key}: {e}")

    @retry(
        retry=retry_if_exception_type(StorageWriteError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def create_user(self, username: str, pin: str) -> None:
        key = normalize_username(username)
        try:
            row_idx, _ = await self._call(self._find_row, key)
        except Exception as e:
            raise StorageReadError(f"Failed to read user {key}: {e}")
        if row_idx is not None:
            raise DuplicateError(f"User already exists: {key}")

        row = self._record_to_row(key, UserRecord(pin=pin, tracker=None))
        try:
            sheet = await self._call(self._client.get_users_sheet)
            await self._call(
                lambda: sheet.append_row(row, value_input_option="RAW")
            )
        except Exception as e:
            raise StorageWriteError(f"Failed to create user {key}: {e}")

    @retry(
        retry=retry_if_exception_type(StorageWriteError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save_tracker(self, username: str, snapshot: TrackerSnapshot) -> None:
        key = normalize_username(username)

        def write() -> None:
            row_idx, row = self._find_row(key)
            existing = self._row_to_record(row) if row else UserRecord(pin="")
            new_row = self._record_to_row(
                key, existing.model_copy(update={"tracker": snapshot})
            )
            sheet = self._client.get_users_sheet()
            if row_idx is None:
                sheet.append_row(new_row, value_input_option="RAW")
            else:
                sheet.update(
                    range_name=f"A{row_idx}:D{row_idx}",
                    values=[new_row],
                    value_input_option="RAW",
                )

        try:
            await self._call(write)
        except Exception as e:
            raise StorageWriteError(f"Failed to save tracker for {key}: {e}")
