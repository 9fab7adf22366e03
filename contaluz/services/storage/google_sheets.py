"""
Google Sheets State Storage

DESIGN DECISION: Households who want their data off the phone can keep the
state blob in a Google Sheet they own:
1. They can look at (and copy) their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

The sheet holds one row per state key:

    key | state_json | updated_at

TRADEOFFS:
- The blob is stored as a single JSON cell, so a Sheets cell limit
  (50k characters) caps the recharge history size. Fine for one household.
- No transactions; the single row is overwritten in place.
"""

import json
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from contaluz.config import get_settings
from contaluz.config.settings import GoogleSheetsSettings
from contaluz.models.energy import utc_now
from contaluz.services.storage.interface import (
    ConnectionError,
    StateStorageInterface,
    StorageError,
)
from contaluz.services.storage.local import decode_blob


STATE_COLUMNS = [
    "key",
    "state_json",
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

    def get_state_sheet(self) -> gspread.Worksheet:
        """Get or create the State worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.state_sheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.state_sheet_name,
                rows=10,
                cols=len(STATE_COLUMNS),
            )
            sheet.append_row(STATE_COLUMNS)
        return sheet


class GoogleSheetsStateStorage(StateStorageInterface):
    """
    Google Sheets implementation of the state blob storage.

    Accepts any object exposing ``get_state_sheet()``; tests pass a fake.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None, key: Optional[str] = None):
        self._client = client or GoogleSheetsClient()
        self._key = key or get_settings().storage.state_key

    def _find_row(self, sheet) -> tuple[Optional[int], Optional[list]]:
        """Locate the row for our key. Row numbers are 1-based, header is row 1."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == self._key:
                return idx, row
        return None, None

    def load(self) -> Optional[dict]:
        try:
            sheet = self._client.get_state_sheet()
            _, row = self._find_row(sheet)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to load state: {e}")

        if row is None or len(row) < 2 or not row[1].strip():
            return None
        return decode_blob(row[1])

    def save(self, blob: dict) -> None:
        try:
            sheet = self._client.get_state_sheet()
            row_number, _ = self._find_row(sheet)
            new_row = [
                self._key,
                json.dumps(blob, ensure_ascii=False),
                utc_now().isoformat(),
            ]
            if row_number is None:
                sheet.append_row(new_row, value_input_option="RAW")
            else:
                sheet.update(
                    range_name=f"A{row_number}:C{row_number}",
                    values=[new_row],
                    value_input_option="RAW",
                )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save state: {e}")

    def clear(self) -> None:
        try:
            sheet = self._client.get_state_sheet()
            row_number, _ = self._find_row(sheet)
            if row_number is not None:
                sheet.delete_rows(row_number)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to clear state: {e}")
