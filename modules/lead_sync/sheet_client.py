"""
Google Sheets client for Lead Sync.

Reads lead rows and writes single cells, resolving columns by header name.
"""

import logging
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials

from .config import config
from .exceptions import ConfigError, SheetClientError
from .models import SheetRow

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
]

ID_COLUMN = 'id'


def column_letter(column_number: int) -> str:
    """1-based column number to A1 letters (1 → A, 27 → AA)."""
    letters = ''
    while column_number > 0:
        column_number, remainder = divmod(column_number - 1, 26)
        letters = chr(ord('A') + remainder) + letters
    return letters


def build_header_index(header: list) -> dict[str, int]:
    """Lowercased header name → 0-based column index (first occurrence wins)."""
    index = {}
    for i, name in enumerate(header):
        key = str(name or '').strip().lower()
        if key and key not in index:
            index[key] = i
    return index


class SheetClient:
    """Google Sheets worksheet client."""

    def __init__(self, worksheet=None):
        self._worksheet = worksheet

    def _get_worksheet(self):
        """Open (once) and return the configured worksheet."""
        if self._worksheet is not None:
            return self._worksheet

        if not config.GOOGLE_SERVICE_ACCOUNT_FILE or not config.GOOGLE_SPREADSHEET_ID:
            raise ConfigError("GOOGLE_SERVICE_ACCOUNT_FILE and GOOGLE_SPREADSHEET_ID must be configured")

        try:
            creds = Credentials.from_service_account_file(
                config.GOOGLE_SERVICE_ACCOUNT_FILE,
                scopes=SCOPES
            )
            client = gspread.authorize(creds)
            spreadsheet = client.open_by_key(config.GOOGLE_SPREADSHEET_ID)
            self._worksheet = spreadsheet.worksheet(config.GOOGLE_WORKSHEET_NAME)
        except gspread.exceptions.WorksheetNotFound:
            raise SheetClientError(f"Worksheet '{config.GOOGLE_WORKSHEET_NAME}' not found")
        except (gspread.exceptions.GSpreadException, OSError, ValueError) as e:
            raise SheetClientError(f"Failed to open Google Sheet: {e}") from e

        logger.info(f"Opened worksheet '{config.GOOGLE_WORKSHEET_NAME}' of {config.GOOGLE_SPREADSHEET_ID}")
        return self._worksheet

    @property
    def title(self) -> str:
        return self._get_worksheet().title

    # ==========================================================================
    # Reads
    # ==========================================================================

    def read_rows(self) -> list[SheetRow]:
        """All data rows, in sheet order. Headers are resolved once per read."""
        try:
            values = self._get_worksheet().get_all_values()
        except gspread.exceptions.GSpreadException as e:
            raise SheetClientError(f"Failed to read sheet rows: {e}") from e

        if not values:
            return []

        header_index = build_header_index(values[0])
        return [
            SheetRow.from_values(row, header_index, row_index=i + 1)
            for i, row in enumerate(values[1:], start=1)
        ]

    def _read_header(self) -> list:
        try:
            header = self._get_worksheet().row_values(1)
        except gspread.exceptions.GSpreadException as e:
            raise SheetClientError(f"Cannot read sheet headers: {e}") from e

        if not header:
            raise SheetClientError("Cannot read sheet headers")
        return header

    def find_row_index_by_id(self, lead_id: str) -> Optional[int]:
        """
        Find the 1-based row index of a lead.

        Uses column A when its header is 'id', otherwise scans the header
        row for the 'id' column. Returns None when the id is not present.
        """
        worksheet = self._get_worksheet()
        try:
            column = worksheet.col_values(1)
            if not column:
                return None

            if str(column[0] or '').strip().lower() != ID_COLUMN:
                id_index = build_header_index(self._read_header()).get(ID_COLUMN)
                if id_index is None:
                    logger.warning("Sheet has no 'id' header; cannot locate rows")
                    return None
                column = worksheet.col_values(id_index + 1)
        except gspread.exceptions.GSpreadException as e:
            raise SheetClientError(f"Failed to read id column: {e}") from e

        wanted = lead_id.strip()
        for i, value in enumerate(column[1:], start=2):
            if str(value or '').strip() == wanted:
                return i

        return None

    # ==========================================================================
    # Writes
    # ==========================================================================

    def update_cell(self, row_index: int, column_name: str, value: str):
        """Write one cell, resolving the column from the header row."""
        column_index = build_header_index(self._read_header()).get(column_name.strip().lower())
        if column_index is None:
            raise SheetClientError(f"Sheet has no '{column_name}' header")

        a1 = f"{column_letter(column_index + 1)}{row_index}"
        try:
            self._get_worksheet().update(
                values=[[value]],
                range_name=a1,
                value_input_option='RAW',
            )
        except gspread.exceptions.GSpreadException as e:
            raise SheetClientError(f"Failed to update {a1}: {e}") from e

        logger.debug(f"Updated sheet cell {a1} ({column_name})")

    def update_category(self, row_index: int, category: str):
        self.update_cell(row_index, 'category', category)

    def update_name(self, row_index: int, name: str):
        self.update_cell(row_index, 'name', name)

    def update_email(self, row_index: int, email: str):
        self.update_cell(row_index, 'email', email)

    def update_note(self, row_index: int, note: str):
        self.update_cell(row_index, 'note', note)

    def update_source(self, row_index: int, source: str):
        self.update_cell(row_index, 'source', source)


# Module-level instance
sheet_client = SheetClient()
