# giaycung_api/adapters/sheets/__init__.py
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional, Sequence

import gspread
from google.oauth2.service_account import Credentials
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ...core.errors import NotFound, ServerError
from ...settings import Settings
from ..base import Grid

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def _sa_client(settings: Settings) -> gspread.Client:
    """
    Build an authorized gspread Client from whichever credential form is configured:
      - GOOGLE_SA_JSON_BASE64
      - GOOGLE_SA_JSON (inline JSON or a path to the JSON file)
      - GOOGLE_CLIENT_EMAIL + GOOGLE_PRIVATE_KEY
    """
    try:
        info = settings.google_credentials_info()
    except (ValueError, json.JSONDecodeError) as e:
        raise ServerError(f"Invalid Google service account JSON: {e}") from e

    if info is not None:
        creds = Credentials.from_service_account_info(info, scopes=SCOPES)
        return gspread.authorize(creds)

    path = settings.google_credentials_file()
    if not path:
        raise ServerError(
            "Missing Google credentials (GOOGLE_SA_JSON, GOOGLE_SA_JSON_BASE64 "
            "or GOOGLE_CLIENT_EMAIL + GOOGLE_PRIVATE_KEY)"
        )
    creds = Credentials.from_service_account_file(path, scopes=SCOPES)
    return gspread.authorize(creds)


def _as_cell(v: Any) -> str:
    return "" if v is None else str(v)


class GSheetsBackend:
    """
    Google Sheets implementation of the SheetsBackend contract.

    - One spreadsheet, one tab per table
    - Values are written RAW (no formula/date parsing by Sheets)
    - No caching: every read goes to the API
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._gc: Optional[gspread.Client] = None
        self._ss: Optional[gspread.Spreadsheet] = None

    # ========== Connection ==========

    @property
    def spreadsheet(self) -> gspread.Spreadsheet:
        if self._ss is None:
            spreadsheet_id = self.settings.google_sheets_id.strip()
            if not spreadsheet_id:
                raise ServerError("Missing GOOGLE_SHEETS_ID (or SPREADSHEET_ID)")
            self._gc = _sa_client(self.settings)
            self._ss = self._gc.open_by_key(spreadsheet_id)
            logger.info("Opened spreadsheet %s", spreadsheet_id)
        return self._ss

    def _call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a Sheets API call, retrying APIError up to sheets_retry_attempts times."""
        attempts = max(1, int(self.settings.sheets_retry_attempts))
        for attempt in Retrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type((gspread.exceptions.APIError,)),
            reraise=True,
        ):
            with attempt:
                return fn(*args, **kwargs)

    # ========== SheetsBackend API ==========

    def read_range(self, range_ref: str) -> Grid:
        resp = self._call(self.spreadsheet.values_get, range_ref)
        values = resp.get("values", []) if resp else []
        logger.debug("read_range %s -> %d rows", range_ref, len(values))
        return [[_as_cell(c) for c in row] for row in values]

    def append_row(self, range_ref: str, row: Sequence[object]) -> None:
        self._call(
            self.spreadsheet.values_append,
            range_ref,
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            body={"values": [[_as_cell(c) for c in row]]},
        )

    def update_range(self, range_ref: str, rows: Sequence[Sequence[object]]) -> None:
        self._call(
            self.spreadsheet.values_update,
            range_ref,
            params={"valueInputOption": "RAW"},
            body={"values": [[_as_cell(c) for c in row] for row in rows]},
        )

    def delete_rows(self, table_id: int, start_index: int, end_index: int) -> None:
        self._call(
            self.spreadsheet.batch_update,
            {
                "requests": [
                    {
                        "deleteDimension": {
                            "range": {
                                "sheetId": table_id,
                                "dimension": "ROWS",
                                "startIndex": start_index,
                                "endIndex": end_index,
                            }
                        }
                    }
                ]
            },
        )

    def get_table_id(self, table_name: str) -> int:
        try:
            ws = self._call(self.spreadsheet.worksheet, table_name)
        except gspread.WorksheetNotFound as e:
            raise NotFound(f"Sheet tab not found: {table_name}") from e
        return int(ws.id)
