# ta_mbr/io/sheets.py
"""
Google Sheets fetcher (gspread)

Intent
- Build an authenticated gspread client from a service account whose secrets live
  in environment variables (names come from credentials.yaml):
  - GOOGLE_SHEETS_CREDENTIALS: path to the service-account JSON, or the JSON itself
  - or GOOGLE_SERVICE_ACCOUNT_EMAIL + GOOGLE_PRIVATE_KEY ("\\n" escapes restored)
- Fetch the five tabs (one values request per tab, range "<tab>!A:ZZ") concurrently
  and return tab name -> raw grid.

Failure modes
- Missing credentials / spreadsheet id -> SheetsConfigError
- Any request failing -> SheetsFetchError (the whole fetch fails; partial data is
  never returned)
"""

from __future__ import annotations

import json
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import gspread

from ta_mbr.core.sheet_columns import Grid
from ta_mbr.utils.config import CredentialsConfig
from ta_mbr.utils.logging import get_logger

READONLY_SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]

_TOKEN_URI = "https://oauth2.googleapis.com/token"


class SheetsConfigError(RuntimeError):
    """Server-side configuration is incomplete (credentials or spreadsheet id)."""


class SheetsFetchError(RuntimeError):
    """A Sheets API request failed."""


def service_account_info(creds: CredentialsConfig) -> Optional[Dict[str, Any]]:
    """
    Resolve service-account info from env vars; None for the file-path form or when missing.
    """
    cfg = creds.google_sheets

    raw = os.environ.get(cfg.credentials_env, "").strip()
    if raw and not Path(raw).is_file():
        try:
            info = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SheetsConfigError("Service account credentials are neither a file nor valid JSON.") from e
        if not isinstance(info, dict):
            raise SheetsConfigError("Service account JSON must be an object.")
        return info

    email = os.environ.get(cfg.client_email_env, "").strip()
    key = os.environ.get(cfg.private_key_env, "")
    if email and key:
        return {
            "type": "service_account",
            "client_email": email,
            "private_key": key.replace("\\n", "\n"),
            "token_uri": _TOKEN_URI,
        }
    return None


def build_sheets_client(creds: CredentialsConfig) -> gspread.Client:
    """
    Authenticate a read-only gspread client. No network calls are made here.
    """
    logger = get_logger(__name__)
    path = os.environ.get(creds.google_sheets.credentials_env, "").strip()
    if path and Path(path).is_file():
        return gspread.service_account(filename=path, scopes=READONLY_SCOPES)

    info = service_account_info(creds)
    if info is None:
        logger.error("Missing Google Service Account credentials.")
        raise SheetsConfigError("Server configuration error: Missing Google Service Account credentials.")
    return gspread.service_account_from_dict(info, scopes=READONLY_SCOPES)


def resolve_spreadsheet_id(creds: CredentialsConfig) -> str:
    env_name = creds.google_sheets.spreadsheet_id_env
    spreadsheet_id = os.environ.get(env_name, "").strip()
    if not spreadsheet_id:
        get_logger(__name__).error("Missing Google Sheets Spreadsheet ID.")
        raise SheetsConfigError("Server configuration error: Missing Google Sheets Spreadsheet ID.")
    return spreadsheet_id


def _fetch_tab(spreadsheet: Any, tab: str, cell_range: str) -> Grid:
    resp = spreadsheet.values_get(f"{tab}!{cell_range}")
    values = resp.get("values") or []
    return [[str(c) for c in row] for row in values]


def fetch_sheet_grids(
    client: Any,
    spreadsheet_id: str,
    tab_names: Iterable[str],
    *,
    max_workers: int = 5,
    cell_range: str = "A:ZZ",
) -> Dict[str, Grid]:
    """
    Fetch every tab concurrently; returns tab name -> grid (header row first).
    """
    logger = get_logger(__name__)
    tabs = list(dict.fromkeys(tab_names))

    try:
        spreadsheet = client.open_by_key(spreadsheet_id)
    except Exception as e:
        raise SheetsFetchError(f"Failed to open spreadsheet: {e}") from e

    grids: Dict[str, Grid] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as ex:
        futures = {ex.submit(_fetch_tab, spreadsheet, tab, cell_range): tab for tab in tabs}
        for fut in as_completed(futures):
            tab = futures[fut]
            try:
                grids[tab] = fut.result()
            except Exception as e:
                logger.error("Sheets request failed for tab=%r: %s", tab, e)
                raise SheetsFetchError(f"Failed to fetch tab {tab!r}: {e}") from e
            logger.info("Fetched tab=%r (rows=%d incl. header)", tab, len(grids[tab]))

    return {tab: grids[tab] for tab in tabs}


__all__ = [
    "SheetsConfigError",
    "SheetsFetchError",
    "service_account_info",
    "build_sheets_client",
    "resolve_spreadsheet_id",
    "fetch_sheet_grids",
]
