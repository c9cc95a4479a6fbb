# ta_mbr/batch/pipeline_1_fetch_sheets.py
"""
Pipeline 1 — Fetch the five tracker tabs as raw grids.

Intent
- Acquire raw grids (header row + cell strings) for the configured tabs from:
  - Google Sheets (gspread, one request per tab, concurrent), or
  - a local XLSX workbook / JSON grids file (offline runs)
- Persist them as a JSON artifact for Pipeline 2.

Output
- {outputs.raw_grids_json}:
    {"source": "<kind>", "fetched_at": "<utc iso>", "tabs": {"<tab>": [[...], ...]}}
  or, when the source cannot be read:
    {"source": "<kind>", "fetched_at": "...", "error": "<message>"}

Returns 0 on success, 1 when the error artifact was written.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from ta_mbr.core.sheet_columns import Grid
from ta_mbr.io.readers import read_grids_json, read_workbook_grids
from ta_mbr.io.sheets import (
    SheetsConfigError,
    SheetsFetchError,
    build_sheets_client,
    fetch_sheet_grids,
    resolve_spreadsheet_id,
)
from ta_mbr.io.writers import write_json
from ta_mbr.utils.config import ParametersConfig, ensure_dirs, load_credentials, load_parameters
from ta_mbr.utils.logging import configure_logging_from_params, get_logger

FETCH_ERROR_MESSAGE = "Failed to fetch and process data from Google Sheets"


def acquire_grids(params: ParametersConfig, credentials_path: Optional[str | Path] = None) -> Dict[str, Grid]:
    """
    Read the configured tabs from the configured source. Raises on failure.
    """
    tabs = list(params.sheets.tab_names().values())
    kind = params.source.kind

    if kind == "xlsx":
        return read_workbook_grids(str(params.source.xlsx_path), tabs)

    if kind == "json":
        grids = read_grids_json(str(params.source.json_path))
        return {tab: grids.get(tab, []) for tab in tabs}

    creds = load_credentials(credentials_path or "configs/credentials.yaml")
    client = build_sheets_client(creds)
    spreadsheet_id = resolve_spreadsheet_id(creds)
    return fetch_sheet_grids(
        client,
        spreadsheet_id,
        tabs,
        max_workers=params.source.max_workers,
        cell_range=params.source.cell_range,
    )


def main(
    parameters_path: str | Path = "configs/parameters.yaml",
    credentials_path: Optional[str | Path] = None,
) -> int:
    params = load_parameters(parameters_path)
    configure_logging_from_params(params)
    logger = get_logger(__name__)
    ensure_dirs(params)
    if credentials_path is None:
        credentials_path = Path(parameters_path).parent / "credentials.yaml"

    artifact = {
        "source": params.source.kind,
        "fetched_at": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    }
    out_path = Path(params.outputs.raw_grids_json)

    try:
        grids = acquire_grids(params, credentials_path)
    except SheetsConfigError as e:
        logger.error("Pipeline 1 failed: %s", e)
        write_json(out_path, {**artifact, "error": str(e)})
        return 1
    except (SheetsFetchError, FileNotFoundError, ValueError) as e:
        logger.error("Pipeline 1 failed: %s", e)
        write_json(out_path, {**artifact, "error": FETCH_ERROR_MESSAGE})
        return 1

    write_json(out_path, {**artifact, "tabs": grids})
    logger.info(
        "Pipeline 1 completed: %s",
        ", ".join(f"{tab}={max(len(grid) - 1, 0)} rows" for tab, grid in grids.items()),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
