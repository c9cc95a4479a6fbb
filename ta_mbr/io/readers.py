# ta_mbr/io/readers.py
"""
Readers — local raw-grid sources + JSON artifacts

Intent
- Produce the same shape the Sheets fetcher produces (tab name -> grid of strings)
  from local files, so pipelines and tests can run without Google access:
  - XLSX workbook with one worksheet per tab (pandas.read_excel)
  - JSON artifact written by Pipeline 1
- Read JSON artifacts between pipelines.

Key behaviors
- XLSX is read with header=None, dtype=str, keep_default_na=False, so the header row
  stays row 0 and blanks stay "" (the row parser does the trimming/typing).
- Trailing empty cells are dropped per row, like the Sheets API does.
- A tab missing from the workbook yields an empty grid (logged as WARNING).
- Nonexistent files raise FileNotFoundError.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

import pandas as pd

from ta_mbr.core.sheet_columns import Grid
from ta_mbr.utils.logging import get_logger


def read_json(path: str | Path) -> Any:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"JSON file not found: {str(p)}")
    return json.loads(p.read_text(encoding="utf-8"))


def _strip_trailing_blanks(cells: List[str]) -> List[str]:
    end = len(cells)
    while end > 0 and cells[end - 1] == "":
        end -= 1
    return cells[:end]


def dataframe_to_grid(df: pd.DataFrame) -> Grid:
    """
    Header-less DataFrame (header=None) -> list of string rows; fully blank rows dropped.
    """
    grid: Grid = []
    for values in df.astype(str).values.tolist():
        row = _strip_trailing_blanks([str(v) for v in values])
        if row:
            grid.append(row)
    return grid


def read_workbook_grids(path: str | Path, tab_names: Iterable[str]) -> Dict[str, Grid]:
    """
    Read the given worksheets of an XLSX workbook into raw grids.
    """
    logger = get_logger(__name__)
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Workbook not found: {str(p)}")

    available = set(pd.ExcelFile(p).sheet_names)

    grids: Dict[str, Grid] = {}
    for tab in tab_names:
        if tab not in available:
            logger.warning("Worksheet %r not found in %s; using empty grid", tab, str(p))
            grids[tab] = []
            continue
        df = pd.read_excel(p, sheet_name=tab, header=None, dtype=str, keep_default_na=False)
        grids[tab] = dataframe_to_grid(df)
        logger.info("Read worksheet %r (rows=%d incl. header)", tab, len(grids[tab]))
    return grids


def read_grids_json(path: str | Path) -> Dict[str, Grid]:
    """
    Read a {tab name: grid} JSON artifact; validates the shape.
    """
    raw = read_json(path)
    if not isinstance(raw, dict):
        raise ValueError(f"Raw grids JSON must be an object of tab -> rows: {path}")

    grids: Dict[str, Grid] = {}
    for tab, rows in raw.items():
        if rows is None:
            grids[str(tab)] = []
            continue
        if not isinstance(rows, list) or any(not isinstance(r, list) for r in rows):
            raise ValueError(f"Tab {tab!r} in {path} must be a list of rows")
        grids[str(tab)] = [["" if c is None else str(c) for c in r] for r in rows]
    return grids


__all__ = ["read_json", "dataframe_to_grid", "read_workbook_grids", "read_grids_json"]
