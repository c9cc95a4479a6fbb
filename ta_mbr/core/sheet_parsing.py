# ta_mbr/core/sheet_parsing.py
"""
Row Parser — raw sheet grids -> typed rows

A grid is what the Sheets API returns for a tab: row 0 holds the headers, every
following row holds cell strings. Rows may be shorter than the header row (the API
drops trailing empty cells).

Rules
- Headers and cells are trimmed.
- A trimmed, non-empty cell that is a numeric literal becomes int/float; anything
  else stays as the trimmed text (including "").
- Missing trailing cells become "". Cells beyond the header count are ignored.
- No header row -> no rows. Row order is preserved.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ta_mbr.core.sheet_columns import RECORD_SET_TABS, CellValue, SheetRow
from ta_mbr.utils.logging import get_logger

_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_PREFIXED_INT_RE = re.compile(r"^0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")
_INFINITY_RE = re.compile(r"^[+-]?Infinity$")


def _to_cell_value(raw: Any) -> CellValue:
    text = "" if raw is None else str(raw).strip()
    if not text:
        return text

    if _INTEGER_RE.match(text):
        return int(text)
    if _DECIMAL_RE.match(text):
        return float(text)
    if _PREFIXED_INT_RE.match(text):
        return int(text, 0)
    if _INFINITY_RE.match(text):
        return float("-inf") if text.startswith("-") else float("inf")
    return text


def parse_sheet_grid(grid: Optional[Sequence[Sequence[Any]]]) -> List[SheetRow]:
    """
    Convert a header-first grid into one dict per data row.
    """
    if not grid:
        return []

    headers = ["" if h is None else str(h).strip() for h in grid[0]]

    rows: List[SheetRow] = []
    for raw_row in grid[1:]:
        cells = list(raw_row or [])
        row: SheetRow = {}
        for idx, header in enumerate(headers):
            row[header] = _to_cell_value(cells[idx]) if idx < len(cells) else ""
        rows.append(row)
    return rows


def parse_sheet_grids(
    grids_by_tab: Mapping[str, Optional[Sequence[Sequence[Any]]]],
    tab_names: Optional[Mapping[str, str]] = None,
) -> Dict[str, List[SheetRow]]:
    """
    Parse the five tabs into record sets keyed by record-set name (mcubeData, taTrackerData, ...).

    tab_names maps record-set name -> tab name (defaults to the standard tab names).
    A tab absent from grids_by_tab yields an empty record set.
    """
    logger = get_logger(__name__)
    tabs = dict(RECORD_SET_TABS)
    if tab_names:
        tabs.update(tab_names)

    out: Dict[str, List[SheetRow]] = {}
    for record_set, tab in tabs.items():
        out[record_set] = parse_sheet_grid(grids_by_tab.get(tab))
        logger.debug("Parsed tab=%r -> %s (rows=%d)", tab, record_set, len(out[record_set]))
    return out


__all__ = ["parse_sheet_grid", "parse_sheet_grids"]
