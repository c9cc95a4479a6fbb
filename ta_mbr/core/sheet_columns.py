# ta_mbr/core/sheet_columns.py
"""
Sheet column names, status literals and tab names used by the MBR engine.

Rows are plain dicts keyed by the sheet header text, so every business key the
engine reads is declared here once. A typo in a key would otherwise look exactly
like an absent value.

Status literals are matched by exact, case-sensitive equality.
"""

from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional, Union

CellValue = Union[str, int, float]
SheetRow = Dict[str, CellValue]
Grid = List[List[str]]

# --- requisitions (Mcube Data) ---
RMG_ID = "RMG ID"
REQUEST_CREATED_DATE = "Request Created Date"

# --- candidate journey (TA Tracker) ---
HIRING_STATUS = "Hiring Status"
JOINING_DATE = "Joining Date"
DEPARTMENT = "Department"
ROLE = "Role"
SOURCE = "Source"
DECLINE_DATE = "Decline Date"
LAST_STATUS_CHANGE_DATE = "Last Status Change Date"

# --- offers (Offers tracker) ---
OFFER_STATUS = "Offer Status"
OFFER_DATE = "Offer Date"

# --- vendor submissions (Vendor Consolidated) ---
VENDOR_NAME = "Vendor Name"
SUBMISSION_DATE = "Submission Date"

# --- interviews (Interview List) ---
INTERVIEW_DATE = "Interview Date"

# --- status literals ---
STATUS_JOINED = "Joined"
STATUS_ACCEPTED = "Accepted"
STATUS_DECLINED = "Declined"
STATUS_WITHDRAWN = "Withdrawn"
CLOSED_STATUSES = (STATUS_DECLINED, STATUS_WITHDRAWN)

# --- tabs -> record sets ---
TAB_TA_TRACKER = "TA Tracker"
TAB_OFFERS_TRACKER = "Offers tracker"
TAB_MCUBE_DATA = "Mcube Data"
TAB_INTERVIEW_LIST = "Interview List"
TAB_VENDOR_CONSOLIDATED = "Vendor Consolidated"

MCUBE_DATA = "mcubeData"
TA_TRACKER_DATA = "taTrackerData"
OFFERS_TRACKER_DATA = "offersTrackerData"
VENDOR_CONSOLIDATED_DATA = "vendorConsolidatedData"
INTERVIEW_LIST_DATA = "interviewListData"

# Record-set name -> default tab name. Order is the order record sets appear in the response.
RECORD_SET_TABS: Dict[str, str] = {
    MCUBE_DATA: TAB_MCUBE_DATA,
    TA_TRACKER_DATA: TAB_TA_TRACKER,
    OFFERS_TRACKER_DATA: TAB_OFFERS_TRACKER,
    VENDOR_CONSOLIDATED_DATA: TAB_VENDOR_CONSOLIDATED,
    INTERVIEW_LIST_DATA: TAB_INTERVIEW_LIST,
}

RECORD_SET_NAMES = tuple(RECORD_SET_TABS.keys())


def value_to_text(value: object) -> Optional[str]:
    """
    Stringify a cell the way the dashboard does: integral floats lose their ".0",
    None stays None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def cell_text(row: Mapping[str, object], key: str) -> Optional[str]:
    """
    Value of `key` as non-empty text, or None when the key is missing or the cell is empty.
    """
    text = value_to_text(row.get(key))
    if not text:
        return None
    return text


__all__ = [
    "CellValue",
    "SheetRow",
    "Grid",
    "RECORD_SET_TABS",
    "RECORD_SET_NAMES",
    "value_to_text",
    "cell_text",
]
