# ta_mbr/core/date_filter.py
"""
Date-Range Filter

Selects, per record set, the rows whose *relevant date* falls inside an inclusive
[start, end] window. An absent bound leaves that side open; with both bounds absent
nothing is filtered (not even rows with broken dates).

Relevant date
- mcubeData:              Request Created Date
- taTrackerData:          by Hiring Status
    Joined                -> Joining Date
    Declined / Withdrawn  -> Decline Date, else Last Status Change Date
    anything else (open)  -> Request Created Date of the requisition with the same
                             RMG ID, looked up in the *unfiltered* requisitions
- offersTrackerData:      Offer Date
- vendorConsolidatedData: Submission Date
- interviewListData:      Interview Date

Comparison is on calendar dates, so a timestamped value on the end day is still inside.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ta_mbr.core import sheet_columns as col
from ta_mbr.core.dates import to_calendar_date
from ta_mbr.core.sheet_columns import SheetRow
from ta_mbr.utils.logging import get_logger

RecordSets = Dict[str, List[SheetRow]]
DateSelector = Callable[[SheetRow], Optional[str]]

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class DateWindow(BaseModel):
    """
    Inclusive date window; each bound is a YYYY-MM-DD string or None.
    """

    model_config = ConfigDict(extra="forbid")

    start: Optional[str] = None
    end: Optional[str] = None

    @field_validator("start", "end", mode="before")
    @classmethod
    def _validate_bound(cls, v, info):
        if v is None:
            return None
        if isinstance(v, date):
            return date(v.year, v.month, v.day).isoformat()
        s = str(v).strip()
        if not s:
            return None
        message = f"filter.{info.field_name} must be YYYY-MM-DD; got {v!r}"
        if not _ISO_DATE_RE.match(s):
            raise ValueError(message)
        try:
            parsed = date.fromisoformat(s)
        except ValueError as e:
            raise ValueError(message) from e
        return parsed.isoformat()

    @model_validator(mode="after")
    def _validate_order(self) -> "DateWindow":
        if self.start and self.end and self.start > self.end:
            raise ValueError(f"filter.start ({self.start}) is after filter.end ({self.end})")
        return self

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None


def _bound(value: Optional[str], name: str) -> Optional[date]:
    if value is None or str(value).strip() == "":
        return None
    parsed = to_calendar_date(value)
    if parsed is None:
        raise ValueError(f"Unparseable {name} bound: {value!r}")
    return parsed


def build_requisition_created_map(requisitions: Sequence[Mapping[str, object]]) -> Dict[str, str]:
    """
    RMG ID -> Request Created Date (as text). Rows missing either value are skipped;
    for duplicate ids the last row wins.
    """
    out: Dict[str, str] = {}
    for row in requisitions:
        rmg_id = col.cell_text(row, col.RMG_ID)
        created = col.cell_text(row, col.REQUEST_CREATED_DATE)
        if rmg_id and created:
            out[rmg_id] = created
    return out


def candidate_relevant_date(row: Mapping[str, object], requisition_created: Mapping[str, str]) -> Optional[str]:
    status = col.cell_text(row, col.HIRING_STATUS)

    if status == col.STATUS_JOINED:
        return col.cell_text(row, col.JOINING_DATE)

    if status in col.CLOSED_STATUSES:
        return col.cell_text(row, col.DECLINE_DATE) or col.cell_text(row, col.LAST_STATUS_CHANGE_DATE)

    rmg_id = col.cell_text(row, col.RMG_ID)
    if rmg_id is None:
        return None
    return requisition_created.get(rmg_id)


def _field(key: str) -> DateSelector:
    return lambda row: col.cell_text(row, key)


def _keep(
    rows: Sequence[SheetRow],
    selector: DateSelector,
    start: Optional[date],
    end: Optional[date],
) -> List[SheetRow]:
    kept: List[SheetRow] = []
    for row in rows:
        d = to_calendar_date(selector(row))
        if d is None:
            continue
        if start is not None and d < start:
            continue
        if end is not None and d > end:
            continue
        kept.append(row)
    return kept


def filter_by_date_range(
    record_sets: Mapping[str, Sequence[SheetRow]],
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> RecordSets:
    """
    Filter the five record sets by their relevant dates.

    Raises ValueError only for a supplied bound that cannot be parsed.
    Record sets missing from the input come back empty.
    """
    logger = get_logger(__name__)

    start_d = _bound(start, "start")
    end_d = _bound(end, "end")

    source: RecordSets = {name: list(record_sets.get(name) or []) for name in col.RECORD_SET_NAMES}
    if start_d is None and end_d is None:
        return source

    requisition_created = build_requisition_created_map(source[col.MCUBE_DATA])

    selectors: Dict[str, DateSelector] = {
        col.MCUBE_DATA: _field(col.REQUEST_CREATED_DATE),
        col.TA_TRACKER_DATA: lambda row: candidate_relevant_date(row, requisition_created),
        col.OFFERS_TRACKER_DATA: _field(col.OFFER_DATE),
        col.VENDOR_CONSOLIDATED_DATA: _field(col.SUBMISSION_DATE),
        col.INTERVIEW_LIST_DATA: _field(col.INTERVIEW_DATE),
    }

    out: RecordSets = {}
    for name in col.RECORD_SET_NAMES:
        out[name] = _keep(source[name], selectors[name], start_d, end_d)
        logger.debug("Date filter %s: %d -> %d rows (start=%s end=%s)", name, len(source[name]), len(out[name]), start_d, end_d)
    return out


def filter_by_window(record_sets: Mapping[str, Sequence[SheetRow]], window: Optional[DateWindow]) -> RecordSets:
    if window is None:
        return filter_by_date_range(record_sets)
    return filter_by_date_range(record_sets, window.start, window.end)


__all__ = [
    "RecordSets",
    "DateWindow",
    "build_requisition_created_map",
    "candidate_relevant_date",
    "filter_by_date_range",
    "filter_by_window",
]
