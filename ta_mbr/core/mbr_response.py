# ta_mbr/core/mbr_response.py
"""
MBR response assembly — raw grids -> parsed -> (filtered) -> metrics, in one object.

The response is either a full payload (five record sets + metrics) or an error
payload carrying only `error`. Callers check `is_error()` before trusting metrics.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ta_mbr.core import sheet_columns as col
from ta_mbr.core.date_filter import DateWindow, filter_by_window
from ta_mbr.core.metrics import MBRMetrics, compute_metrics
from ta_mbr.core.sheet_columns import SheetRow
from ta_mbr.core.sheet_parsing import parse_sheet_grids
from ta_mbr.utils.logging import get_logger


class MBRResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mcube_data: List[SheetRow] = Field(default_factory=list, alias=col.MCUBE_DATA)
    ta_tracker_data: List[SheetRow] = Field(default_factory=list, alias=col.TA_TRACKER_DATA)
    offers_tracker_data: List[SheetRow] = Field(default_factory=list, alias=col.OFFERS_TRACKER_DATA)
    vendor_consolidated_data: List[SheetRow] = Field(default_factory=list, alias=col.VENDOR_CONSOLIDATED_DATA)
    interview_list_data: List[SheetRow] = Field(default_factory=list, alias=col.INTERVIEW_LIST_DATA)
    metrics: Optional[MBRMetrics] = None
    date_window: Optional[DateWindow] = Field(default=None, alias="dateWindow")
    error: Optional[str] = None

    def is_error(self) -> bool:
        return self.error is not None

    def record_sets(self) -> Dict[str, List[SheetRow]]:
        return {
            col.MCUBE_DATA: self.mcube_data,
            col.TA_TRACKER_DATA: self.ta_tracker_data,
            col.OFFERS_TRACKER_DATA: self.offers_tracker_data,
            col.VENDOR_CONSOLIDATED_DATA: self.vendor_consolidated_data,
            col.INTERVIEW_LIST_DATA: self.interview_list_data,
        }

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict with dashboard field names; error payloads carry only `error`."""
        if self.is_error():
            return {"error": self.error}
        return self.model_dump(by_alias=True, exclude_none=True)


def error_response(message: str) -> MBRResponse:
    return MBRResponse(error=message)


def build_response_from_records(
    record_sets: Mapping[str, Sequence[SheetRow]],
    window: Optional[DateWindow] = None,
) -> MBRResponse:
    filtered = filter_by_window(record_sets, window)
    metrics = compute_metrics(filtered)
    return MBRResponse(
        mcube_data=filtered[col.MCUBE_DATA],
        ta_tracker_data=filtered[col.TA_TRACKER_DATA],
        offers_tracker_data=filtered[col.OFFERS_TRACKER_DATA],
        vendor_consolidated_data=filtered[col.VENDOR_CONSOLIDATED_DATA],
        interview_list_data=filtered[col.INTERVIEW_LIST_DATA],
        metrics=metrics,
        date_window=None if window is None or window.is_open else window,
    )


def build_mbr_response(
    grids_by_tab: Mapping[str, Optional[Sequence[Sequence[Any]]]],
    window: Optional[DateWindow] = None,
    *,
    tab_names: Optional[Mapping[str, str]] = None,
) -> MBRResponse:
    """
    Parse the raw tab grids, apply the optional date window and compute metrics.
    """
    logger = get_logger(__name__)
    record_sets = parse_sheet_grids(grids_by_tab, tab_names)
    response = build_response_from_records(record_sets, window)
    logger.debug(
        "MBR response built: rows=%s window=%s",
        {k: len(v) for k, v in response.record_sets().items()},
        window.model_dump() if window is not None else None,
    )
    return response


__all__ = ["MBRResponse", "error_response", "build_response_from_records", "build_mbr_response"]
