# ta_mbr/core/summary_payload.py
"""
Summary payload — the slice of an MBR response forwarded to the AI summary.

Only the most recent `max_rows_per_sheet` rows of each record set are sent (the
last rows in sheet order), together with the scalar metrics and breakdowns. The
full per-candidate time-to-fill list is replaced by its count.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ta_mbr.core.date_filter import DateWindow
from ta_mbr.core.mbr_response import MBRResponse


def format_rate(value: Optional[float]) -> str:
    """66.666 -> '66.7%'; None -> 'N/A'."""
    if value is None:
        return "N/A"
    return f"{value:.1f}%"


def format_days(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return f"{value:.1f}"


def period_label(window: Optional[DateWindow]) -> str:
    if window is None or window.is_open:
        return "all available data"
    if window.start and window.end:
        return f"{window.start} to {window.end}"
    if window.start:
        return f"from {window.start}"
    return f"up to {window.end}"


def build_summary_payload(response: MBRResponse, max_rows_per_sheet: int) -> Dict[str, Any]:
    if max_rows_per_sheet <= 0:
        raise ValueError("max_rows_per_sheet must be > 0")
    if response.is_error() or response.metrics is None:
        raise ValueError("Cannot build a summary payload from an error response")

    payload: Dict[str, Any] = {}
    for name, rows in response.record_sets().items():
        payload[name] = list(rows[-max_rows_per_sheet:])

    m = response.metrics.model_dump(by_alias=True, exclude_none=True)
    m.pop("timeToFillDetails", None)
    payload["metrics"] = m
    return payload


def summary_headline(response: MBRResponse) -> Dict[str, str]:
    """Presentation strings for the three dashboard cards."""
    if response.metrics is None:
        return {"overallTimeToFillAverageDays": "N/A", "offerAcceptanceRate": "N/A", "totalJoinedCandidates": "0"}
    return {
        "overallTimeToFillAverageDays": format_days(response.metrics.overall_time_to_fill_average_days),
        "offerAcceptanceRate": format_rate(response.metrics.offer_acceptance_rate),
        "totalJoinedCandidates": str(response.metrics.total_joined_candidates),
    }


__all__ = ["format_rate", "format_days", "period_label", "build_summary_payload", "summary_headline"]
