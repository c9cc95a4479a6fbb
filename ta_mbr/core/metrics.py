# ta_mbr/core/metrics.py
"""
Metrics Aggregator — record sets -> MBR metrics model

Pure, single pass per metric, recomputed from scratch on every call. Data-quality
problems never raise:
- candidate without a matching requisition -> no time-to-fill entry
- unparseable dates -> entry / month key omitted
- empty categorical value -> row left out of that breakdown (no "Unknown" bucket)
- no denominator -> scalar metric is None, breakdowns are []

Breakdowns keep first-occurrence order; the monthly trend is sorted by "YYYY-MM".

The pydantic models serialize with the camelCase names the dashboard consumes
(`model_dump(by_alias=True)`).
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ta_mbr.core import sheet_columns as col
from ta_mbr.core.date_filter import build_requisition_created_map
from ta_mbr.core.dates import elapsed_days, month_key, normalize_date
from ta_mbr.core.sheet_columns import SheetRow
from ta_mbr.utils.logging import get_logger


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TimeToFillMetric(_WireModel):
    rmg_id: str = Field(alias="rmgId")
    department: Optional[str] = None
    role: Optional[str] = None
    created_date: str = Field(alias="createdDate")
    joining_date: str = Field(alias="joiningDate")
    days_to_fill: int = Field(alias="daysToFill", ge=0)


class OfferMetric(_WireModel):
    offer_status: str = Field(alias="offerStatus")
    count: int


class SourceOfHireMetric(_WireModel):
    source: str
    count: int


class DepartmentJoinerMetric(_WireModel):
    department: str
    count: int


class VendorSubmissionMetric(_WireModel):
    vendor_name: str = Field(alias="vendorName")
    count: int


class MonthlyJoinerMetric(_WireModel):
    month: str
    count: int


class MBRMetrics(_WireModel):
    time_to_fill_details: List[TimeToFillMetric] = Field(default_factory=list, alias="timeToFillDetails")
    overall_time_to_fill_average_days: Optional[float] = Field(default=None, alias="overallTimeToFillAverageDays")
    offer_acceptance_rate: Optional[float] = Field(default=None, alias="offerAcceptanceRate")
    total_joined_candidates: int = Field(default=0, alias="totalJoinedCandidates")
    offer_status_breakdown: List[OfferMetric] = Field(default_factory=list, alias="offerStatusBreakdown")
    source_of_hire_breakdown: List[SourceOfHireMetric] = Field(default_factory=list, alias="sourceOfHireBreakdown")
    joiners_by_department: List[DepartmentJoinerMetric] = Field(default_factory=list, alias="joinersByDepartment")
    vendor_submissions_by_vendor: List[VendorSubmissionMetric] = Field(
        default_factory=list, alias="vendorSubmissionsByVendor"
    )
    monthly_joiner_trend: List[MonthlyJoinerMetric] = Field(default_factory=list, alias="monthlyJoinerTrend")


def count_by(rows: Iterable[Mapping[str, object]], key: str) -> Dict[str, int]:
    """
    Occurrence counts of the non-empty text values of `key`, in first-occurrence order.
    """
    counts: Dict[str, int] = {}
    for row in rows:
        value = col.cell_text(row, key)
        if value:
            counts[value] = counts.get(value, 0) + 1
    return counts


def joined_candidates(candidates: Sequence[SheetRow]) -> List[SheetRow]:
    return [row for row in candidates if col.cell_text(row, col.HIRING_STATUS) == col.STATUS_JOINED]


def compute_time_to_fill(requisitions: Sequence[SheetRow], candidates: Sequence[SheetRow]) -> List[TimeToFillMetric]:
    created_by_id = build_requisition_created_map(requisitions)

    details: List[TimeToFillMetric] = []
    for row in joined_candidates(candidates):
        rmg_id = col.cell_text(row, col.RMG_ID)
        joining_date = col.cell_text(row, col.JOINING_DATE)
        if not rmg_id or not joining_date:
            continue

        created_date = created_by_id.get(rmg_id)
        if not created_date:
            continue

        days = elapsed_days(created_date, joining_date)
        if days is None:
            continue

        details.append(
            TimeToFillMetric(
                rmg_id=rmg_id,
                department=col.cell_text(row, col.DEPARTMENT),
                role=col.cell_text(row, col.ROLE),
                created_date=created_date,
                joining_date=joining_date,
                days_to_fill=days,
            )
        )
    return details


def average_days(details: Sequence[TimeToFillMetric]) -> Optional[float]:
    if not details:
        return None
    return sum(d.days_to_fill for d in details) / len(details)


def offer_acceptance_rate(offer_counts: Mapping[str, int]) -> Optional[float]:
    """
    Percentage of offers (with a status) whose status is exactly "Accepted".
    """
    total = sum(offer_counts.values())
    if total == 0:
        return None
    return offer_counts.get(col.STATUS_ACCEPTED, 0) / total * 100


def monthly_joiner_trend(candidates: Sequence[SheetRow]) -> List[MonthlyJoinerMetric]:
    counts: Dict[str, int] = {}
    for row in joined_candidates(candidates):
        joined_on = normalize_date(col.cell_text(row, col.JOINING_DATE))
        if joined_on is None:
            continue
        key = month_key(joined_on)
        counts[key] = counts.get(key, 0) + 1
    return [MonthlyJoinerMetric(month=k, count=v) for k, v in sorted(counts.items())]


def compute_metrics(record_sets: Mapping[str, Sequence[SheetRow]]) -> MBRMetrics:
    """
    Compute the full metrics model from the (optionally filtered) five record sets.
    Missing record sets are treated as empty.
    """
    logger = get_logger(__name__)

    requisitions = list(record_sets.get(col.MCUBE_DATA) or [])
    candidates = list(record_sets.get(col.TA_TRACKER_DATA) or [])
    offers = list(record_sets.get(col.OFFERS_TRACKER_DATA) or [])
    vendor_rows = list(record_sets.get(col.VENDOR_CONSOLIDATED_DATA) or [])

    details = compute_time_to_fill(requisitions, candidates)
    joined = joined_candidates(candidates)
    offer_counts = count_by(offers, col.OFFER_STATUS)

    metrics = MBRMetrics(
        time_to_fill_details=details,
        overall_time_to_fill_average_days=average_days(details),
        offer_acceptance_rate=offer_acceptance_rate(offer_counts),
        total_joined_candidates=len(details),
        offer_status_breakdown=[OfferMetric(offer_status=k, count=v) for k, v in offer_counts.items()],
        source_of_hire_breakdown=[
            SourceOfHireMetric(source=k, count=v) for k, v in count_by(joined, col.SOURCE).items()
        ],
        joiners_by_department=[
            DepartmentJoinerMetric(department=k, count=v) for k, v in count_by(joined, col.DEPARTMENT).items()
        ],
        vendor_submissions_by_vendor=[
            VendorSubmissionMetric(vendor_name=k, count=v) for k, v in count_by(vendor_rows, col.VENDOR_NAME).items()
        ],
        monthly_joiner_trend=monthly_joiner_trend(candidates),
    )

    logger.debug(
        "Metrics computed: joined=%d time_to_fill=%d offers=%d vendor_rows=%d",
        len(joined),
        len(details),
        sum(offer_counts.values()),
        len(vendor_rows),
    )
    return metrics


__all__ = [
    "TimeToFillMetric",
    "OfferMetric",
    "SourceOfHireMetric",
    "DepartmentJoinerMetric",
    "VendorSubmissionMetric",
    "MonthlyJoinerMetric",
    "MBRMetrics",
    "count_by",
    "compute_time_to_fill",
    "offer_acceptance_rate",
    "monthly_joiner_trend",
    "compute_metrics",
]
