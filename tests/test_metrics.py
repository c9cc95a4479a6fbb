# tests/test_metrics.py
import pytest

from ta_mbr.core.metrics import (
    MBRMetrics,
    compute_metrics,
    compute_time_to_fill,
    count_by,
    monthly_joiner_trend,
    offer_acceptance_rate,
)
from ta_mbr.core.sheet_parsing import parse_sheet_grid
from ta_mbr.core.summary_payload import format_rate


def test_time_to_fill_scenario():
    requisitions = [{"RMG ID": "R1", "Request Created Date": "01-Jan-2024"}]
    candidates = [{"RMG ID": "R1", "Hiring Status": "Joined", "Joining Date": "15-Jan-2024"}]

    m = compute_metrics({"mcubeData": requisitions, "taTrackerData": candidates})

    assert len(m.time_to_fill_details) == 1
    d = m.time_to_fill_details[0]
    assert d.rmg_id == "R1"
    assert d.created_date == "01-Jan-2024"
    assert d.joining_date == "15-Jan-2024"
    assert d.days_to_fill == 14
    assert d.department is None and d.role is None
    assert m.overall_time_to_fill_average_days == 14
    assert m.total_joined_candidates == 1


def test_time_to_fill_skips_missing_join_and_non_joined():
    requisitions = [{"RMG ID": "R1", "Request Created Date": "01-Jan-2024"}]
    candidates = [
        {"RMG ID": "R404", "Hiring Status": "Joined", "Joining Date": "15-Jan-2024"},
        {"RMG ID": "R1", "Hiring Status": "joined", "Joining Date": "15-Jan-2024"},
        {"RMG ID": "R1", "Hiring Status": "Offered", "Joining Date": "15-Jan-2024"},
        {"RMG ID": "R1", "Hiring Status": "Joined", "Joining Date": ""},
        {"RMG ID": "R1", "Hiring Status": "Joined", "Joining Date": "soon"},
    ]
    assert compute_time_to_fill(requisitions, candidates) == []

    m = compute_metrics({"mcubeData": requisitions, "taTrackerData": candidates})
    assert m.overall_time_to_fill_average_days is None
    assert m.total_joined_candidates == 0


def test_time_to_fill_joins_numeric_ids_and_averages():
    requisitions = parse_sheet_grid(
        [
            ["RMG ID", "Request Created Date"],
            ["101", "2024-01-01"],
            ["102", "2024-02-01"],
        ]
    )
    candidates = parse_sheet_grid(
        [
            ["RMG ID", "Hiring Status", "Joining Date", "Department", "Role"],
            ["101", "Joined", "11-Jan-2024", "Data", "Analyst"],
            ["102", "Joined", "2024-02-21", "Data", "Engineer"],
        ]
    )
    m = compute_metrics({"mcubeData": requisitions, "taTrackerData": candidates})

    assert [d.rmg_id for d in m.time_to_fill_details] == ["101", "102"]
    assert [d.days_to_fill for d in m.time_to_fill_details] == [10, 20]
    assert m.time_to_fill_details[1].role == "Engineer"
    assert m.overall_time_to_fill_average_days == 15


def test_offer_scenario_breakdown_and_rate():
    offers = [{"Offer Status": "Accepted"}, {"Offer Status": "Accepted"}, {"Offer Status": "Declined"}]
    m = compute_metrics({"offersTrackerData": offers})

    assert [(o.offer_status, o.count) for o in m.offer_status_breakdown] == [("Accepted", 2), ("Declined", 1)]
    assert m.offer_acceptance_rate == pytest.approx(200 / 3)
    assert format_rate(m.offer_acceptance_rate) == "66.7%"


def test_offer_breakdown_sum_matches_non_empty_statuses():
    offers = [
        {"Offer Status": "Declined"},
        {"Offer Status": ""},
        {"Offer Status": "Accepted"},
        {"Offer Status": "On Hold"},
        {"Other": "x"},
        {"Offer Status": "Declined"},
    ]
    m = compute_metrics({"offersTrackerData": offers})

    assert sum(o.count for o in m.offer_status_breakdown) == 4
    assert [o.offer_status for o in m.offer_status_breakdown] == ["Declined", "Accepted", "On Hold"]
    assert 0 <= m.offer_acceptance_rate <= 100
    assert m.offer_acceptance_rate == 25


def test_offer_rate_undefined_without_offers():
    assert offer_acceptance_rate({}) is None
    assert compute_metrics({"offersTrackerData": [{"Offer Status": ""}]}).offer_acceptance_rate is None


def test_source_department_and_vendor_breakdowns():
    candidates = [
        {"Hiring Status": "Joined", "Source": "Referral", "Department": "Data"},
        {"Hiring Status": "Joined", "Source": "LinkedIn", "Department": ""},
        {"Hiring Status": "Joined", "Source": "Referral", "Department": "Platform"},
        {"Hiring Status": "Interviewing", "Source": "Vendor", "Department": "Data"},
        {"Hiring Status": "Joined", "Department": "Data"},
    ]
    vendors = [
        {"Vendor Name": "Globex"},
        {"Vendor Name": "Acme"},
        {"Vendor Name": ""},
        {"Vendor Name": "Globex"},
    ]
    m = compute_metrics({"taTrackerData": candidates, "vendorConsolidatedData": vendors})

    assert [(s.source, s.count) for s in m.source_of_hire_breakdown] == [("Referral", 2), ("LinkedIn", 1)]
    assert [(d.department, d.count) for d in m.joiners_by_department] == [("Data", 2), ("Platform", 1)]
    assert [(v.vendor_name, v.count) for v in m.vendor_submissions_by_vendor] == [("Globex", 2), ("Acme", 1)]


def test_monthly_joiner_trend_sorted_and_zero_padded():
    candidates = [
        {"Hiring Status": "Joined", "Joining Date": "03-Nov-2024"},
        {"Hiring Status": "Joined", "Joining Date": "2024-3-15"},
        {"Hiring Status": "Joined", "Joining Date": "28-Mar-2024"},
        {"Hiring Status": "Joined", "Joining Date": "unknown"},
        {"Hiring Status": "Declined", "Joining Date": "01-Jan-2024"},
        {"Hiring Status": "Joined", "Joining Date": "15-Dec-2023"},
    ]
    trend = monthly_joiner_trend(candidates)
    assert [(t.month, t.count) for t in trend] == [("2023-12", 1), ("2024-03", 2), ("2024-11", 1)]


def test_empty_input_produces_empty_model():
    m = compute_metrics({})
    assert m == MBRMetrics()
    assert m.time_to_fill_details == []
    assert m.offer_status_breakdown == []
    assert m.overall_time_to_fill_average_days is None
    assert m.offer_acceptance_rate is None


def test_count_by_keeps_first_occurrence_order():
    rows = [{"k": "b"}, {"k": "a"}, {"k": "b"}, {"k": 7}, {}]
    assert count_by(rows, "k") == {"b": 2, "a": 1, "7": 1}
    assert list(count_by(rows, "k")) == ["b", "a", "7"]


def test_metrics_serialize_with_dashboard_names():
    offers = [{"Offer Status": "Accepted"}]
    payload = compute_metrics({"offersTrackerData": offers}).model_dump(by_alias=True, exclude_none=True)

    assert payload["offerStatusBreakdown"] == [{"offerStatus": "Accepted", "count": 1}]
    assert payload["offerAcceptanceRate"] == 100
    assert payload["timeToFillDetails"] == []
    assert "overallTimeToFillAverageDays" not in payload
