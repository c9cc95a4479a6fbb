# tests/test_pipeline_2_compute_metrics.py

from __future__ import annotations

import json
from pathlib import Path

import ta_mbr.batch.pipeline_2_compute_metrics as p2


def _write_json(p: Path, obj) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(obj, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")


def _write_parameters(repo: Path, filter_block: str = "") -> Path:
    (repo / "configs").mkdir(parents=True, exist_ok=True)
    p = repo / "configs" / "parameters.yaml"
    p.write_text(
        f"""
{filter_block}
outputs:
  artifacts_dir: artifacts
  cache_dir: artifacts/cache
  reports_dir: artifacts/reports
  raw_grids_json: artifacts/cache/pipeline1_raw_grids.json
  mbr_response_json: artifacts/mbr_response.json
""",
        encoding="utf-8",
    )
    return p


def _raw_artifact() -> dict:
    return {
        "source": "json",
        "fetched_at": "2024-07-01T00:00:00Z",
        "tabs": {
            "Mcube Data": [["RMG ID", "Request Created Date"], ["R1", "01-Jun-2024"], ["R2", "01-Jan-2024"]],
            "TA Tracker": [
                ["RMG ID", "Hiring Status", "Joining Date", "Source"],
                ["R1", "Joined", "15-Jun-2024", "Referral"],
                ["R2", "Joined", "01-Feb-2024", "LinkedIn"],
            ],
            "Offers tracker": [["Offer Status", "Offer Date"], ["Accepted", "2024-06-02"], ["Declined", "2024-06-05"]],
            "Vendor Consolidated": [],
            "Interview List": [],
        },
    }


def _read_response(repo: Path) -> dict:
    return json.loads((repo / "artifacts" / "mbr_response.json").read_text(encoding="utf-8"))


def test_pipeline_2_computes_unfiltered_metrics(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_json(tmp_path / "artifacts" / "cache" / "pipeline1_raw_grids.json", _raw_artifact())

    assert p2.main(_write_parameters(tmp_path)) == 0

    out = _read_response(tmp_path)
    assert "dateWindow" not in out
    assert len(out["mcubeData"]) == 2
    assert out["metrics"]["totalJoinedCandidates"] == 2
    assert out["metrics"]["offerAcceptanceRate"] == 50
    assert out["metrics"]["sourceOfHireBreakdown"] == [
        {"source": "Referral", "count": 1},
        {"source": "LinkedIn", "count": 1},
    ]


def test_pipeline_2_applies_configured_window(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_json(tmp_path / "artifacts" / "cache" / "pipeline1_raw_grids.json", _raw_artifact())
    params_path = _write_parameters(tmp_path, "filter:\n  start: '2024-06-01'\n  end: '2024-06-30'")

    assert p2.main(params_path) == 0

    out = _read_response(tmp_path)
    assert out["dateWindow"] == {"start": "2024-06-01", "end": "2024-06-30"}
    assert [r["RMG ID"] for r in out["taTrackerData"]] == ["R1"]
    assert out["metrics"]["timeToFillDetails"][0]["daysToFill"] == 14
    assert out["metrics"]["monthlyJoinerTrend"] == [{"month": "2024-06", "count": 1}]


def test_pipeline_2_propagates_fetch_error(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_json(
        tmp_path / "artifacts" / "cache" / "pipeline1_raw_grids.json",
        {"source": "google_sheets", "error": "Failed to fetch and process data from Google Sheets"},
    )

    assert p2.main(_write_parameters(tmp_path)) == 1
    assert _read_response(tmp_path) == {"error": "Failed to fetch and process data from Google Sheets"}


def test_pipeline_2_missing_raw_artifact(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert p2.main(_write_parameters(tmp_path)) == 1
    assert _read_response(tmp_path) == {"error": p2.MISSING_INPUT_MESSAGE}
