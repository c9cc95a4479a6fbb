# tests/test_pipeline_3_ai_summary.py

from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import ta_mbr.batch.pipeline_3_ai_summary as p3
import ta_mbr.llm.summary as summary_mod
from ta_mbr.core.date_filter import DateWindow
from ta_mbr.core.mbr_response import build_mbr_response

REPO_ROOT = Path(__file__).resolve().parents[1]


def _write_configs(repo: Path, *, max_rows: int = 1) -> Path:
    (repo / "configs").mkdir(parents=True, exist_ok=True)
    params_path = repo / "configs" / "parameters.yaml"
    params_path.write_text(
        f"""
summary:
  max_rows_per_sheet: {max_rows}
  prompt_path: {(REPO_ROOT / "prompts" / "mbr_summary.yaml").as_posix()}
llm:
  model_name: gemini-test
  temperature: 0.2
  max_retries: 2
outputs:
  artifacts_dir: artifacts
  cache_dir: artifacts/cache
  reports_dir: artifacts/reports
  mbr_response_json: artifacts/mbr_response.json
  summary_json: artifacts/reports/mbr_summary.json
  summary_md: artifacts/reports/mbr_summary.md
""",
        encoding="utf-8",
    )
    (repo / "configs" / "credentials.yaml").write_text(
        "gemini:\n  api_key_env: GEMINI_API_KEY\n  request:\n    retry_backoff_seconds: 0\n",
        encoding="utf-8",
    )
    return params_path


def _write_response(repo: Path, payload: dict) -> None:
    p = repo / "artifacts" / "mbr_response.json"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(payload), encoding="utf-8")


def _mbr_payload() -> dict:
    grids = {
        "Mcube Data": [["RMG ID", "Request Created Date"], ["R1", "01-Jun-2024"], ["R2", "03-Jun-2024"]],
        "TA Tracker": [["RMG ID", "Hiring Status", "Joining Date"], ["R1", "Joined", "15-Jun-2024"]],
        "Offers tracker": [["Offer Status", "Offer Date"], ["Accepted", "2024-06-02"]],
    }
    return build_mbr_response(grids, DateWindow(start="2024-06-01", end="2024-06-30")).to_payload()


def _read(repo: Path, name: str) -> str:
    return (repo / "artifacts" / "reports" / name).read_text(encoding="utf-8")


def test_pipeline_3_writes_summary(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    params_path = _write_configs(tmp_path)
    _write_response(tmp_path, _mbr_payload())

    seen = {}
    monkeypatch.setattr(p3, "build_gemini_client", lambda creds, model_name_override=None: {
        "client": object(),
        "model_name": model_name_override,
    })

    def _fake_call(client, model_name, prompt, temperature):
        seen.update(model_name=model_name, prompt=prompt, temperature=temperature)
        return SimpleNamespace(text="- 1 candidate joined in June")

    monkeypatch.setattr(summary_mod, "_call_gemini", _fake_call)

    assert p3.main(params_path) == 0

    assert _read(tmp_path, "mbr_summary.md") == "- 1 candidate joined in June\n"
    result = json.loads(_read(tmp_path, "mbr_summary.json"))
    assert result["summary"] == "- 1 candidate joined in June"
    assert "error" not in result

    assert seen["model_name"] == "gemini-test"
    assert seen["temperature"] == 0.2
    assert "2024-06-01 to 2024-06-30" in seen["prompt"]

    data = json.loads(seen["prompt"].split("Here is the data for analysis:\n", 1)[1])
    assert [r["RMG ID"] for r in data["mcubeData"]] == ["R2"]
    assert "timeToFillDetails" not in data["metrics"]
    assert data["metrics"]["offerAcceptanceRate"] == 100


def test_pipeline_3_refuses_error_response(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    params_path = _write_configs(tmp_path)
    _write_response(tmp_path, {"error": "Failed to fetch and process data from Google Sheets"})

    assert p3.main(params_path) == 1
    assert json.loads(_read(tmp_path, "mbr_summary.json"))["error"] == p3.NO_DATA_MESSAGE
    assert not (tmp_path / "artifacts" / "reports" / "mbr_summary.md").exists()


def test_pipeline_3_missing_api_key(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    params_path = _write_configs(tmp_path)
    _write_response(tmp_path, _mbr_payload())

    assert p3.main(params_path) == 1
    error = json.loads(_read(tmp_path, "mbr_summary.json"))["error"]
    assert error.startswith("AI service not configured")


def test_pipeline_3_reports_api_error(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    params_path = _write_configs(tmp_path)
    _write_response(tmp_path, _mbr_payload())

    class QuotaError(summary_mod.genai_errors.APIError):
        def __init__(self):
            Exception.__init__(self, "quota")
            self.code = 429
            self.message = "Resource has been exhausted"
            self.status = None
            self.details = None

    def _fail(client, model_name, prompt, temperature):
        raise QuotaError()

    monkeypatch.setattr(p3, "build_gemini_client", lambda creds, model_name_override=None: {
        "client": object(),
        "model_name": "gemini-test",
    })
    monkeypatch.setattr(summary_mod, "_call_gemini", _fail)
    monkeypatch.setattr(summary_mod.time, "sleep", lambda s: None)

    assert p3.main(params_path) == 1
    result = json.loads(_read(tmp_path, "mbr_summary.json"))
    assert result["error"] == "Gemini API Error (429): Resource has been exhausted"
    assert result["attempts"] == 2


def test_pipeline_3_transport_failure_still_writes_result(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    params_path = _write_configs(tmp_path)
    _write_response(tmp_path, _mbr_payload())

    def _timeout(client, model_name, prompt, temperature):
        raise TimeoutError("read timed out")

    monkeypatch.setattr(p3, "build_gemini_client", lambda creds, model_name_override=None: {
        "client": object(),
        "model_name": "gemini-test",
    })
    monkeypatch.setattr(summary_mod, "_call_gemini", _timeout)

    assert p3.main(params_path) == 1
    result = json.loads(_read(tmp_path, "mbr_summary.json"))
    assert result["error"] == "Internal server error while generating AI summary: read timed out"
    assert not (tmp_path / "artifacts" / "reports" / "mbr_summary.md").exists()
