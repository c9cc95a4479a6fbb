# ta_mbr/batch/pipeline_2_compute_metrics.py
"""
Pipeline 2 — Compute the MBR response (records + metrics) from the raw grids.

Intent
- Read the Pipeline 1 artifact.
- Parse the five tabs, apply the configured date window (parameters.yaml `filter`),
  compute metrics, and write the response the dashboard consumes.
- If Pipeline 1 recorded an error (or its artifact is missing), write an error-only
  response instead: no metrics are computed from partial data.

Output
- {outputs.mbr_response_json}
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from ta_mbr.core.mbr_response import MBRResponse, build_mbr_response, error_response
from ta_mbr.core.summary_payload import period_label, summary_headline
from ta_mbr.io.readers import read_json
from ta_mbr.io.writers import write_json
from ta_mbr.utils.config import ParametersConfig, ensure_dirs, load_parameters
from ta_mbr.utils.logging import configure_logging_from_params, get_logger

MISSING_INPUT_MESSAGE = "Raw sheet data not available; run Pipeline 1 first"


def response_from_artifact(artifact: Any, params: ParametersConfig) -> MBRResponse:
    """
    Turn the Pipeline 1 artifact into an MBR response (or an error response).
    """
    if not isinstance(artifact, dict):
        return error_response(MISSING_INPUT_MESSAGE)
    if artifact.get("error"):
        return error_response(str(artifact["error"]))

    tabs: Dict[str, Any] = artifact.get("tabs") or {}
    return build_mbr_response(tabs, params.filter, tab_names=params.sheets.tab_names())


def main(parameters_path: str | Path = "configs/parameters.yaml") -> int:
    params = load_parameters(parameters_path)
    configure_logging_from_params(params)
    logger = get_logger(__name__)
    ensure_dirs(params)

    try:
        artifact = read_json(params.outputs.raw_grids_json)
    except FileNotFoundError as e:
        logger.error("Pipeline 2: %s", e)
        artifact = None

    response = response_from_artifact(artifact, params)
    out_path = Path(params.outputs.mbr_response_json)
    write_json(out_path, response.to_payload())

    if response.is_error():
        logger.error("Pipeline 2 wrote an error response: %s", response.error)
        return 1

    headline = summary_headline(response)
    logger.info(
        "Pipeline 2 completed (%s): avg time to fill=%s days | offer acceptance=%s | joined=%s",
        period_label(response.date_window),
        headline["overallTimeToFillAverageDays"],
        headline["offerAcceptanceRate"],
        headline["totalJoinedCandidates"],
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
