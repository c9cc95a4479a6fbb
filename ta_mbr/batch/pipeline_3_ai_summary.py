# ta_mbr/batch/pipeline_3_ai_summary.py
"""
Pipeline 3 — AI-powered executive summary of the MBR response.

Intent
- Read the Pipeline 2 response; refuse to summarize an error response.
- Project it to the summary payload (last `summary.max_rows_per_sheet` rows per
  sheet + scalar metrics and breakdowns).
- Render the prompt file (`summary.prompt_path`), call Gemini, persist the result.

Outputs
- {outputs.summary_json}: {"summary": "..."} or {"error": "..."} (+ model_name, attempts)
- {outputs.summary_md}:   the summary text (only on success)

Returns 0 on success, 1 when an error result was written.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ta_mbr.core.mbr_response import MBRResponse
from ta_mbr.core.summary_payload import build_summary_payload, period_label
from ta_mbr.io.readers import read_json
from ta_mbr.io.writers import write_json, write_text
from ta_mbr.llm.client import build_gemini_client
from ta_mbr.llm.prompts import load_prompt_file, render_prompt_blocks
from ta_mbr.llm.summary import SummaryResult, generate_summary
from ta_mbr.utils.config import ensure_dirs, load_credentials, load_parameters
from ta_mbr.utils.logging import configure_logging_from_params, get_logger
from ta_mbr.utils.paths import repo_root_from_parameters_path, resolve_path

NO_DATA_MESSAGE = "No MBR data available to generate a summary."


def _write_result(params, result: SummaryResult) -> None:
    write_json(params.outputs.summary_json, result.model_dump(exclude_none=True))
    if result.ok:
        write_text(params.outputs.summary_md, str(result.summary))


def main(
    parameters_path: str | Path = "configs/parameters.yaml",
    credentials_path: Optional[str | Path] = None,
) -> int:
    params = load_parameters(parameters_path)
    configure_logging_from_params(params)
    logger = get_logger(__name__)
    ensure_dirs(params)

    repo_root = repo_root_from_parameters_path(parameters_path)
    if credentials_path is None:
        credentials_path = Path(parameters_path).parent / "credentials.yaml"

    try:
        response = MBRResponse.model_validate(read_json(params.outputs.mbr_response_json))
    except FileNotFoundError as e:
        logger.error("Pipeline 3: %s", e)
        response = None

    if response is None or response.is_error():
        _write_result(params, SummaryResult(error=NO_DATA_MESSAGE))
        return 1

    data = build_summary_payload(response, params.summary.max_rows_per_sheet)

    prompt = load_prompt_file(resolve_path(params.summary.prompt_path, base_dir=repo_root))
    instructions = render_prompt_blocks(prompt, {"period": period_label(response.date_window)})

    creds = load_credentials(credentials_path)
    try:
        client_ctx = build_gemini_client(creds, model_name_override=params.llm.model_name)
    except EnvironmentError as e:
        logger.error("Pipeline 3: %s", e)
        _write_result(params, SummaryResult(error=str(e)))
        return 1

    result = generate_summary(
        instructions,
        data,
        client_ctx,
        temperature=params.llm.temperature,
        max_retries=params.llm.max_retries,
        retry_backoff_seconds=creds.gemini.request.retry_backoff_seconds,
        max_retry_backoff_seconds=creds.gemini.request.max_retry_backoff_seconds,
    )
    _write_result(params, result)

    if not result.ok:
        logger.error("Pipeline 3 failed: %s", result.error)
        return 1

    logger.info("Pipeline 3 completed: summary written to %s", params.outputs.summary_md)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
