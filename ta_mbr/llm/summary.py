# ta_mbr/llm/summary.py
"""
MBR executive summary via Gemini

Intent
- Send the summary instructions plus the projected MBR data (see
  `ta_mbr.core.summary_payload`) to Gemini and return plain text.
- One request per summary; transient API failures (429 / 5xx) are retried with a
  linear backoff, everything else is reported back as an error value.

Contract
- `generate_summary()` returns a `SummaryResult` carrying either `summary` or `error`.
  It never returns both. A missing prompt raises ValueError (caller bug).
- Backoff before attempt n+1 is min(retry_backoff_seconds * n, max_retry_backoff_seconds).
- Any other failure (transport, timeout, SDK bug) ends the call with an
  "Internal server error while generating AI summary: ..." error value.
- The full prompt is:
      <instructions>

      Here is the data for analysis:
      <pretty JSON of the data>
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

from google.genai import errors as genai_errors
from pydantic import BaseModel

from ta_mbr.llm.prompts import json_dumps_pretty
from ta_mbr.utils.logging import get_logger

_RETRYABLE_CODES = {429, 500, 502, 503, 504}

UNEXPECTED_RESPONSE_ERROR = "Failed to get summary from AI due to unexpected response structure."


class SummaryResult(BaseModel):
    summary: Optional[str] = None
    error: Optional[str] = None
    model_name: Optional[str] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.summary is not None and self.error is None


def build_full_prompt(instructions: str, data: Any) -> str:
    if not isinstance(instructions, str) or not instructions.strip():
        raise ValueError("Prompt is required to generate an AI summary.")
    return f"{instructions.strip()}\n\nHere is the data for analysis:\n{json_dumps_pretty(data)}"


def _response_text(resp: Any) -> Optional[str]:
    """
    Text of the first candidate part, or None when the response has no usable text.
    """
    text = getattr(resp, "text", None)
    if isinstance(text, str) and text.strip():
        return text

    candidates = getattr(resp, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return None
    part_text = getattr(parts[0], "text", None)
    if isinstance(part_text, str) and part_text.strip():
        return part_text
    return None


def _call_gemini(client: Any, model_name: str, prompt: str, temperature: float) -> Any:
    """
    Isolated for test mocking.
    """
    return client.models.generate_content(
        model=model_name,
        contents=prompt,
        config={"temperature": temperature},
    )


def generate_summary(
    instructions: str,
    data: Any,
    client_ctx: Dict[str, Any],
    *,
    temperature: float = 0.3,
    max_retries: int = 3,
    retry_backoff_seconds: float = 2.0,
    max_retry_backoff_seconds: float = 20.0,
) -> SummaryResult:
    logger = get_logger(__name__)

    prompt = build_full_prompt(instructions, data)
    client = client_ctx["client"]
    model_name = client_ctx["model_name"]

    for attempt in range(1, max_retries + 1):
        try:
            resp = _call_gemini(client, model_name, prompt, temperature)
        except genai_errors.APIError as e:
            code = getattr(e, "code", None)
            message = getattr(e, "message", None) or str(e) or "Unknown error"
            logger.warning("Gemini API error (attempt %d/%d): code=%s %s", attempt, max_retries, code, message)
            if code in _RETRYABLE_CODES and attempt < max_retries:
                time.sleep(min(retry_backoff_seconds * attempt, max_retry_backoff_seconds))
                continue
            return SummaryResult(
                error=f"Gemini API Error ({code}): {message}",
                model_name=model_name,
                attempts=attempt,
            )
        except Exception as e:
            logger.exception("AI summary request failed (attempt %d/%d)", attempt, max_retries)
            return SummaryResult(
                error=f"Internal server error while generating AI summary: {e}",
                model_name=model_name,
                attempts=attempt,
            )

        text = _response_text(resp)
        if text is None:
            logger.error("Unexpected AI response structure: %r", resp)
            return SummaryResult(error=UNEXPECTED_RESPONSE_ERROR, model_name=model_name, attempts=attempt)

        logger.info("AI summary generated (model=%s chars=%d attempts=%d)", model_name, len(text), attempt)
        return SummaryResult(summary=text, model_name=model_name, attempts=attempt)

    # max_retries <= 0
    return SummaryResult(error="AI summary was not attempted (max_retries must be > 0).", model_name=model_name)


__all__ = ["SummaryResult", "build_full_prompt", "generate_summary", "UNEXPECTED_RESPONSE_ERROR"]
