# ta_mbr/llm/client.py
"""
Gemini client for the MBR summary (`google.genai`)

Intent
- Turn the `gemini` section of credentials.yaml into a ready-to-use client context:
    {"client": genai.Client, "model_name": "<resolved>"}
- The API key is read from the environment variable named by `gemini.api_key_env`;
  it never lives in a file.
- `gemini.request.timeout_seconds` becomes the per-request HTTP timeout.

Model name, first non-empty of
1) `model_name_override` (parameters.yaml llm.model_name)
2) `gemini.model_name` in credentials.yaml
3) env `GEMINI_MODEL`

No network calls are made here.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from google import genai
from google.genai import types

from ta_mbr.utils.config import CredentialsConfig
from ta_mbr.utils.logging import get_logger


def get_model_name(creds: CredentialsConfig, *, model_name_override: Optional[str] = None) -> str:
    for candidate in (model_name_override, creds.gemini.model_name, os.environ.get("GEMINI_MODEL")):
        if candidate:
            return str(candidate)
    raise ValueError("Gemini model name not found (llm.model_name / gemini.model_name / GEMINI_MODEL)")


def http_options(creds: CredentialsConfig) -> types.HttpOptions:
    # HttpOptions.timeout is in milliseconds
    return types.HttpOptions(timeout=creds.gemini.request.timeout_seconds * 1000)


def build_gemini_client(
    creds: CredentialsConfig,
    *,
    model_name_override: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Raises EnvironmentError ("AI service not configured: ...") when the key is unset.
    """
    logger = get_logger(__name__)

    api_key_env = creds.gemini.api_key_env
    api_key = os.environ.get(api_key_env)
    if not api_key:
        logger.error("%s is not set in environment variables.", api_key_env)
        raise EnvironmentError(f"AI service not configured: environment variable '{api_key_env}' not set")

    model_name = get_model_name(creds, model_name_override=model_name_override)
    logger.debug(
        "Initializing Gemini client (model=%s timeout=%ss)", model_name, creds.gemini.request.timeout_seconds
    )

    return {
        "client": genai.Client(api_key=api_key, http_options=http_options(creds)),
        "model_name": model_name,
    }


__all__ = ["build_gemini_client", "get_model_name", "http_options"]
