# ta_mbr/utils/config.py
"""
Config Loader — TA MBR Project (Typed YAML Configs)

Intent
- Load + validate the two YAML files that drive the pipelines:
  - configs/parameters.yaml   (what to fetch, date window, summary + LLM knobs, outputs)
  - configs/credentials.yaml  (names of the environment variables holding secrets)
- Return **typed** configuration objects (Pydantic v2).
- Ensure output/cache/report directories exist.

What this module guarantees
- **Strict validation:** invalid configs fail fast with actionable Pydantic errors.
- **Unicode whitespace hardening:** NBSP/BOM/narrow NBSP are normalized before YAML parsing.
- **Secrets never live in YAML:** credentials.yaml only names env vars.
- **Deterministic defaults:** omitted keys fall back to model defaults.

Config models (high level)
- SourceConfig:   kind (google_sheets | xlsx | json), local paths, fetch concurrency
- SheetsConfig:   tab name per record set (defaults: "Mcube Data", "TA Tracker", ...)
- filter:         DateWindow (start/end as YYYY-MM-DD, both optional)
- SummaryConfig:  max_rows_per_sheet (row cap per sheet forwarded to the AI), prompt path
- LLMConfig:      model_name, temperature, max_retries, silence_client_lv_logs
- OutputsConfig:  artifacts/cache/reports dirs + artifact file names
- LoggingConfig:  level, optional log file

Credentials models
- CredentialsGemini:       api_key_env (+ optional model_name) and request knobs
- CredentialsGoogleSheets: env var names for the service account + spreadsheet id

External dependencies
- PyYAML: yaml.safe_load
- Pydantic v2: BaseModel, validators, model_validate
"""


from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ta_mbr.core import sheet_columns as col
from ta_mbr.core.date_filter import DateWindow
from ta_mbr.utils.logging import get_logger


# -----------------------------
# Parameter models
# -----------------------------
class SourceConfig(BaseModel):
    kind: Literal["google_sheets", "xlsx", "json"] = "google_sheets"

    # local sources
    xlsx_path: Optional[str] = None
    json_path: Optional[str] = None

    # one request per tab, run concurrently
    max_workers: int = 5
    cell_range: str = "A:ZZ"

    @field_validator("max_workers")
    @classmethod
    def _validate_positive_int(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("source.max_workers must be > 0")
        return v

    @model_validator(mode="after")
    def _validate_local_paths(self) -> "SourceConfig":
        if self.kind == "xlsx" and not self.xlsx_path:
            raise ValueError("source.xlsx_path is required when source.kind=xlsx")
        if self.kind == "json" and not self.json_path:
            raise ValueError("source.json_path is required when source.kind=json")
        return self


class SheetsConfig(BaseModel):
    mcube_data: str = col.TAB_MCUBE_DATA
    ta_tracker: str = col.TAB_TA_TRACKER
    offers_tracker: str = col.TAB_OFFERS_TRACKER
    vendor_consolidated: str = col.TAB_VENDOR_CONSOLIDATED
    interview_list: str = col.TAB_INTERVIEW_LIST

    def tab_names(self) -> Dict[str, str]:
        """Record-set name -> tab name."""
        return {
            col.MCUBE_DATA: self.mcube_data,
            col.TA_TRACKER_DATA: self.ta_tracker,
            col.OFFERS_TRACKER_DATA: self.offers_tracker,
            col.VENDOR_CONSOLIDATED_DATA: self.vendor_consolidated,
            col.INTERVIEW_LIST_DATA: self.interview_list,
        }


class SummaryConfig(BaseModel):
    max_rows_per_sheet: int = 50
    prompt_path: str = "prompts/mbr_summary.yaml"

    @field_validator("max_rows_per_sheet", mode="before")
    @classmethod
    def _validate_max_rows(cls, v: Any) -> int:
        if v is None:
            return 50
        try:
            iv = int(v)
        except Exception as e:
            raise ValueError("summary.max_rows_per_sheet must be an integer") from e
        if iv <= 0:
            raise ValueError("summary.max_rows_per_sheet must be > 0")
        return iv


class LLMConfig(BaseModel):
    model_name: str = "gemini-2.0-flash"
    temperature: float = 0.3
    max_retries: int = 3

    # silence Gemini / Sheets client logs
    silence_client_lv_logs: bool = False

    @field_validator("temperature")
    @classmethod
    def _validate_temperature(cls, v: float) -> float:
        if v < 0.0 or v > 2.0:
            raise ValueError("llm.temperature must be within [0.0, 2.0]")
        return v

    @field_validator("max_retries")
    @classmethod
    def _validate_max_retries(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("llm.max_retries must be > 0")
        return v


class OutputsConfig(BaseModel):
    artifacts_dir: str = "artifacts"
    cache_dir: str = "artifacts/cache"
    reports_dir: str = "artifacts/reports"

    raw_grids_json: str = "artifacts/cache/pipeline1_raw_grids.json"
    mbr_response_json: str = "artifacts/mbr_response.json"
    summary_json: str = "artifacts/reports/mbr_summary.json"
    summary_md: str = "artifacts/reports/mbr_summary.md"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    log_file: Optional[str] = None


class ParametersConfig(BaseModel):
    source: SourceConfig = Field(default_factory=SourceConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)
    filter: DateWindow = Field(default_factory=DateWindow)
    summary: SummaryConfig = Field(default_factory=SummaryConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# -----------------------------
# Credentials models
# -----------------------------
class CredentialsGeminiRequest(BaseModel):
    timeout_seconds: int = 60
    retry_backoff_seconds: int = 2
    max_retry_backoff_seconds: int = 20

    @field_validator("timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("gemini.request.timeout_seconds must be > 0")
        return v

    @field_validator("retry_backoff_seconds", "max_retry_backoff_seconds")
    @classmethod
    def _validate_backoff(cls, v: int, info) -> int:
        if v < 0:
            raise ValueError(f"gemini.request.{info.field_name} must be >= 0")
        return v


class CredentialsGemini(BaseModel):
    api_key_env: str = "GEMINI_API_KEY"
    model_name: Optional[str] = None
    request: CredentialsGeminiRequest = Field(default_factory=CredentialsGeminiRequest)


class CredentialsGoogleSheets(BaseModel):
    # service account JSON: file path or inline JSON
    credentials_env: str = "GOOGLE_SHEETS_CREDENTIALS"
    # or the two fields of the service account separately
    client_email_env: str = "GOOGLE_SERVICE_ACCOUNT_EMAIL"
    private_key_env: str = "GOOGLE_PRIVATE_KEY"
    spreadsheet_id_env: str = "GOOGLE_SHEETS_SPREADSHEET_ID"


class CredentialsConfig(BaseModel):
    gemini: CredentialsGemini = Field(default_factory=CredentialsGemini)
    google_sheets: CredentialsGoogleSheets = Field(default_factory=CredentialsGoogleSheets)


# -----------------------------
# YAML helpers
# -----------------------------
def _load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    text = p.read_text(encoding="utf-8")

    # sanitize BEFORE YAML parse (NBSP / BOM / narrow NBSP)
    for ch in ["\u00A0", "\u2007", "\u202F", "\uFEFF"]:
        text = text.replace(ch, " ")

    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML root must be a mapping/object: {path}")
    return data


def load_parameters(path: str | Path = "configs/parameters.yaml") -> ParametersConfig:
    """
    Load and validate parameters.yaml into a typed ParametersConfig.
    """
    logger = get_logger(__name__)
    raw = _load_yaml(path)
    try:
        params = ParametersConfig.model_validate(raw)
    except ValidationError as e:
        logger.error("Invalid parameters.yaml: %s", e)
        raise
    return params


def load_credentials(path: str | Path = "configs/credentials.yaml") -> CredentialsConfig:
    """
    Load and validate credentials.yaml into a typed CredentialsConfig.
    """
    logger = get_logger(__name__)
    raw = _load_yaml(path)
    try:
        creds = CredentialsConfig.model_validate(raw)
    except ValidationError as e:
        logger.error("Invalid credentials.yaml: %s", e)
        raise
    return creds


def ensure_dirs(params: ParametersConfig) -> None:
    """
    Ensure configured output directories exist.
    """
    for d in (params.outputs.artifacts_dir, params.outputs.cache_dir, params.outputs.reports_dir):
        Path(d).mkdir(parents=True, exist_ok=True)


__all__ = [
    "ParametersConfig",
    "CredentialsConfig",
    "load_parameters",
    "load_credentials",
    "ensure_dirs",
]
