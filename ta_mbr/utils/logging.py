# ta_mbr/utils/logging.py
"""
Logging Utilities — One Root Configuration for Pipelines + Client Silencing

Intent
- Give every pipeline and engine module the same log format through one entrypoint.
- Support correlation via `run_id` (injected into LogRecord).
- Optionally mute INFO/DEBUG chatter from the HTTP / Google client stacks used by the
  Sheets fetcher (gspread, google-auth, urllib3) and the Gemini SDK (google_genai, httpx).

What this module guarantees
- **Idempotent root configuration:** repeated `configure_logging()` calls never duplicate handlers.
- **Stable log format:** timestamp | level | logger | message.
- **Optional log-to-file:** a FileHandler is added next to the stream handler.
- **Client silencing (when enabled):** noisy loggers are disabled and a `NoisyLibFilter`
  is installed on the root logger and its handlers as a backstop for child loggers
  created later.

Primary API
- `configure_logging(level="INFO", log_file=None, silence_client_lv_logs=False) -> None`
- `get_logger(name: str, run_id: str | None = None) -> logging.Logger`
  Lazily configures logging with defaults if not configured yet.

Notes
- The metrics engine (`ta_mbr.core`) logs at DEBUG only; pipelines log at INFO.
- Handlers live on root; modules never attach their own handlers.
"""


from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

_CONFIGURED = False
_CURRENT_LOG_FILE: Optional[str] = None
_SILENCE_CLIENT_LV_LOGS: Optional[bool] = None  # None = never set explicitly


# Only namespaces that are consistently noisy at INFO/DEBUG.
_NOISY_PREFIXES = [
    # http stack
    "httpx",
    "httpcore",
    "urllib3",
    "requests",
    # google sheets + auth
    "gspread",
    "google.auth",
    "google_auth_httplib2",
    # google genai SDK
    "google_genai",
]


class RunIdFilter(logging.Filter):
    """Inject run_id into log records."""

    def __init__(self, run_id: Optional[str] = None) -> None:
        super().__init__()
        self.run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = self.run_id
        return True


class NoisyLibFilter(logging.Filter):
    """
    Drop INFO/DEBUG records of noisy client namespaces when enabled.
    WARNING+ always passes.
    """

    def __init__(self, *, enabled: bool, prefixes: list[str], min_level: int) -> None:
        super().__init__()
        self.enabled = enabled
        self.prefixes = prefixes
        self.min_level = min_level

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.enabled:
            return True
        if record.levelno >= self.min_level:
            return True
        return not _matches_prefix(record.name or "", self.prefixes)


def _matches_prefix(name: str, prefixes: list[str]) -> bool:
    for p in prefixes:
        if name == p or name.startswith(p + "."):
            return True
    return False


def _install_noisy_filters(*, enabled: bool) -> None:
    """
    (Re)install exactly one NoisyLibFilter on the root logger and on each root handler.
    """
    root = logging.getLogger()
    targets: list = [root, *root.handlers]
    for target in targets:
        for f in list(target.filters):
            if isinstance(f, NoisyLibFilter):
                target.removeFilter(f)
        target.addFilter(
            NoisyLibFilter(
                enabled=enabled,
                prefixes=list(_NOISY_PREFIXES),
                min_level=logging.WARNING,
            )
        )


def _apply_client_log_silencing(silence_client_lv_logs: bool) -> None:
    """
    Disable (or re-enable) noisy client loggers, then refresh the backstop filters.
    """
    manager_dict = logging.Logger.manager.loggerDict  # type: ignore[attr-defined]

    names_to_touch = set(_NOISY_PREFIXES)
    for name in list(manager_dict.keys()):
        if _matches_prefix(name, _NOISY_PREFIXES):
            names_to_touch.add(name)

    for name in sorted(names_to_touch):
        lg = logging.getLogger(name)
        if silence_client_lv_logs:
            lg.disabled = True
            lg.propagate = False
            for h in list(lg.handlers):
                lg.removeHandler(h)
        else:
            lg.disabled = False
            lg.setLevel(logging.INFO)
            lg.propagate = True

    _install_noisy_filters(enabled=silence_client_lv_logs)


def configure_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    silence_client_lv_logs: bool = False,
) -> None:
    """
    Configure root logging (idempotent for handlers).

    - Adds a StreamHandler once.
    - If log_file is provided, adds a FileHandler for that path once.
    - Applies client-level silencing; filters are refreshed on every call because a
      new FileHandler may have been added.
    """
    global _CONFIGURED, _CURRENT_LOG_FILE, _SILENCE_CLIENT_LV_LOGS

    root = logging.getLogger()
    root_level = getattr(logging, level.upper(), None)
    if not isinstance(root_level, int):
        raise ValueError(f"Invalid log level: {level}")
    root.setLevel(root_level)

    formatter = logging.Formatter(fmt=_DEFAULT_FORMAT, datefmt=_DEFAULT_DATEFMT)

    has_stream = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in root.handlers
    )
    if not has_stream:
        sh = logging.StreamHandler()
        sh.setFormatter(formatter)
        root.addHandler(sh)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        target = Path(log_file).resolve()
        has_file = any(
            isinstance(h, logging.FileHandler) and Path(h.baseFilename).resolve() == target
            for h in root.handlers
        )
        if not has_file:
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setFormatter(formatter)
            root.addHandler(fh)
        _CURRENT_LOG_FILE = log_file

    if _SILENCE_CLIENT_LV_LOGS is None or _SILENCE_CLIENT_LV_LOGS != silence_client_lv_logs:
        _apply_client_log_silencing(silence_client_lv_logs)
        _SILENCE_CLIENT_LV_LOGS = silence_client_lv_logs
    else:
        _install_noisy_filters(enabled=bool(_SILENCE_CLIENT_LV_LOGS))

    _CONFIGURED = True


def configure_logging_from_params(params) -> None:
    """
    Apply `params.logging` + `params.llm.silence_client_lv_logs` from a ParametersConfig.
    """
    configure_logging(
        level=params.logging.level,
        log_file=params.logging.log_file,
        silence_client_lv_logs=params.llm.silence_client_lv_logs,
    )


def get_logger(name: str, run_id: Optional[str] = None) -> logging.Logger:
    """
    Get a module logger. Configures INFO-level root logging lazily on first use.
    If run_id is provided, a RunIdFilter is attached once per run_id.
    """
    if not _CONFIGURED:
        configure_logging(level="INFO", log_file=None, silence_client_lv_logs=False)

    logger = logging.getLogger(name)

    if run_id is not None:
        already = any(isinstance(f, RunIdFilter) and f.run_id == run_id for f in logger.filters)
        if not already:
            logger.addFilter(RunIdFilter(run_id=run_id))

    return logger


__all__ = [
    "get_logger",
    "configure_logging",
    "configure_logging_from_params",
    "RunIdFilter",
    "NoisyLibFilter",
]
