# scripts/run_pipeline_1_force.py
"""
Manual runner — Pipeline 1 (fetch the tracker tabs)

Runs against the real configs; with source.kind=google_sheets this calls the Sheets API
using the service account named in configs/credentials.yaml.

Usage:
    python scripts/run_pipeline_1_force.py
"""

from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from ta_mbr.batch.pipeline_1_fetch_sheets import main as pipeline_1_main
from ta_mbr.utils.logging import get_logger


def main() -> int:
    logger = get_logger(__name__)

    logger.info("=" * 80)
    logger.info("RUNNING PIPELINE 1 — FETCH SHEETS")
    logger.info("Repo root: %s", REPO_ROOT)
    logger.info("=" * 80)

    parameters_path = REPO_ROOT / "configs/parameters.yaml"
    credentials_path = REPO_ROOT / "configs/credentials.yaml"
    for p in (parameters_path, credentials_path):
        if not p.exists():
            raise FileNotFoundError(f"Required file missing for Pipeline 1: {p}")

    rc = pipeline_1_main(parameters_path, credentials_path)

    logger.info("Pipeline 1 finished with return code: %s", rc)
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
