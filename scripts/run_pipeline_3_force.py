# scripts/run_pipeline_3_force.py
"""
Manual runner — Pipeline 3 (AI executive summary, REAL Gemini call)

Usage:
    GEMINI_API_KEY=... python scripts/run_pipeline_3_force.py
"""

from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from ta_mbr.batch.pipeline_3_ai_summary import main as pipeline_3_main
from ta_mbr.utils.logging import get_logger


def main() -> int:
    logger = get_logger(__name__)

    logger.info("=" * 80)
    logger.info("RUNNING PIPELINE 3 — AI SUMMARY")
    logger.info("=" * 80)

    required_files = [
        REPO_ROOT / "configs/parameters.yaml",
        REPO_ROOT / "configs/credentials.yaml",
        REPO_ROOT / "prompts/mbr_summary.yaml",
    ]
    for p in required_files:
        if not p.exists():
            raise FileNotFoundError(f"Required file missing for Pipeline 3: {p}")

    rc = pipeline_3_main(REPO_ROOT / "configs/parameters.yaml", REPO_ROOT / "configs/credentials.yaml")

    logger.info("Pipeline 3 finished with return code: %s", rc)
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
