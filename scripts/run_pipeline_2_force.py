# scripts/run_pipeline_2_force.py
"""
Manual runner — Pipeline 2 (compute the MBR response)

Usage:
    python scripts/run_pipeline_2_force.py [START YYYY-MM-DD] [END YYYY-MM-DD]

Bounds given on the command line override parameters.yaml `filter` for this run only.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from ta_mbr.batch.pipeline_2_compute_metrics import response_from_artifact
from ta_mbr.core.date_filter import DateWindow
from ta_mbr.io.readers import read_json
from ta_mbr.io.writers import write_json
from ta_mbr.utils.config import load_parameters
from ta_mbr.utils.logging import get_logger


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compute the MBR response from the Pipeline 1 artifact.")
    parser.add_argument("start", nargs="?", default=None, help="inclusive start date (YYYY-MM-DD)")
    parser.add_argument("end", nargs="?", default=None, help="inclusive end date (YYYY-MM-DD)")
    args = parser.parse_args(argv)

    logger = get_logger(__name__)
    logger.info("=" * 80)
    logger.info("RUNNING PIPELINE 2 — COMPUTE METRICS")
    logger.info("=" * 80)

    params = load_parameters(REPO_ROOT / "configs/parameters.yaml")
    if args.start or args.end:
        params = params.model_copy(update={"filter": DateWindow(start=args.start, end=args.end)})

    artifact_path = Path(params.outputs.raw_grids_json)
    if not artifact_path.exists():
        raise FileNotFoundError(f"Pipeline 1 artifact missing: {artifact_path}\nDid you run Pipeline 1 first?")

    response = response_from_artifact(read_json(artifact_path), params)
    write_json(params.outputs.mbr_response_json, response.to_payload())

    rc = 1 if response.is_error() else 0
    logger.info("Pipeline 2 finished with return code: %s", rc)
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
