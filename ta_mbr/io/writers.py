# ta_mbr/io/writers.py
"""
Writers (Deterministic Artifacts I/O)

Intent
- One way to persist pipeline artifacts:
  - JSON (raw grids, MBR response, summary result)
  - plain text / markdown (summary report)

Key behaviors
- UTF-8, ensure_ascii=False, pretty indent.
- Parent directories are created on demand.
- Every write logs path + size at INFO.

Note
- sort_keys defaults to False here: record rows keep their sheet column order,
  which is what a reader of the artifact expects.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ta_mbr.utils.logging import get_logger


def ensure_parent_dir(path: str | Path) -> None:
    """
    Ensure parent directory exists for the given file path.
    """
    parent = Path(path).parent
    if parent and not parent.exists():
        parent.mkdir(parents=True, exist_ok=True)


def write_json(
    path: str | Path,
    obj: Any,
    *,
    indent: int = 2,
    sort_keys: bool = False,
) -> None:
    """
    Write a JSON-serializable object (dict/list/str/num/bool/None).
    """
    logger = get_logger(__name__)
    ensure_parent_dir(path)

    p = Path(path)
    text = json.dumps(obj, ensure_ascii=False, sort_keys=sort_keys, indent=indent)
    p.write_text(text + "\n", encoding="utf-8")

    logger.info("Wrote JSON: %s (bytes=%d)", str(p), len((text + "\n").encode("utf-8")))


def write_text(path: str | Path, text: str) -> None:
    logger = get_logger(__name__)
    ensure_parent_dir(path)

    p = Path(path)
    content = text if text.endswith("\n") else text + "\n"
    p.write_text(content, encoding="utf-8")

    logger.info("Wrote TEXT: %s (chars=%d)", str(p), len(content))


__all__ = ["ensure_parent_dir", "write_json", "write_text"]
