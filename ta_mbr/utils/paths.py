# ta_mbr/utils/paths.py
"""
Path helpers

configs/parameters.yaml sits one level below the repo root; prompt files are
resolved against that root so pipelines work from any CWD.
"""
from __future__ import annotations

from pathlib import Path


def repo_root_from_parameters_path(parameters_path: str | Path) -> Path:
    """
    .../repo/configs/parameters.yaml -> .../repo
    """
    return Path(parameters_path).resolve().parents[1]


def resolve_path(path_like: str | Path, *, base_dir: str | Path) -> Path:
    """
    Resolve a path relative to base_dir unless already absolute.
    """
    p = Path(path_like)
    if p.is_absolute():
        return p
    return (Path(base_dir) / p).resolve()


__all__ = ["repo_root_from_parameters_path", "resolve_path"]
