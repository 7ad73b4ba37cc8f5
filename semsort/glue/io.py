"""Configuration and item loading helpers for the command-line glue layer.

Items come either from a plain text file (one item per line) or from one
column of a CSV/Parquet table.  Configuration is YAML or JSON.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from ..protocol.controller import parse_items

TABLE_SUFFIXES = {".csv", ".parquet", ".pq"}


def load_config(path_like: Path) -> Dict:
    """Read a sorter run configuration from YAML or JSON.

    The top level may set ``max_time``, ``max_generations`` and ``version``;
    anything in the ``params`` mapping overrides the matching ``DEFAULTS`` key
    (see `build_params`).  A blank file means "all defaults".
    """

    path = Path(path_like)
    if not path.exists():
        raise FileNotFoundError(path)

    text = path.read_text(encoding="utf-8")
    loader = json.loads if path.suffix.lower() == ".json" else yaml.safe_load
    cfg = loader(text) if text.strip() else None
    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise ValueError(f"configuration root must be a mapping: {path}")
    if not isinstance(cfg.get("params", {}), dict):
        raise ValueError(f"'params' must be a mapping: {path}")
    return cfg


def _read_frame(path_like: Path):
    """Return a Pandas ``DataFrame`` from CSV or Parquet input."""

    import pandas as pd

    path = Path(path_like)
    if path.suffix.lower() in {".parquet", ".pq"}:
        return pd.read_parquet(path)
    return pd.read_csv(path)


def load_items(path_like: Path, column: Optional[str] = None) -> List[str]:
    """Load the items to sort, preserving file order."""

    path = Path(path_like)
    if not path.exists():
        raise FileNotFoundError(path)

    if path.suffix.lower() not in TABLE_SUFFIXES:
        return parse_items(path.read_text(encoding="utf-8"))

    df = _read_frame(path)
    if df.columns.empty:
        raise ValueError(f"table has no columns: {path}")
    name = column if column is not None else df.columns[0]
    if name not in df.columns:
        raise ValueError(f"column {name!r} not found in {path}")
    values = df[name].dropna().astype(str).str.strip()
    return [v for v in values.tolist() if v]


__all__ = ["load_config", "load_items"]
