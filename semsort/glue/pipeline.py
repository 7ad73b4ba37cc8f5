"""Command line pipeline: load items, sort them through the runner, export."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from ..backends.handles import Collaborators
from ..config.config import DEFAULTS
from ..engine.errors import PipelineError, ValidationFailure
from ..logging.metrics import save_layout_csv, save_metrics_json, save_order_csv
from ..protocol.controller import SortController
from ..protocol.messages import Error
from ..protocol.runner import PipelineRunner
from ..view.layers import VisualParameters, frame_coordinates, ranked_rows
from ..view.state import ViewState
from .io import load_config, load_items


def build_params(cfg: Dict[str, Any]) -> Dict[str, Any]:
    params = DEFAULTS.copy()
    params.update(cfg.get("params", {}))
    if "max_time" in cfg:
        params["max_time"] = int(cfg["max_time"])
    if "max_generations" in cfg:
        params["max_generations"] = int(cfg["max_generations"])
    return params


def run_pipeline(
    items: Sequence[str],
    cfg: Dict[str, Any],
    *,
    outdir: Path,
    collaborators: Optional[Collaborators] = None,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """Sort ``items`` on a background runner and write the exports to ``outdir``."""

    outdir.mkdir(parents=True, exist_ok=True)
    params = build_params(cfg)
    if timeout is None:
        timeout = float(params["runner_timeout"])

    runner = PipelineRunner(collaborators, params)
    controller = SortController(runner, ViewState(VisualParameters.from_params(params)))
    controller.start()
    try:
        controller.wait_ready(timeout)
        run_id = controller.submit(list(items))
        if run_id is None:
            raise ValidationFailure(controller.status)
        message = controller.wait(run_id, timeout)
    finally:
        runner.close(timeout=1.0)

    if isinstance(message, Error):
        raise PipelineError(message.message)

    result = message.result
    rows = ranked_rows(result)
    framed, _ = frame_coordinates(result.coordinates)

    meta = {
        "config_version": cfg.get("version", "dev"),
        "stages_logged": len(controller.metrics.rows),
    }
    save_order_csv(outdir / "order.csv", rows)
    save_layout_csv(outdir / "layout.csv", result, framed)
    save_metrics_json(outdir / "metrics.json", controller.metrics, result, params, extra=meta)
    controller.metrics.save_csv(outdir / "stages.csv")

    return {
        "result": result,
        "rows": rows,
        "metrics": controller.metrics,
        "params": params,
        "meta": meta,
    }


def load_and_run(
    input_path: Path,
    outdir: Path,
    *,
    config_path: Optional[Path] = None,
    column: Optional[str] = None,
    timeout: Optional[float] = None,
    collaborators: Optional[Collaborators] = None,
) -> Dict[str, Any]:
    """Convenience wrapper combining the loaders and :func:`run_pipeline`."""

    cfg = load_config(config_path) if config_path is not None else {}
    items = load_items(input_path, column=column)
    return run_pipeline(
        items,
        cfg,
        outdir=outdir,
        collaborators=collaborators,
        timeout=timeout,
    )


def build_arg_parser():
    import argparse

    ap = argparse.ArgumentParser(description="Semantic tour sorter")
    ap.add_argument("--input", required=True, help="Text file (one item per line) or CSV/Parquet table")
    ap.add_argument("--outdir", required=True, help="Output directory")
    ap.add_argument("--config", default=None, help="Optional YAML/JSON configuration")
    ap.add_argument("--column", default=None, help="Column holding the items for table input")
    ap.add_argument("--timeout", type=float, default=None, help="Seconds to wait for the runner")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log stage progress")
    return ap


def main(argv: Optional[list[str]] = None) -> Dict[str, Any]:
    ap = build_arg_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    result = load_and_run(
        Path(args.input).resolve(),
        Path(args.outdir).resolve(),
        config_path=Path(args.config).resolve() if args.config else None,
        column=args.column,
        timeout=args.timeout,
    )

    rows = result["rows"]
    sims = [r.similarity for r in rows if r.similarity is not None]
    summary = {
        "entities": len(rows),
        "order": [r.index for r in rows],
        "mean_adjacent_similarity": float(sum(sims) / len(sims)) if sims else None,
        "elapsed_s": float(result["metrics"].elapsed),
    }

    print("\n[DONE]")
    print(json.dumps(summary, indent=2))
    return result


__all__ = [
    "build_arg_parser",
    "build_params",
    "load_and_run",
    "main",
    "run_pipeline",
]
