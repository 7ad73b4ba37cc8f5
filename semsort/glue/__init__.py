"""Glue helpers exposed for CLI and integration harnesses."""

from .io import load_config, load_items
from .pipeline import (
    build_arg_parser,
    build_params,
    load_and_run,
    main,
    run_pipeline,
)

__all__ = [
    "build_arg_parser",
    "build_params",
    "load_and_run",
    "load_config",
    "load_items",
    "main",
    "run_pipeline",
]
