"""Controller/runner message protocol."""

from .controller import SortController, parse_items
from .messages import (
    Error,
    Init,
    Ready,
    Sort,
    Sorted,
    Status,
    parse_message,
)
from .runner import PipelineRunner

__all__ = [
    "Error",
    "Init",
    "PipelineRunner",
    "Ready",
    "Sort",
    "SortController",
    "Sorted",
    "Status",
    "parse_items",
    "parse_message",
]
