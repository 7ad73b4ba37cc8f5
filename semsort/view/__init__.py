"""Derived display state for sorted results."""

from .layers import (
    FRAME_EXTENT,
    FrameBounds,
    LayerDescriptor,
    RankedRow,
    VisualParameters,
    derive_layers,
    frame_bounds,
    frame_coordinates,
    ranked_rows,
)
from .state import DEFAULT_CAMERA, CameraTarget, ViewState

__all__ = [
    "CameraTarget",
    "DEFAULT_CAMERA",
    "FRAME_EXTENT",
    "FrameBounds",
    "LayerDescriptor",
    "RankedRow",
    "ViewState",
    "VisualParameters",
    "derive_layers",
    "frame_bounds",
    "frame_coordinates",
    "ranked_rows",
]
