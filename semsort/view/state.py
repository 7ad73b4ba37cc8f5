"""Controller-owned view state: current result, visual parameters, camera."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ..engine.result import PipelineResult
from .layers import LayerDescriptor, VisualParameters, derive_layers, frame_bounds

FOCUS_ZOOM = 3.0
FOCUS_TRANSITION_MS = 1000


@dataclass(frozen=True)
class CameraTarget:
    target: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    zoom: float = 1.0
    transition_ms: int = 0


DEFAULT_CAMERA = CameraTarget()


class ViewState:
    """Holds what the controller needs to re-render without re-running.

    The camera returns to default framing only when a new result arrives.
    Parameter changes re-derive layers and keep whatever the user was
    looking at.
    """

    def __init__(self, parameters: Optional[VisualParameters] = None):
        self.result: Optional[PipelineResult] = None
        self.parameters = parameters or VisualParameters()
        self.camera = DEFAULT_CAMERA

    def layers(self) -> Tuple[LayerDescriptor, ...]:
        return derive_layers(self.result, self.parameters)

    def apply_result(self, result: PipelineResult) -> Tuple[LayerDescriptor, ...]:
        if result is not self.result:
            self.result = result
            self.camera = DEFAULT_CAMERA
        return self.layers()

    def update_parameters(self, **changes) -> Tuple[LayerDescriptor, ...]:
        self.parameters = replace(self.parameters, **changes)
        return self.layers()

    def move_camera(self, target, zoom: Optional[float] = None) -> CameraTarget:
        x, y = float(target[0]), float(target[1])
        self.camera = CameraTarget(
            target=(x, y, 0.0),
            zoom=self.camera.zoom if zoom is None else float(zoom),
        )
        return self.camera

    def focus_on_item(self, index: int) -> CameraTarget:
        if self.result is None:
            raise LookupError("no result to focus on")
        if not 0 <= index < self.result.size:
            raise IndexError(f"item {index} out of range")
        bounds = frame_bounds(self.result.coordinates)
        x, y = bounds.apply(self.result.coordinates[index])
        self.camera = CameraTarget(
            target=(x, y, 0.0),
            zoom=FOCUS_ZOOM,
            transition_ms=FOCUS_TRANSITION_MS,
        )
        return self.camera
