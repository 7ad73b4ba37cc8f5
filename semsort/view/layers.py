"""Pure derivation of renderable layer descriptors from a pipeline result."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple

import numpy as np

from ..config.config import DEFAULTS
from ..engine.result import PipelineResult

# framed coordinates span [-FRAME_EXTENT/2, FRAME_EXTENT/2] on the longer axis
FRAME_EXTENT = 200.0

POINT_COLOR = (74, 222, 128)
POINT_LINE_COLOR = (0, 0, 0)
PATH_COLOR = (59, 130, 246)
PATH_DIM_COLOR = (59, 130, 246, 80)
LABEL_COLOR = (255, 255, 255, 200)
LABEL_OFFSET = (0, -15)

LAYER_PATH = "path-layer"
LAYER_POINTS = "scatter-layer"
LAYER_LABELS = "text-layer"
LAYER_MATRIX = "similarity-matrix"


@dataclass(frozen=True)
class VisualParameters:
    radius: float = DEFAULTS["view_radius"]
    line_width: float = DEFAULTS["view_line_width"]
    label_size: float = DEFAULTS["view_label_size"]
    similarity_threshold: float = DEFAULTS["view_similarity_threshold"]
    show_points: bool = True
    show_path: bool = True
    show_labels: bool = True
    show_matrix: bool = True

    def __post_init__(self) -> None:
        for name in ("radius", "line_width", "label_size"):
            if not float(getattr(self, name)) > 0.0:
                raise ValueError(f"{name} must be > 0")
        if not 0.0 <= float(self.similarity_threshold) <= 1.0:
            raise ValueError("similarity_threshold must be within [0, 1]")

    @classmethod
    def from_params(cls, params: Optional[Mapping[str, Any]] = None) -> "VisualParameters":
        params = params or DEFAULTS
        return cls(
            radius=float(params.get("view_radius", DEFAULTS["view_radius"])),
            line_width=float(params.get("view_line_width", DEFAULTS["view_line_width"])),
            label_size=float(params.get("view_label_size", DEFAULTS["view_label_size"])),
            similarity_threshold=float(
                params.get("view_similarity_threshold", DEFAULTS["view_similarity_threshold"])
            ),
        )


@dataclass(frozen=True)
class FrameBounds:
    min_x: float
    max_x: float
    min_y: float
    max_y: float
    scale: float

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0)

    def apply(self, point) -> Tuple[float, float]:
        cx, cy = self.center
        return (float((point[0] - cx) * self.scale), float((point[1] - cy) * self.scale))


@dataclass(frozen=True)
class LayerDescriptor:
    id: str
    data: Tuple[Dict[str, Any], ...]
    props: Dict[str, Any] = field(default_factory=dict)


class RankedRow(NamedTuple):
    rank: int
    index: int
    text: str
    similarity: Optional[float]


def frame_bounds(coordinates) -> FrameBounds:
    coords = np.asarray(coordinates, dtype=np.float64)
    if coords.size == 0:
        return FrameBounds(0.0, 0.0, 0.0, 0.0, 1.0)
    min_x, min_y = coords.min(axis=0)
    max_x, max_y = coords.max(axis=0)
    range_x = (max_x - min_x) or 1.0
    range_y = (max_y - min_y) or 1.0
    scale = FRAME_EXTENT / max(range_x, range_y)
    return FrameBounds(float(min_x), float(max_x), float(min_y), float(max_y), float(scale))


def frame_coordinates(coordinates) -> Tuple[np.ndarray, FrameBounds]:
    """Centre on the bounding box and scale the longer side to ``FRAME_EXTENT``."""

    coords = np.asarray(coordinates, dtype=np.float64).reshape((-1, 2))
    bounds = frame_bounds(coords)
    cx, cy = bounds.center
    framed = (coords - np.array([cx, cy])) * bounds.scale
    return framed, bounds


def ranked_rows(result: PipelineResult) -> List[RankedRow]:
    """Sorted list with each item's similarity to its predecessor."""

    rows: List[RankedRow] = []
    sim = result.similarity
    prev = None
    for rank, idx in enumerate(result.order, start=1):
        score = None if prev is None else float(sim[prev, idx])
        rows.append(RankedRow(rank, idx, result.items[idx], score))
        prev = idx
    return rows


def _point(framed: np.ndarray, i: int) -> Tuple[float, float]:
    return (float(framed[i, 0]), float(framed[i, 1]))


def _path_layer(result, framed, params) -> LayerDescriptor:
    sim = result.similarity
    threshold = float(params.similarity_threshold)
    segments = []
    for a, b in zip(result.order, result.order[1:]):
        s = float(sim[a, b])
        above = s >= threshold
        segments.append(
            {
                "path": (_point(framed, a), _point(framed, b)),
                "from": a,
                "to": b,
                "similarity": s,
                "above_threshold": above,
                "color": PATH_COLOR if above else PATH_DIM_COLOR,
            }
        )
    return LayerDescriptor(
        LAYER_PATH,
        tuple(segments),
        {"width": float(params.line_width), "width_min_pixels": float(params.line_width)},
    )


def _points_layer(result, framed, params) -> LayerDescriptor:
    rank_of = {idx: r for r, idx in enumerate(result.order)}
    points = tuple(
        {
            "position": _point(framed, i),
            "text": result.items[i],
            "index": i,
            "rank": rank_of.get(i),
            "color": POINT_COLOR,
        }
        for i in range(result.size)
    )
    radius = float(params.radius)
    return LayerDescriptor(
        LAYER_POINTS,
        points,
        {
            "radius": radius,
            "radius_min_pixels": radius,
            "radius_max_pixels": 4.0 * radius,
            "opacity": 0.8,
            "line_width_min_pixels": 1.0,
            "line_color": POINT_LINE_COLOR,
        },
    )


def _labels_layer(result, framed, params) -> LayerDescriptor:
    labels = tuple(
        {"position": _point(framed, i), "text": result.items[i], "index": i}
        for i in range(result.size)
    )
    return LayerDescriptor(
        LAYER_LABELS,
        labels,
        {"size": float(params.label_size), "pixel_offset": LABEL_OFFSET, "color": LABEL_COLOR},
    )


def _matrix_layer(result, params) -> LayerDescriptor:
    sim = result.similarity
    threshold = float(params.similarity_threshold)
    n = result.size
    cells = tuple(
        {
            "row": i,
            "col": j,
            "similarity": float(sim[i, j]),
            "highlight": bool(sim[i, j] >= threshold),
            "diagonal": i == j,
        }
        for i in range(n)
        for j in range(n)
    )
    return LayerDescriptor(LAYER_MATRIX, cells, {"threshold": threshold, "size": n})


def derive_layers(
    result: Optional[PipelineResult],
    params: VisualParameters,
) -> Tuple[LayerDescriptor, ...]:
    """Layer descriptors for ``result`` under ``params``; no side effects."""

    if result is None:
        return ()
    framed, _ = frame_coordinates(result.coordinates)
    layers = []
    if params.show_path:
        layers.append(_path_layer(result, framed, params))
    if params.show_points:
        layers.append(_points_layer(result, framed, params))
    if params.show_labels:
        layers.append(_labels_layer(result, framed, params))
    if params.show_matrix:
        layers.append(_matrix_layer(result, params))
    return tuple(layers)
