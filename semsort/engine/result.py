"""Terminal payload of one successful pipeline run."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Sequence, Tuple

import numpy as np

from .matrix import similarity_matrix


def _frozen(arr, ndim: int, name: str) -> np.ndarray:
    out = np.array(arr, dtype=np.float64, copy=True)
    if out.ndim != ndim:
        raise ValueError(f"{name} must be {ndim}-dimensional")
    out.setflags(write=False)
    return out


@dataclass(frozen=True, eq=False)
class PipelineResult:
    """Everything a consumer needs to derive views without re-running."""

    order: Tuple[int, ...]
    embeddings: np.ndarray
    coordinates: np.ndarray
    items: Tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "order", tuple(int(i) for i in self.order))
        object.__setattr__(self, "items", tuple(str(t) for t in self.items))
        object.__setattr__(self, "embeddings", _frozen(self.embeddings, 2, "embeddings"))
        object.__setattr__(self, "coordinates", _frozen(self.coordinates, 2, "coordinates"))

        n = len(self.items)
        if self.embeddings.shape[0] != n:
            raise ValueError("embeddings must have one row per item")
        if self.coordinates.shape != (n, 2):
            raise ValueError("coordinates must have shape (n, 2)")
        if len(set(self.order)) != len(self.order):
            raise ValueError("order must not repeat an index")
        if any(i < 0 or i >= n for i in self.order):
            raise ValueError("order references an unknown item")

    @property
    def size(self) -> int:
        return len(self.items)

    @cached_property
    def similarity(self) -> np.ndarray:
        sim = similarity_matrix(self.embeddings)
        sim.setflags(write=False)
        return sim

    def ordered_items(self) -> Sequence[str]:
        return [self.items[i] for i in self.order]
