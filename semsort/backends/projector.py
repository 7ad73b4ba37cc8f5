"""
2D layout backend.

UMAP projection of embedding vectors for visual inspection.  Inputs too small
for UMAP's neighbour graph fall back to a principal-axis projection so every
run still yields one point per item.
"""

import logging
from datetime import datetime
from typing import Optional

import numpy as np

from ..config.config import DEFAULTS

logger = logging.getLogger(__name__)

# below this many points UMAP cannot build a useful k-NN graph
UMAP_MIN_POINTS = 4


def principal_axes_2d(vectors: np.ndarray) -> np.ndarray:
    """Project onto the first two principal axes, zero-padded when rank < 2."""
    x = np.asarray(vectors, dtype=np.float64)
    n = x.shape[0]
    out = np.zeros((n, 2), dtype=np.float64)
    if n == 0:
        return out
    centered = x - x.mean(axis=0, keepdims=True)
    if not np.any(centered):
        return out
    _, _, vt = np.linalg.svd(centered, full_matrices=False)
    k = min(2, vt.shape[0])
    out[:, :k] = centered @ vt[:k].T
    return out


class UmapProjector:
    """Handles dimension reduction for the item layout."""

    def __init__(
        self,
        n_neighbors: int = DEFAULTS["umap_n_neighbors"],
        min_dist: float = DEFAULTS["umap_min_dist"],
        spread: float = DEFAULTS["umap_spread"],
        random_state: Optional[int] = DEFAULTS["umap_random_state"],
    ):
        self.n_neighbors = n_neighbors
        self.min_dist = min_dist
        self.spread = spread
        self.random_state = random_state
        self._umap = None

    def load(self) -> None:
        if self._umap is not None:
            return
        try:
            import umap
        except ImportError:
            raise ImportError("umap-learn is required. Install with: pip install umap-learn")
        self._umap = umap

    def project(self, vectors) -> np.ndarray:
        """
        Compute a 2D layout, one point per input vector.

        Args:
            vectors: (N, dim) array of embeddings

        Returns:
            (N, 2) array of coordinates, input order preserved
        """
        x = np.asarray(vectors, dtype=np.float32)
        n = x.shape[0]
        if n < UMAP_MIN_POINTS:
            logger.info(f"{n} points is too few for UMAP; using principal axes")
            return principal_axes_2d(x)

        self.load()
        logger.info(f"Computing UMAP projection for {n} embeddings...")
        start_time = datetime.now()

        reducer = self._umap.UMAP(
            n_components=2,
            n_neighbors=min(self.n_neighbors, n - 1),
            min_dist=self.min_dist,
            spread=self.spread,
            random_state=self.random_state,
            verbose=False,
        )
        projection = reducer.fit_transform(x)

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(f"UMAP completed in {elapsed:.1f}s")
        return np.asarray(projection, dtype=np.float64)
