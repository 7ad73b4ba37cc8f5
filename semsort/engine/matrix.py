"""Semantic cost matrix in the solver's own location order."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
from numba import njit

from ..config.config import DEFAULTS
from .codec import DEFAULT_CODEC, LocationCodec
from .errors import LocationRangeError

logger = logging.getLogger(__name__)


@njit(cache=True)
def _fill_cost_matrix(emb, norms, item_idx, scale, penalty, out):
    """Write row-major clamped cosine costs for every ``(i, j)`` location pair.

    Parameters
    ----------
    emb : ndarray
        Embedding matrix ``(n_items, dim)``.
    norms : ndarray
        Euclidean norm of each embedding row.
    item_idx : ndarray
        Decoded item index per canonical location, ``-1`` when undecodable.
    scale : float
        Distance to integer cost multiplier.
    penalty : int
        Cost emitted when either side has no embedding.
    out : ndarray
        Flat output buffer of length ``item_idx.size ** 2``.

    Returns
    -------
    int
        Number of cells that received the penalty.
    """

    size = item_idx.shape[0]
    n = emb.shape[0]
    dim = emb.shape[1]
    misses = 0
    for i in range(size):
        a = item_idx[i]
        for j in range(size):
            b = item_idx[j]
            k = i * size + j
            if a < 0 or a >= n or b < 0 or b >= n:
                out[k] = penalty
                misses += 1
                continue
            if a == b:
                out[k] = 0
                continue
            denom = norms[a] * norms[b]
            sim = 0.0
            if denom > 0.0:
                dot = 0.0
                for d in range(dim):
                    dot += emb[a, d] * emb[b, d]
                sim = dot / denom
            dist = 1.0 - sim
            if dist < 0.0:
                dist = 0.0
            elif dist > 1.0:
                dist = 1.0
            out[k] = int(math.floor(dist * scale + 0.5))
    return misses


def cosine_similarity(a, b) -> float:
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom <= 0.0:
        return 0.0
    return float(np.dot(a, b) / denom)


def cosine_distance(a, b) -> float:
    """Clamped cosine distance in ``[0, 1]``."""

    return min(1.0, max(0.0, 1.0 - cosine_similarity(a, b)))


def similarity_matrix(embeddings) -> np.ndarray:
    """Dense ``(n, n)`` cosine similarity; zero-norm rows score 0 off-diagonal."""

    emb = np.asarray(embeddings, dtype=np.float64)
    if emb.ndim != 2:
        raise ValueError("embeddings must have shape (n, dim)")
    norms = np.linalg.norm(emb, axis=1)
    safe = np.where(norms > 0.0, norms, 1.0)
    unit = emb / safe[:, None]
    sim = unit @ unit.T
    sim[norms == 0.0, :] = 0.0
    sim[:, norms == 0.0] = 0.0
    np.fill_diagonal(sim, 1.0)
    return np.clip(sim, -1.0, 1.0)


def decode_locations(locations: Sequence[Any], codec: LocationCodec = DEFAULT_CODEC) -> np.ndarray:
    """Decode canonical locations to item indices, ``-1`` for undecodable ones."""

    idx = np.full(len(locations), -1, dtype=np.int64)
    for pos, loc in enumerate(locations):
        try:
            idx[pos] = codec.decode(loc)
        except LocationRangeError as exc:
            logger.warning("Undecodable routing location at position %d: %s", pos, exc)
    return idx


def build_distance_matrix(
    embeddings,
    locations: Sequence[Any],
    codec: LocationCodec = DEFAULT_CODEC,
    *,
    scale: float = DEFAULTS["cost_scale"],
    penalty: int = DEFAULTS["alignment_penalty"],
) -> np.ndarray:
    """Return the flat ``len(locations) ** 2`` cost matrix in ``locations`` order."""

    emb = np.ascontiguousarray(np.asarray(embeddings, dtype=np.float64))
    if emb.ndim != 2:
        if emb.size == 0:
            emb = emb.reshape((0, 1))
        else:
            raise ValueError("embeddings must have shape (n, dim)")
    norms = np.sqrt(np.sum(emb * emb, axis=1))
    item_idx = decode_locations(locations, codec)

    out = np.zeros(item_idx.shape[0] * item_idx.shape[0], dtype=np.int64)
    misses = _fill_cost_matrix(emb, norms, item_idx, float(scale), int(penalty), out)
    if misses:
        logger.warning(
            "%d of %d matrix cells had no embedding and got penalty %d",
            misses,
            out.size,
            int(penalty),
        )
    return out


def routing_matrix(costs, profile: str = DEFAULTS["profile"]) -> Dict[str, Any]:
    """Wrap one cost layer as both distances and travel times."""

    values: List[int] = [int(c) for c in np.asarray(costs).ravel()]
    return {
        "matrix": profile,
        "distances": values,
        "travelTimes": list(values),
    }


def matrix_from_params(
    embeddings,
    locations: Sequence[Any],
    codec: LocationCodec,
    params: Optional[Mapping[str, Any]] = None,
) -> np.ndarray:
    params = params or DEFAULTS
    return build_distance_matrix(
        embeddings,
        locations,
        codec,
        scale=float(params.get("cost_scale", DEFAULTS["cost_scale"])),
        penalty=int(params.get("alignment_penalty", DEFAULTS["alignment_penalty"])),
    )


__all__ = [
    "build_distance_matrix",
    "cosine_distance",
    "cosine_similarity",
    "decode_locations",
    "matrix_from_params",
    "routing_matrix",
    "similarity_matrix",
]
