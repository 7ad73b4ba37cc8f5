"""Extract the visiting order from a raw solver tour."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from .codec import DEFAULT_CODEC, LocationCodec
from .errors import EmptyTourError, LocationRangeError

logger = logging.getLogger(__name__)


def first_tour_stops(solution: Optional[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    if not solution:
        raise EmptyTourError()
    tours = solution.get("tours") or []
    if not tours:
        raise EmptyTourError()
    stops = tours[0].get("stops") or []
    if not stops:
        raise EmptyTourError()
    return list(stops)


def decode_solution(
    solution: Optional[Mapping[str, Any]],
    codec: LocationCodec = DEFAULT_CODEC,
) -> List[int]:
    """Ordered item indices of the first tour, each index at most once.

    Revisits (e.g. a return to the anchor) are dropped so the result is a
    permutation of the locations actually visited.  Stops that do not decode
    are skipped with a warning; a tour with no decodable stop is empty.
    """

    order: List[int] = []
    seen = set()
    for stop in first_tour_stops(solution):
        try:
            idx = codec.decode(stop.get("location"))
        except LocationRangeError as exc:
            logger.warning("Skipping undecodable tour stop: %s", exc)
            continue
        if idx not in seen:
            seen.add(idx)
            order.append(idx)
    if not order:
        raise EmptyTourError()
    return order


__all__ = ["decode_solution", "first_tour_stops"]
