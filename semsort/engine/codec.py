"""Reversible mapping between item indices and geographic-shaped locations.

The routing solver only understands ``{"lat", "lng"}`` pairs.  An item index
``i`` travels through it as ``(i // base, i % base)`` and is recovered with
``major * base + minor``.  The codec refuses indices that would alias instead
of wrapping them silently.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, Mapping, NamedTuple, Union

from ..config.config import DEFAULTS
from .errors import LocationRangeError


class EncodedLocation(NamedTuple):
    major: int
    minor: int

    def to_wire(self) -> Dict[str, int]:
        return {"lat": self.major, "lng": self.minor}


LocationLike = Union[EncodedLocation, Mapping[str, Any]]


@dataclass(frozen=True)
class LocationCodec:
    """Bijection between ``[0, base * max_major)`` and encoded locations."""

    base: int = DEFAULTS["location_base"]
    max_major: int = DEFAULTS["location_max_major"]

    def __post_init__(self) -> None:
        if int(self.base) < 2:
            raise ValueError("base must be >= 2")
        if int(self.max_major) < 1:
            raise ValueError("max_major must be >= 1")

    @property
    def capacity(self) -> int:
        return int(self.base) * int(self.max_major)

    def encode(self, index: int) -> EncodedLocation:
        if isinstance(index, bool) or not isinstance(index, (int, Real)):
            raise LocationRangeError(f"index must be an integer, got {index!r}", index)
        if int(index) != index:
            raise LocationRangeError(f"index must be integral, got {index!r}", index)
        index = int(index)
        if index < 0 or index >= self.capacity:
            raise LocationRangeError(
                f"index {index} outside codec range [0, {self.capacity})", index
            )
        major, minor = divmod(index, self.base)
        return EncodedLocation(major, minor)

    def encode_wire(self, index: int) -> Dict[str, int]:
        return self.encode(index).to_wire()

    def decode(self, location: LocationLike) -> int:
        if isinstance(location, EncodedLocation):
            major, minor = location.major, location.minor
        else:
            try:
                major = float(location["lat"])
                minor = float(location["lng"])
            except (KeyError, TypeError, ValueError) as exc:
                raise LocationRangeError(f"malformed location {location!r}", location) from exc

        if not (math.isfinite(major) and math.isfinite(minor)):
            raise LocationRangeError(f"non-finite location {location!r}", location)

        # the solver round-trips coordinates through floats
        if not (0 <= round(minor) < self.base) or round(major) < 0:
            raise LocationRangeError(f"location {location!r} outside codec range", location)
        index = int(round(major * self.base + minor))
        if index >= self.capacity:
            raise LocationRangeError(f"location {location!r} outside codec range", location)
        return index


DEFAULT_CODEC = LocationCodec()


def encode_location(index: int) -> EncodedLocation:
    return DEFAULT_CODEC.encode(index)


def decode_location(location: LocationLike) -> int:
    return DEFAULT_CODEC.decode(location)


def codec_from_params(params: Mapping[str, Any]) -> LocationCodec:
    return LocationCodec(
        base=int(params.get("location_base", DEFAULTS["location_base"])),
        max_major=int(params.get("location_max_major", DEFAULTS["location_max_major"])),
    )


__all__ = [
    "DEFAULT_CODEC",
    "EncodedLocation",
    "LocationCodec",
    "codec_from_params",
    "decode_location",
    "encode_location",
]
