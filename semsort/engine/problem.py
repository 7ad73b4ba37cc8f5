"""Routing problem assembly in the solver's pragmatic format."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

from ..config.config import DEFAULTS
from ..config.enums import MIN_ITEMS
from .codec import DEFAULT_CODEC, LocationCodec

ANCHOR_INDEX = 0
VEHICLE_TYPE = "vehicle"
VEHICLE_ID = "v1"


def job_id(index: int) -> str:
    return f"job_{index}"


def build_job(index: int, codec: LocationCodec = DEFAULT_CODEC) -> Dict[str, Any]:
    return {
        "id": job_id(index),
        "deliveries": [
            {
                "places": [{"location": codec.encode_wire(index), "duration": 0}],
                "demand": [1],
            }
        ],
    }


def build_vehicle(
    n_items: int,
    codec: LocationCodec = DEFAULT_CODEC,
    params: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    params = params or DEFAULTS
    profile = params.get("profile", DEFAULTS["profile"])
    capacity = max(int(params.get("vehicle_capacity", DEFAULTS["vehicle_capacity"])), int(n_items))
    return {
        "typeId": VEHICLE_TYPE,
        "vehicleIds": [VEHICLE_ID],
        "profile": {"matrix": profile},
        "costs": {"fixed": 0, "distance": 1, "time": 0},
        "shifts": [
            {
                "start": {
                    "earliest": params.get("shift_start", DEFAULTS["shift_start"]),
                    "location": codec.encode_wire(ANCHOR_INDEX),
                },
            }
        ],
        "capacity": [capacity],
    }


def assemble_problem(
    items: Sequence[str],
    codec: LocationCodec = DEFAULT_CODEC,
    params: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Turn ``items`` into one anchored single-vehicle routing problem.

    Item 0 is the shift start; items ``1..n-1`` become jobs.  The vehicle
    only pays per unit of distance, so the solver minimizes total semantic
    distance along the tour.
    """

    n = len(items)
    if n < MIN_ITEMS:
        raise ValueError(f"at least {MIN_ITEMS} items are required, got {n}")

    params = params or DEFAULTS
    profile = params.get("profile", DEFAULTS["profile"])

    return {
        "plan": {"jobs": [build_job(i, codec) for i in range(1, n)]},
        "fleet": {
            "vehicles": [build_vehicle(n, codec, params)],
            "profiles": [{"name": profile}],
        },
    }


def problem_locations(problem: Mapping[str, Any]) -> list:
    """Every location the problem references, in first-seen order."""

    seen = []
    for vehicle in problem.get("fleet", {}).get("vehicles", []):
        for shift in vehicle.get("shifts", []):
            for key in ("start", "end"):
                loc = shift.get(key, {}).get("location")
                if loc is not None and loc not in seen:
                    seen.append(loc)
    for job in problem.get("plan", {}).get("jobs", []):
        for task_kind in ("pickups", "deliveries", "services", "replacements"):
            for task in job.get(task_kind, []):
                for place in task.get("places", []):
                    loc = place.get("location")
                    if loc is not None and loc not in seen:
                        seen.append(loc)
    return seen


__all__ = [
    "ANCHOR_INDEX",
    "assemble_problem",
    "build_job",
    "build_vehicle",
    "job_id",
    "problem_locations",
]
