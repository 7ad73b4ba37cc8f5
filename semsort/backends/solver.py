"""Routing optimizer backend speaking the pragmatic JSON format."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..config.config import DEFAULTS

logger = logging.getLogger(__name__)


def termination_config(params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    params = params or DEFAULTS
    return {
        "maxTime": int(params.get("max_time", DEFAULTS["max_time"])),
        "maxGenerations": int(params.get("max_generations", DEFAULTS["max_generations"])),
    }


def _loads(raw):
    if isinstance(raw, (str, bytes, bytearray)):
        return json.loads(raw)
    return raw


class VrpCliSolver:
    """Thin adapter over the ``vrp_cli`` extension module."""

    def __init__(self, module=None):
        self._module = module

    @property
    def loaded(self) -> bool:
        return self._module is not None

    def load(self) -> None:
        if self._module is not None:
            return
        try:
            import vrp_cli
        except ImportError:
            raise ImportError("vrp-cli is required. Install with: pip install vrp-cli")
        self._module = vrp_cli

    def routing_locations(self, problem: Mapping[str, Any]) -> List[Any]:
        """Unique locations referenced by ``problem``, in solver order."""
        self.load()
        return list(_loads(self._module.get_routing_locations(json.dumps(problem))))

    def solve(
        self,
        problem: Mapping[str, Any],
        matrices: Sequence[Mapping[str, Any]],
        termination: Mapping[str, Any],
    ) -> Optional[Dict[str, Any]]:
        self.load()
        config = {"termination": dict(termination)}
        logger.debug("Solving with termination %s", config["termination"])
        raw = self._module.solve_pragmatic(
            json.dumps(problem),
            [json.dumps(m) for m in matrices],
            json.dumps(config),
        )
        return _loads(raw)
