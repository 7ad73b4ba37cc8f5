"""Stage-by-stage controller for one sorting run.

embed -> project -> assemble problem -> query canonical locations ->
build matrix -> solve -> decode.  Each stage feeds the next; there is no
branching and no retry.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..backends.solver import termination_config
from ..config.config import DEFAULTS
from ..config.enums import (
    MIN_ITEMS,
    STAGE_ASSEMBLE,
    STAGE_DECODE,
    STAGE_DONE,
    STAGE_EMBED,
    STAGE_FAILED,
    STAGE_IDLE,
    STAGE_LOCATIONS,
    STAGE_MATRIX,
    STAGE_MESSAGES,
    STAGE_PROJECT,
    STAGE_SOLVE,
)
from ..logging.metrics import RunMetrics
from .codec import LocationCodec, codec_from_params
from .errors import PipelineError, RunInProgressError, StageFailure, ValidationFailure
from .matrix import matrix_from_params, routing_matrix
from .problem import assemble_problem
from .result import PipelineResult
from .solution import decode_solution

logger = logging.getLogger(__name__)

StatusCallback = Callable[[str, str], None]

_RESTARTABLE = (STAGE_IDLE, STAGE_DONE, STAGE_FAILED)


def validate_items(items: Sequence[str]) -> list:
    items = [str(t) for t in items]
    if len(items) < MIN_ITEMS:
        raise ValidationFailure(f"Please enter at least {MIN_ITEMS} entities.")
    return items


class PipelineOrchestrator:
    """Runs the sorting pipeline against injected collaborators.

    ``execute`` raises on failure; ``run`` is the error boundary and always
    returns ``(result, None)`` or ``(None, message)``.
    """

    def __init__(
        self,
        embedder,
        projector,
        solver,
        *,
        codec: Optional[LocationCodec] = None,
        params: Optional[Mapping[str, Any]] = None,
        on_status: Optional[StatusCallback] = None,
        metrics: Optional[RunMetrics] = None,
    ) -> None:
        self.embedder = embedder
        self.projector = projector
        self.solver = solver
        self.params = dict(DEFAULTS)
        self.params.update(params or {})
        self.codec = codec or codec_from_params(self.params)
        self.on_status = on_status
        self.metrics = metrics or RunMetrics()
        self._state = STAGE_IDLE

    @property
    def state(self) -> str:
        return self._state

    def _enter(self, stage: str) -> None:
        self._state = stage
        message = STAGE_MESSAGES[stage]
        self.metrics.append(stage, message)
        logger.debug("stage %s", stage)
        if self.on_status is not None:
            self.on_status(stage, message)

    def _stage(self, stage: str, fn, *args):
        self._enter(stage)
        try:
            return fn(*args)
        except PipelineError:
            raise
        except Exception as exc:
            raise StageFailure(stage, exc) from exc

    # -- stages ---------------------------------------------------------

    def _embed(self, items):
        vectors = np.asarray(self.embedder.embed(items), dtype=np.float64)
        if vectors.ndim != 2 or vectors.shape[0] != len(items):
            raise ValueError(
                f"embedder returned shape {vectors.shape} for {len(items)} items"
            )
        return vectors

    def _project(self, embeddings):
        coords = np.asarray(self.projector.project(embeddings), dtype=np.float64)
        if coords.shape != (embeddings.shape[0], 2):
            raise ValueError(
                f"projector returned shape {coords.shape}, expected ({embeddings.shape[0]}, 2)"
            )
        return coords

    def _locations(self, problem):
        locations = list(self.solver.routing_locations(problem))
        if not locations:
            raise ValueError("solver reported no routing locations")
        return locations

    def _matrices(self, embeddings, locations):
        costs = matrix_from_params(embeddings, locations, self.codec, self.params)
        return [routing_matrix(costs, self.params.get("profile", DEFAULTS["profile"]))]

    def _solve(self, problem, matrices):
        return self.solver.solve(problem, matrices, termination_config(self.params))

    def _decode(self, solution, items, embeddings, coordinates):
        order = decode_solution(solution, self.codec)
        known = [i for i in order if i < len(items)]
        if len(known) != len(order):
            logger.warning("Dropped %d tour stops with no matching item", len(order) - len(known))
        return PipelineResult(
            order=known,
            embeddings=embeddings,
            coordinates=coordinates,
            items=items,
        )

    # -- entry points ---------------------------------------------------

    def execute(self, items: Sequence[str]) -> PipelineResult:
        if self._state not in _RESTARTABLE:
            raise RunInProgressError(f"a run is already in progress ({self._state})")
        items = validate_items(items)
        self.metrics.start()

        embeddings = self._stage(STAGE_EMBED, self._embed, items)
        coordinates = self._stage(STAGE_PROJECT, self._project, embeddings)
        problem = self._stage(STAGE_ASSEMBLE, assemble_problem, items, self.codec, self.params)
        locations = self._stage(STAGE_LOCATIONS, self._locations, problem)
        matrices = self._stage(STAGE_MATRIX, self._matrices, embeddings, locations)
        solution = self._stage(STAGE_SOLVE, self._solve, problem, matrices)
        result = self._stage(
            STAGE_DECODE, self._decode, solution, items, embeddings, coordinates
        )
        self._state = STAGE_DONE
        self.metrics.append(STAGE_DONE, f"Sorted {len(items)} entities.", status="SORTED")
        logger.info("Sorted %d entities in %.2fs", len(items), self.metrics.elapsed)
        return result

    def run(self, items: Sequence[str]) -> Tuple[Optional[PipelineResult], Optional[str]]:
        try:
            return self.execute(items), None
        except RunInProgressError as exc:
            return None, str(exc)
        except Exception as exc:
            self._state = STAGE_FAILED
            message = str(exc) or exc.__class__.__name__
            self.metrics.append(STAGE_FAILED, message, status="ERROR")
            logger.error("Pipeline failed: %s", message)
            return None, message
