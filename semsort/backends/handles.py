"""Lazily initialized, process-wide collaborator handles for one runner."""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping, Optional

from ..config.config import DEFAULTS
from ..config.enums import INIT_FAILED, INIT_LOADING, INIT_READY, INIT_UNINITIALIZED
from ..engine.errors import InitializationFailure
from .embedder import SentenceTransformerEmbedder
from .projector import UmapProjector
from .solver import VrpCliSolver

logger = logging.getLogger(__name__)


class Collaborators:
    """Owns the embedder, projector and solver and loads them exactly once.

    ``ensure_ready`` is safe to call from several threads: callers arriving
    while a load is in flight wait for it instead of starting another.  A
    failed load is terminal for this instance.
    """

    def __init__(self, embedder, projector, solver):
        self.embedder = embedder
        self.projector = projector
        self.solver = solver
        self._lock = threading.Lock()
        self._state = INIT_UNINITIALIZED
        self._error: Optional[str] = None

    @property
    def state(self) -> str:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state == INIT_READY

    @property
    def error(self) -> Optional[str]:
        return self._error

    def ensure_ready(self) -> None:
        with self._lock:
            if self._state == INIT_READY:
                return
            if self._state == INIT_FAILED:
                raise InitializationFailure(self._error)
            self._state = INIT_LOADING
            try:
                for handle in (self.solver, self.embedder, self.projector):
                    load = getattr(handle, "load", None)
                    if load is not None:
                        load()
            except Exception as exc:
                self._state = INIT_FAILED
                self._error = f"Init error: {exc}"
                logger.error(self._error)
                raise InitializationFailure(self._error) from exc
            self._state = INIT_READY
            logger.info("Collaborators ready")


def default_collaborators(params: Optional[Mapping[str, Any]] = None) -> Collaborators:
    params = params or DEFAULTS
    return Collaborators(
        embedder=SentenceTransformerEmbedder(
            model_name=params.get("embedding_model", DEFAULTS["embedding_model"]),
            device=params.get("embedding_device", DEFAULTS["embedding_device"]),
        ),
        projector=UmapProjector(
            n_neighbors=int(params.get("umap_n_neighbors", DEFAULTS["umap_n_neighbors"])),
            min_dist=float(params.get("umap_min_dist", DEFAULTS["umap_min_dist"])),
            spread=float(params.get("umap_spread", DEFAULTS["umap_spread"])),
            random_state=params.get("umap_random_state", DEFAULTS["umap_random_state"]),
        ),
        solver=VrpCliSolver(),
    )
