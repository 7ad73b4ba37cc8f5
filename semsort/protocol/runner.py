"""Background thread executing pipeline runs on behalf of a controller."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Mapping, Optional

from ..backends.handles import Collaborators, default_collaborators
from ..config.config import DEFAULTS
from ..engine.errors import InitializationFailure
from ..engine.orchestrator import PipelineOrchestrator
from ..logging.metrics import RunMetrics
from .messages import Error, Init, Ready, Sort, Sorted, Status

logger = logging.getLogger(__name__)

_STOP = object()


class PipelineRunner(threading.Thread):
    """Consumes ``Init``/``Sort`` from ``inbox``, posts replies to ``outbox``.

    One run executes at a time, start to finish; messages of a run are posted
    in order and end with exactly one ``Sorted`` or ``Error``.
    """

    def __init__(
        self,
        collaborators: Optional[Collaborators] = None,
        params: Optional[Mapping[str, Any]] = None,
        *,
        init_on_start: bool = True,
    ) -> None:
        super().__init__(name="semsort-runner", daemon=True)
        self.params = dict(DEFAULTS)
        self.params.update(params or {})
        self.collaborators = collaborators or default_collaborators(self.params)
        self.init_on_start = init_on_start
        self.inbox: "queue.Queue[Any]" = queue.Queue()
        self.outbox: "queue.Queue[Any]" = queue.Queue()

    def post(self, message) -> None:
        """Controller side: enqueue a message for the runner."""
        if not isinstance(message, (Init, Sort)):
            raise TypeError(f"runner accepts Init or Sort, got {type(message).__name__}")
        self.inbox.put(message)

    def close(self, timeout: Optional[float] = None) -> None:
        self.inbox.put(_STOP)
        if self.is_alive():
            self.join(timeout)

    def _emit(self, message) -> None:
        self.outbox.put(message)

    def run(self) -> None:
        if self.init_on_start:
            self._initialize()
        while True:
            message = self.inbox.get()
            if message is _STOP:
                break
            if isinstance(message, Init):
                self._initialize()
            elif isinstance(message, Sort):
                self._sort(message)

    def _initialize(self) -> None:
        try:
            self.collaborators.ensure_ready()
        except InitializationFailure as exc:
            self._emit(Error(run_id=None, message=str(exc)))
            return
        self._emit(Ready())

    def _sort(self, request: Sort) -> None:
        if not self.collaborators.ready:
            self._emit(Error(run_id=request.run_id, message="Worker not ready"))
            return

        def on_status(stage: str, text: str) -> None:
            self._emit(Status(run_id=request.run_id, message=text, stage=stage))

        try:
            orchestrator = PipelineOrchestrator(
                self.collaborators.embedder,
                self.collaborators.projector,
                self.collaborators.solver,
                params=self.params,
                on_status=on_status,
                metrics=RunMetrics(),
            )
            result, error = orchestrator.run(request.items)
        except Exception as exc:
            logger.error("Run %s failed outside the pipeline: %s", request.run_id, exc)
            result, error = None, str(exc) or exc.__class__.__name__
        if error is not None:
            self._emit(Error(run_id=request.run_id, message=error))
        else:
            self._emit(Sorted(run_id=request.run_id, result=result))
