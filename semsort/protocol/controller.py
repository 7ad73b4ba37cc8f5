"""Interactive side of the runner protocol.

The controller validates input locally, hands runs to the
:class:`~semsort.protocol.runner.PipelineRunner`, and folds the runner's
replies into a status line and a :class:`~semsort.view.state.ViewState`.
``pump`` never blocks; ``wait`` and ``wait_ready`` exist for batch callers.
"""

from __future__ import annotations

import logging
import queue
import time
from typing import List, Optional, Sequence, Union

from ..config.enums import STAGE_DONE, STAGE_FAILED
from ..engine.errors import InitializationFailure, ValidationFailure
from ..engine.orchestrator import validate_items
from ..engine.result import PipelineResult
from ..logging.metrics import RunMetrics
from ..view.state import ViewState
from .messages import Error, Init, Ready, Sort, Sorted, Status

logger = logging.getLogger(__name__)


def parse_items(text: str) -> List[str]:
    """One item per non-blank line, surrounding whitespace stripped."""
    return [line.strip() for line in text.splitlines() if line.strip()]


class SortController:
    def __init__(self, runner, view: Optional[ViewState] = None):
        self.runner = runner
        self.view = view or ViewState()
        self.ready = False
        self.sort_enabled = False
        self.status = ""
        self.last_error: Optional[str] = None
        self.last_result: Optional[PipelineResult] = None
        self.current_run: Optional[int] = None
        self.metrics = RunMetrics()
        self._next_run_id = 1

    def _set_status(self, text: str) -> None:
        self.status = text
        logger.info(text)

    def start(self) -> None:
        self._set_status("Initializing Worker & Loading Models...")
        if not self.runner.is_alive():
            self.runner.start()

    def initialize(self) -> None:
        self.runner.post(Init())

    def submit(
        self,
        entries: Union[str, Sequence[str]],
        *,
        supersede: bool = False,
    ) -> Optional[int]:
        """Start a run; returns its id, or ``None`` when rejected locally."""

        if not self.ready:
            return None
        if self.current_run is not None and not supersede:
            self._set_status("A sort is already running.")
            return None

        items = parse_items(entries) if isinstance(entries, str) else [str(t) for t in entries]
        if isinstance(entries, str) and not items:
            return None
        try:
            items = validate_items(items)
        except ValidationFailure as exc:
            self._set_status(str(exc))
            return None

        run_id = self._next_run_id
        self._next_run_id += 1
        self.current_run = run_id
        self.sort_enabled = False
        self.metrics = RunMetrics()
        self.metrics.start()
        self._set_status("Processing in worker...")
        self.runner.post(Sort(run_id=run_id, items=tuple(items)))
        return run_id

    def _stale(self, run_id: Optional[int]) -> bool:
        return run_id is not None and run_id != self.current_run

    def handle(self, message) -> bool:
        """Apply one runner message; returns False when it was ignored."""

        if isinstance(message, Ready):
            self.ready = True
            self.sort_enabled = self.current_run is None
            self._set_status("Ready (Worker Initialized).")
            return True

        if isinstance(message, Status):
            if self._stale(message.run_id):
                return False
            self.metrics.append(message.stage or "", message.message)
            self._set_status(message.message)
            return True

        if isinstance(message, Error):
            if self._stale(message.run_id):
                logger.debug("Dropping error of superseded run %s", message.run_id)
                return False
            self.last_error = message.message
            if message.run_id is not None:
                self.current_run = None
                self.metrics.append(STAGE_FAILED, message.message, status="ERROR")
            self.sort_enabled = self.ready and self.current_run is None
            self._set_status(f"Error: {message.message}")
            return True

        if isinstance(message, Sorted):
            if self._stale(message.run_id):
                logger.debug("Dropping result of superseded run %s", message.run_id)
                return False
            self.current_run = None
            self.last_error = None
            self.last_result = message.result
            self.view.apply_result(message.result)
            self.sort_enabled = True
            self._set_status(f"Sorted {message.result.size} entities.")
            self.metrics.append(STAGE_DONE, self.status, status="SORTED")
            return True

        raise TypeError(f"unexpected message {type(message).__name__}")

    def pump(self) -> List[object]:
        """Drain and apply every message currently waiting, without blocking."""

        handled = []
        while True:
            try:
                message = self.runner.outbox.get_nowait()
            except queue.Empty:
                return handled
            self.handle(message)
            handled.append(message)

    def _next(self, deadline: Optional[float]):
        remaining = None if deadline is None else deadline - time.monotonic()
        if remaining is not None and remaining <= 0:
            raise TimeoutError("runner did not answer in time")
        try:
            return self.runner.outbox.get(timeout=remaining)
        except queue.Empty:
            raise TimeoutError("runner did not answer in time")

    def wait_ready(self, timeout: Optional[float] = None) -> None:
        deadline = None if timeout is None else time.monotonic() + timeout
        while not self.ready:
            message = self._next(deadline)
            self.handle(message)
            if isinstance(message, Error) and message.run_id is None:
                raise InitializationFailure(message.message)

    def wait(self, run_id: int, timeout: Optional[float] = None):
        """Block until the terminal message of ``run_id`` arrives and return it."""

        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            message = self._next(deadline)
            self.handle(message)
            if isinstance(message, (Sorted, Error)) and message.run_id == run_id:
                return message
