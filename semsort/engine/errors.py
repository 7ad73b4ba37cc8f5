"""Failure taxonomy for the sorting pipeline and its runner."""

from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """Base class for every failure the runner reports as an ``ERROR``."""


class InitializationFailure(PipelineError):
    """A collaborator (embedder, projector or solver) failed to load."""


class ValidationFailure(PipelineError, ValueError):
    """Caller-side precondition violation, rejected before dispatch."""


class EmptyTourError(PipelineError):
    """The optimizer returned no tour or a tour without stops."""

    def __init__(self, message: str = "No solution found.") -> None:
        super().__init__(message)


class StageFailure(PipelineError):
    """Any other exception raised inside a pipeline stage."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage} failed: {cause}")


class RunInProgressError(PipelineError):
    """A second run was requested while one is still in flight."""


class LocationRangeError(ValueError):
    """An index or location cannot be represented by the location codec."""

    def __init__(self, message: str, value: Optional[object] = None) -> None:
        self.value = value
        super().__init__(message)
