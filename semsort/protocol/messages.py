"""Message contract between the controller and the pipeline runner.

Every message is a frozen dataclass with a ``type`` tag.  ``to_dict`` gives
the ``{"type", "payload"}`` wire form; ``parse_message`` is the boundary check
that turns a wire dict back into exactly one variant or raises ``ValueError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Union

import numpy as np

from ..config.enums import (
    MSG_ERROR,
    MSG_INIT,
    MSG_READY,
    MSG_SORT,
    MSG_SORTED,
    MSG_STATUS,
)
from ..engine.result import PipelineResult


@dataclass(frozen=True)
class Init:
    type: ClassVar[str] = MSG_INIT

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "payload": None}


@dataclass(frozen=True)
class Ready:
    type: ClassVar[str] = MSG_READY

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "payload": None}


@dataclass(frozen=True)
class Sort:
    run_id: int
    items: Tuple[str, ...]
    type: ClassVar[str] = MSG_SORT

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(str(t) for t in self.items))

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "payload": {"run_id": self.run_id, "items": list(self.items)}}


@dataclass(frozen=True)
class Status:
    run_id: Optional[int]
    message: str
    stage: Optional[str] = None
    type: ClassVar[str] = MSG_STATUS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "payload": {"run_id": self.run_id, "message": self.message, "stage": self.stage},
        }


@dataclass(frozen=True, eq=False)
class Sorted:
    run_id: int
    result: PipelineResult
    type: ClassVar[str] = MSG_SORTED

    @property
    def order(self) -> Tuple[int, ...]:
        return self.result.order

    @property
    def embeddings(self) -> np.ndarray:
        return self.result.embeddings

    @property
    def coordinates(self) -> np.ndarray:
        return self.result.coordinates

    @property
    def items(self) -> Tuple[str, ...]:
        return self.result.items

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "payload": {
                "run_id": self.run_id,
                "order": list(self.order),
                "embeddings": self.embeddings.tolist(),
                "coordinates": self.coordinates.tolist(),
                "items": list(self.items),
            },
        }


@dataclass(frozen=True)
class Error:
    run_id: Optional[int]
    message: str
    type: ClassVar[str] = MSG_ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "payload": {"run_id": self.run_id, "message": self.message}}


Message = Union[Init, Ready, Sort, Status, Sorted, Error]
ToRunner = Union[Init, Sort]
FromRunner = Union[Ready, Status, Sorted, Error]

TERMINAL = (Sorted, Error)


def _payload(raw: Mapping[str, Any], *keys: str) -> Mapping[str, Any]:
    payload = raw.get("payload")
    if not isinstance(payload, Mapping):
        raise ValueError(f"{raw.get('type')} message needs a payload object")
    missing = [k for k in keys if k not in payload]
    if missing:
        raise ValueError(f"{raw.get('type')} payload missing {', '.join(missing)}")
    return payload


def _run_id(value: Any, optional: bool = False) -> Optional[int]:
    if value is None and optional:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"run_id must be an integer, got {value!r}")
    return value


def parse_message(raw: Mapping[str, Any]) -> Message:
    if not isinstance(raw, Mapping) or "type" not in raw:
        raise ValueError("message must be a mapping with a 'type' field")
    kind = raw["type"]

    if kind == MSG_INIT:
        return Init()
    if kind == MSG_READY:
        return Ready()
    if kind == MSG_SORT:
        p = _payload(raw, "run_id", "items")
        items = p["items"]
        if isinstance(items, str) or not all(isinstance(t, str) for t in items):
            raise ValueError("SORT items must be a sequence of strings")
        return Sort(run_id=_run_id(p["run_id"]), items=tuple(items))
    if kind == MSG_STATUS:
        p = _payload(raw, "message")
        return Status(
            run_id=_run_id(p.get("run_id"), optional=True),
            message=str(p["message"]),
            stage=p.get("stage"),
        )
    if kind == MSG_SORTED:
        p = _payload(raw, "run_id", "order", "embeddings", "coordinates", "items")
        result = PipelineResult(
            order=p["order"],
            embeddings=p["embeddings"],
            coordinates=p["coordinates"],
            items=p["items"],
        )
        return Sorted(run_id=_run_id(p["run_id"]), result=result)
    if kind == MSG_ERROR:
        p = _payload(raw, "message")
        return Error(run_id=_run_id(p.get("run_id"), optional=True), message=str(p["message"]))

    raise ValueError(f"unknown message type {kind!r}")


__all__ = [
    "Error",
    "FromRunner",
    "Init",
    "Message",
    "Ready",
    "Sort",
    "Sorted",
    "Status",
    "TERMINAL",
    "ToRunner",
    "parse_message",
]
