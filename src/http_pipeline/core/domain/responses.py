from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from http_pipeline.core.interfaces.model_bases import InternalDTO


class CallState(str, Enum):
    """Lifecycle of one pipeline call."""

    BUILDING = "building"
    HEADERS_READY = "headers_ready"
    ASSEMBLED = "assembled"
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    TRANSPORT_FAILED = "transport_failed"
    DECODE_FAILED = "decode_failed"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {
        CallState.COMPLETED,
        CallState.TIMED_OUT,
        CallState.TRANSPORT_FAILED,
        CallState.DECODE_FAILED,
    }
)


@dataclass(frozen=True)
class ResponseEnvelope(InternalDTO):
    """Uniform result of a pipeline call.

    ``error`` is empty on success. A non-empty ``error`` marks the call as
    failed even when ``status_code`` reports a transport-level success,
    which happens when the body could not be decoded.
    """

    status_code: int
    headers: MappingProxyType[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    body: Any = None
    error: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def ok(self) -> bool:
        return not self.error

    def to_dict(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
            "error": self.error,
        }
