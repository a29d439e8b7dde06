"""Core data models: no internal dependencies, only Pydantic + stdlib."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ProbeKind(str, Enum):
    LATENCY = "latency"
    ROUTE = "route"


# ---------------------------------------------------------------------------
# Parsed events (parser → collector / multiplexer)
# ---------------------------------------------------------------------------

class _Event(BaseModel):
    """Immutable base for everything written to a caller."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    def to_ndjson(self) -> bytes:
        return (self.to_json() + "\n").encode("utf-8")


class CycleEvent(_Event):
    """Measurement round boundary from ``mtr --raw`` (``x`` lines)."""
    type: Literal["cycle"] = "cycle"
    cycle: int
    cycle_id: int


class HopEvent(_Event):
    """Address seen at a hop (``h`` lines)."""
    type: Literal["hop"] = "hop"
    hop: int
    ip: str


class RouteProbeEvent(_Event):
    """Round-trip time for one hop in one cycle (``p`` lines), in microseconds."""
    type: Literal["probe"] = "probe"
    hop: int
    rtt: int
    cycle_id: int


class LatencyProbeEvent(_Event):
    """One echo reply reported by ``ping``."""
    type: Literal["ping"] = "ping"
    seq: int
    rtt_ms: float
    raw_line: str = Field(alias="rawLine")


ParsedEvent = Annotated[
    Union[CycleEvent, HopEvent, RouteProbeEvent, LatencyProbeEvent],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Error channel
# ---------------------------------------------------------------------------

class ErrorEvent(_Event):
    """Standard-error content or a failure inside an already-started stream."""
    error: str
