from probe_engine.engine.models import (
    CycleEvent,
    ErrorEvent,
    HopEvent,
    LatencyProbeEvent,
    ParsedEvent,
    ProbeKind,
    RouteProbeEvent,
)
from probe_engine.engine.errors import (
    CollectionError,
    InvalidTargetError,
    ParseError,
    ProbeError,
    ProcessExitError,
    SinkClosedError,
    SpawnError,
    StreamingUnsupportedError,
)
from probe_engine.engine.targets import ensure_valid_target, validate_target
from probe_engine.engine.parsers import LineParser, MtrRawParser, PingParser, apply_parser
from probe_engine.engine.runner import ProcessHandle, ProcessRunner
from probe_engine.engine.collector import collect
from probe_engine.engine.multiplexer import Sink, StreamingMultiplexer, require_flushable
from probe_engine.engine.service import ProbeService

__all__ = [
    "CollectionError",
    "CycleEvent",
    "ErrorEvent",
    "HopEvent",
    "InvalidTargetError",
    "LatencyProbeEvent",
    "LineParser",
    "MtrRawParser",
    "ParseError",
    "ParsedEvent",
    "PingParser",
    "ProbeError",
    "ProbeKind",
    "ProbeService",
    "ProcessExitError",
    "ProcessHandle",
    "ProcessRunner",
    "RouteProbeEvent",
    "SinkClosedError",
    "Sink",
    "SpawnError",
    "StreamingMultiplexer",
    "StreamingUnsupportedError",
    "apply_parser",
    "collect",
    "ensure_valid_target",
    "require_flushable",
    "validate_target",
]
