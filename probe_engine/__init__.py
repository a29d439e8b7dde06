"""probe_engine: ping and mtr over HTTP, buffered or streamed as NDJSON.

Usage::

    from probe_engine import create_service

    service = create_service()
    events = await service.run_buffered("latency", "1.1.1.1")
"""

from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()  # reads .env into os.environ (no-op if file missing)

from probe_engine.config import Settings
from probe_engine.engine.models import ErrorEvent, ParsedEvent, ProbeKind
from probe_engine.engine.multiplexer import StreamingMultiplexer
from probe_engine.engine.runner import ProcessRunner
from probe_engine.engine.service import ProbeService
from probe_engine.tools.builtins import make_latency_tool, make_route_tool
from probe_engine.tools.registry import ToolRegistry

__all__ = [
    "ErrorEvent",
    "ParsedEvent",
    "ProbeKind",
    "ProbeService",
    "Settings",
    "create_service",
]


def create_service(settings: Settings | None = None) -> ProbeService:
    """Wire all components and return a ready-to-use ProbeService.

    Without *settings*, configuration is read from ``PROBE_*`` environment
    variables (see :meth:`Settings.from_env`).
    """
    settings = settings or Settings.from_env()

    tool_registry = ToolRegistry()
    tool_registry.register(make_route_tool(settings))
    tool_registry.register(make_latency_tool(settings))

    return ProbeService(
        tool_registry=tool_registry,
        runner=ProcessRunner(line_limit=settings.line_limit),
        multiplexer=StreamingMultiplexer(stderr_chunk_size=settings.stderr_chunk_size),
    )
