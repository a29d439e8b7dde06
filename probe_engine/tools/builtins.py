"""Built-in probe tools: mtr (route trace) and ping (latency)."""

from __future__ import annotations

from probe_engine.config import Settings
from probe_engine.engine.models import ProbeKind
from probe_engine.engine.parsers import MtrRawParser, PingParser
from probe_engine.tools.registry import ProbeTool


# ---------------------------------------------------------------------------
# mtr: raw machine-readable output, no reverse DNS, fixed cycle count
# ---------------------------------------------------------------------------

def make_route_tool(settings: Settings) -> ProbeTool:
    cycles = str(settings.route_cycles)

    def _args(target: str) -> list[str]:
        return ["--raw", "--no-dns", "--report-cycles", cycles, target]

    return ProbeTool(
        kind=ProbeKind.ROUTE,
        description="Hop-by-hop route trace with per-cycle round-trip times.",
        binary=settings.mtr_binary,
        args=_args,
        parser_factory=MtrRawParser,
    )


# ---------------------------------------------------------------------------
# ping: fixed echo-request count
# ---------------------------------------------------------------------------

def make_latency_tool(settings: Settings) -> ProbeTool:
    count = str(settings.ping_count)

    def _args(target: str) -> list[str]:
        return ["-c", count, target]

    return ProbeTool(
        kind=ProbeKind.LATENCY,
        description="ICMP echo round-trip times to a single destination.",
        binary=settings.ping_binary,
        args=_args,
        parser_factory=PingParser,
    )
