"""Shared fixtures for probe_engine tests.

Diagnostic binaries are replaced by small Python scripts run with the
current interpreter, so the tests need neither ping nor mtr installed.
"""

from __future__ import annotations

import json
import sys
import textwrap

import pytest

from probe_engine.engine.models import ProbeKind
from probe_engine.engine.multiplexer import StreamingMultiplexer
from probe_engine.engine.parsers import MtrRawParser, PingParser
from probe_engine.engine.runner import ProcessRunner
from probe_engine.engine.service import ProbeService
from probe_engine.tools.registry import ProbeTool, ToolRegistry

PING_LINES = [
    "PING 1.1.1.1 (1.1.1.1) 56(84) bytes of data.",
    "64 bytes from 1.1.1.1: icmp_seq=1 ttl=56 time=11.3 ms",
    "64 bytes from 1.1.1.1: icmp_seq=2 ttl=56 time=10.9 ms",
    "",
    "--- 1.1.1.1 ping statistics ---",
    "2 packets transmitted, 2 received, 0% packet loss, time 1001ms",
]

MTR_LINES = [
    "h 0 192.168.1.1",
    "p 0 1250 0",
    "h 1 10.0.0.1",
    "p 1 8200 0",
    "x 0 0",
]


class RecordingSink:
    """Sink that records every write and flush in call order."""

    def __init__(self) -> None:
        self.ops: list[tuple[str, bytes | None]] = []
        self.data = bytearray()

    async def write(self, data: bytes) -> None:
        self.ops.append(("write", data))
        self.data += data

    async def flush(self) -> None:
        self.ops.append(("flush", None))

    def objects(self) -> list[dict]:
        return [json.loads(line) for line in self.data.decode().splitlines()]

    def events(self) -> list[dict]:
        return [o for o in self.objects() if "error" not in o]

    def stderr_text(self) -> str:
        return "".join(o["error"] for o in self.objects() if "error" in o)


def emit_script(lines: list[str], *, stderr: str = "", exit_code: int = 0) -> str:
    """Python source that prints *lines* to stdout and exits with *exit_code*."""
    return textwrap.dedent(f"""
        import sys
        for line in {lines!r}:
            print(line, flush=True)
        if {stderr!r}:
            sys.stderr.write({stderr!r})
            sys.stderr.flush()
        sys.exit({exit_code})
    """)


def python_argv(code: str, *args: str) -> list[str]:
    return [sys.executable, "-c", textwrap.dedent(code), *args]


@pytest.fixture
def runner():
    return ProcessRunner()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def script_tool():
    """Factory for a ProbeTool whose binary is a Python one-liner."""

    def _make(kind: ProbeKind, code: str) -> ProbeTool:
        return ProbeTool(
            kind=kind,
            description=f"scripted {kind.value}",
            binary=sys.executable,
            args=lambda target: ["-c", code, target],
            parser_factory=MtrRawParser if kind is ProbeKind.ROUTE else PingParser,
        )

    return _make


@pytest.fixture
def make_service(script_tool):
    """Factory: ``make_service(route=code, latency=code)`` → ProbeService."""

    def _make(**scripts: str) -> ProbeService:
        registry = ToolRegistry()
        for kind, code in scripts.items():
            registry.register(script_tool(ProbeKind(kind), code))
        return ProbeService(
            tool_registry=registry,
            runner=ProcessRunner(),
            multiplexer=StreamingMultiplexer(),
        )

    return _make


@pytest.fixture
def missing_binary_service():
    """ProbeService whose route tool points at a binary that does not exist."""
    registry = ToolRegistry()
    registry.register(ProbeTool(
        kind=ProbeKind.ROUTE,
        description="missing binary",
        binary="/nonexistent/mtr",
        args=lambda target: [target],
        parser_factory=MtrRawParser,
    ))
    return ProbeService(registry, ProcessRunner(), StreamingMultiplexer())
