"""Tests for the buffered collector: all-or-nothing results."""

from __future__ import annotations

import pytest
from conftest import MTR_LINES, PING_LINES, emit_script, python_argv

from probe_engine.engine.collector import collect
from probe_engine.engine.errors import CollectionError, ProcessExitError
from probe_engine.engine.models import CycleEvent, HopEvent, LatencyProbeEvent, RouteProbeEvent
from probe_engine.engine.parsers import MtrRawParser, PingParser


class TestCollect:
    async def test_mtr_events_in_read_order(self, runner):
        handle = await runner.spawn(python_argv(emit_script(MTR_LINES + ["garbage", "q 1"])))
        events = await collect(handle, MtrRawParser())

        assert [type(e) for e in events] == [
            HopEvent, RouteProbeEvent, HopEvent, RouteProbeEvent, CycleEvent,
        ]
        assert events[2] == HopEvent(hop=1, ip="10.0.0.1")
        assert handle.returncode == 0

    async def test_ping_skips_noise_and_bad_times(self, runner):
        lines = PING_LINES + ["64 bytes from 1.1.1.1: icmp_seq=3 ttl=56 time=oops ms"]
        handle = await runner.spawn(python_argv(emit_script(lines)))
        events = await collect(handle, PingParser())

        assert [e.seq for e in events] == [1, 2]
        assert all(isinstance(e, LatencyProbeEvent) for e in events)

    async def test_empty_output(self, runner):
        handle = await runner.spawn(python_argv(emit_script([])))
        assert await collect(handle, MtrRawParser()) == []

    async def test_failure_discards_partial_results(self, runner):
        """Five valid lines followed by a non-zero exit is an error, not 5 events."""
        lines = [f"h {i} 10.0.0.{i}" for i in range(5)]
        handle = await runner.spawn(python_argv(emit_script(lines, exit_code=1)))

        with pytest.raises(ProcessExitError) as info:
            await collect(handle, MtrRawParser())
        assert isinstance(info.value, CollectionError)
        assert info.value.returncode == 1

    async def test_stderr_not_consulted(self, runner):
        script = emit_script(["h 1 10.0.0.1"], stderr="mtr: warning\n" * 10000)
        handle = await runner.spawn(python_argv(script), capture_stderr=False)
        events = await collect(handle, MtrRawParser())
        assert events == [HopEvent(hop=1, ip="10.0.0.1")]
