"""Tests for the CLI adapter."""

from __future__ import annotations

import io
import json

import pytest
from conftest import MTR_LINES, emit_script

from probe_engine.adapters.cli import main as cli
from probe_engine.engine.models import ProbeKind


@pytest.fixture
def scripted(monkeypatch, make_service):
    def _use(route: str) -> None:
        monkeypatch.setattr(cli, "create_service", lambda: make_service(route=route))

    return _use


class TestRunCli:
    async def test_buffered_prints_array(self, scripted, capsys):
        scripted(emit_script(MTR_LINES))
        assert await cli.run_cli(ProbeKind.ROUTE, "example.com") == 0
        out = json.loads(capsys.readouterr().out)
        assert [e["type"] for e in out] == ["hop", "probe", "hop", "probe", "cycle"]

    async def test_invalid_target_exit_code(self, scripted, capsys):
        scripted(emit_script(MTR_LINES))
        assert await cli.run_cli(ProbeKind.ROUTE, "::1") == 2
        assert "Invalid target" in capsys.readouterr().err

    async def test_tool_failure_exit_code(self, scripted, capsys):
        scripted(emit_script(MTR_LINES, exit_code=1))
        assert await cli.run_cli(ProbeKind.ROUTE, "example.com") == 1
        assert "exited with status 1" in capsys.readouterr().err


class TestStdoutSink:
    async def test_write_then_flush(self):
        buf = io.BytesIO()
        sink = cli.StdoutSink(buf)
        await sink.write(b'{"type": "hop"}\n')
        await sink.flush()
        assert buf.getvalue() == b'{"type": "hop"}\n'


class TestRunCliStreaming:
    async def test_stream_prints_ndjson(self, scripted, capsys):
        scripted(emit_script(MTR_LINES))
        assert await cli.run_cli(ProbeKind.ROUTE, "example.com", streaming=True) == 0
        lines = capsys.readouterr().out.splitlines()
        assert [json.loads(line)["type"] for line in lines] == ["hop", "probe", "hop", "probe", "cycle"]

    async def test_stream_tool_failure_exit_code(self, scripted, capsys):
        scripted(emit_script(MTR_LINES[:2], exit_code=1))
        assert await cli.run_cli(ProbeKind.ROUTE, "example.com", streaming=True) == 1
        assert len(capsys.readouterr().out.splitlines()) == 2

    async def test_stream_missing_binary_exit_code(self, monkeypatch, capsys, missing_binary_service):
        monkeypatch.setattr(cli, "create_service", lambda: missing_binary_service)

        assert await cli.run_cli(ProbeKind.ROUTE, "example.com", streaming=True) == 1
        (line,) = capsys.readouterr().out.splitlines()
        assert "cannot start /nonexistent/mtr" in json.loads(line)["error"]

    async def test_stream_invalid_target_exit_code(self, scripted, capsys):
        scripted(emit_script(MTR_LINES))
        assert await cli.run_cli(ProbeKind.ROUTE, "::1", streaming=True) == 2
        assert capsys.readouterr().out == ""
