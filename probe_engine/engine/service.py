"""ProbeService: validates a target, runs the tool, delivers its events."""

from __future__ import annotations

import logging
import time

from probe_engine.engine.collector import collect
from probe_engine.engine.errors import ProcessExitError, SpawnError
from probe_engine.engine.models import ErrorEvent, ParsedEvent, ProbeKind
from probe_engine.engine.multiplexer import (
    SINK_ERRORS,
    Sink,
    StreamingMultiplexer,
    emit,
    require_flushable,
)
from probe_engine.engine.runner import ProcessRunner
from probe_engine.engine.targets import ensure_valid_target
from probe_engine.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ProbeService:
    """Public API used by the HTTP and CLI adapters.

    ``await service.run_buffered(kind, target)`` or
    ``await service.run_streaming(kind, target, sink)``.
    """

    def __init__(
        self,
        tool_registry: ToolRegistry,
        runner: ProcessRunner,
        multiplexer: StreamingMultiplexer,
    ) -> None:
        self._tools = tool_registry
        self._runner = runner
        self._multiplexer = multiplexer

    def command_for(self, kind: ProbeKind | str, target: str) -> list[str]:
        """Return the argv for probing *target*; raises InvalidTargetError."""
        tool = self._tools.get(kind)
        return tool.argv(ensure_valid_target(target))

    # ------------------------------------------------------------------
    # Buffered
    # ------------------------------------------------------------------

    async def run_buffered(self, kind: ProbeKind | str, target: str) -> list[ParsedEvent]:
        tool = self._tools.get(kind)
        argv = self.command_for(kind, target)
        t_start = time.time()

        handle = await self._runner.spawn(argv, capture_stderr=False)
        events = await collect(handle, tool.parser())

        logger.info(
            "probe=%s target=%s events=%d latency=%.3fs",
            tool.kind.value, target, len(events), time.time() - t_start,
        )
        return events

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    async def run_streaming(self, kind: ProbeKind | str, target: str, sink: Sink) -> bool:
        """Stream events to *sink*; True if the tool ran to a clean exit.

        Invalid targets and unflushable sinks raise before anything is
        spawned. Once the process is started, failures only end the stream:
        a spawn failure is reported as one error event, a non-zero exit is
        logged, and both return False.
        """
        require_flushable(sink)
        tool = self._tools.get(kind)
        argv = self.command_for(kind, target)
        t_start = time.time()

        try:
            handle = await self._runner.spawn(argv)
        except SpawnError as exc:
            logger.warning("probe=%s target=%s spawn failed: %s", tool.kind.value, target, exc)
            try:
                await emit(sink, ErrorEvent(error=str(exc)).to_ndjson())
            except SINK_ERRORS as sink_exc:
                logger.debug("could not report spawn failure: %s", sink_exc)
            return False

        try:
            delivered = await self._multiplexer.stream(handle, tool.parser(), sink)
        except ProcessExitError as exc:
            logger.warning("probe=%s target=%s stream ended: %s", tool.kind.value, target, exc)
            return False

        logger.info(
            "probe=%s target=%s streamed latency=%.3fs",
            tool.kind.value, target, time.time() - t_start,
        )
        return delivered
