"""Streaming multiplexer: stdout events and stderr chunks to a live sink."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from probe_engine.engine.errors import SinkClosedError, StreamingUnsupportedError
from probe_engine.engine.models import ErrorEvent
from probe_engine.engine.parsers import LineParser, apply_parser
from probe_engine.engine.runner import ProcessHandle

logger = logging.getLogger(__name__)

DEFAULT_STDERR_CHUNK = 1024

# Raised by a sink whose consumer has gone away.
SINK_ERRORS = (SinkClosedError, OSError)


class Sink(Protocol):
    """Ordered output destination with explicit flush."""

    async def write(self, data: bytes) -> None: ...

    async def flush(self) -> None: ...


def require_flushable(sink: Any) -> None:
    if not callable(getattr(sink, "write", None)) or not callable(getattr(sink, "flush", None)):
        raise StreamingUnsupportedError(
            f"{type(sink).__name__} does not support incremental flushing"
        )


async def emit(sink: Sink, data: bytes) -> None:
    await sink.write(data)
    await sink.flush()


class StreamingMultiplexer:
    """Runs one reader task per output channel of a :class:`ProcessHandle`.

    Each reader writes and flushes every item before reading the next one,
    so a slow sink throttles the child. Ordering holds within a channel
    but not between stdout and stderr.
    """

    def __init__(self, stderr_chunk_size: int = DEFAULT_STDERR_CHUNK) -> None:
        self._chunk_size = stderr_chunk_size

    async def stream(self, handle: ProcessHandle, parser: LineParser, sink: Sink) -> bool:
        """Deliver *handle*'s output to *sink* until the process exits.

        Returns True once the tool has exited cleanly with everything
        delivered, False when the sink stopped accepting writes (the process
        is then killed and reaped). Raises
        :class:`~probe_engine.engine.errors.ProcessExitError` if the tool fails.
        """
        try:
            require_flushable(sink)
        except StreamingUnsupportedError:
            await handle.release()
            raise
        handle.claim(self)

        readers = [
            asyncio.create_task(self._pump_stdout(handle, parser, sink)),
            asyncio.create_task(self._pump_stderr(handle, sink)),
        ]
        try:
            delivered = await asyncio.gather(*readers)
            if not all(delivered):
                logger.info("pid=%d sink closed, abandoning stream", handle.pid)
                await handle.release()
                return False
            await handle.wait()
        except BaseException:
            for task in readers:
                task.cancel()
            handle.kill()
            await asyncio.gather(*readers, return_exceptions=True)
            await handle.release()
            raise
        return True

    async def _pump_stdout(self, handle: ProcessHandle, parser: LineParser, sink: Sink) -> bool:
        count = 0
        async for line in handle.lines():
            event = apply_parser(parser, line)
            if event is None:
                continue
            try:
                await emit(sink, event.to_ndjson())
            except SINK_ERRORS as exc:
                logger.warning("pid=%d stdout write failed: %s", handle.pid, exc)
                handle.kill()
                return False
            count += 1
        logger.debug("pid=%d streamed %d events", handle.pid, count)
        return True

    async def _pump_stderr(self, handle: ProcessHandle, sink: Sink) -> bool:
        while True:
            chunk = await handle.read_stderr(self._chunk_size)
            if not chunk:
                return True
            event = ErrorEvent(error=chunk.decode("utf-8", errors="replace"))
            try:
                await emit(sink, event.to_ndjson())
            except SINK_ERRORS as exc:
                logger.warning("pid=%d stderr write failed: %s", handle.pid, exc)
                handle.kill()
                return False
