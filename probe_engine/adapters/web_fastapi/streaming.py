"""ASGI plumbing for NDJSON streaming and request logging."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Mapping

from fastapi.responses import Response
from starlette.types import Message, Receive, Scope, Send

from probe_engine.engine.errors import SinkClosedError
from probe_engine.engine.models import ProbeKind
from probe_engine.engine.service import ProbeService

logger = logging.getLogger(__name__)


class ASGISink:
    """Sink over an ASGI ``send`` callable.

    ``write`` buffers, ``flush`` sends the buffered bytes as one body chunk.
    """

    def __init__(self, send: Send) -> None:
        self._send = send
        self._pending = bytearray()
        self.closed = False

    async def write(self, data: bytes) -> None:
        if self.closed:
            raise SinkClosedError("client disconnected")
        self._pending += data

    async def flush(self) -> None:
        if self.closed:
            raise SinkClosedError("client disconnected")
        if not self._pending:
            return
        body = bytes(self._pending)
        self._pending.clear()
        try:
            await self._send({"type": "http.response.body", "body": body, "more_body": True})
        except OSError:
            self.closed = True
            raise

    def close(self) -> None:
        self.closed = True


class NDJSONStreamResponse(Response):
    """Streams a probe run as newline-delimited JSON.

    Headers are committed before the tool starts, so failures after that
    point simply end the body.
    """

    media_type = "application/x-ndjson"

    def __init__(
        self,
        service: ProbeService,
        kind: ProbeKind,
        target: str,
        timeout: float,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._service = service
        self._kind = kind
        self._target = target
        self._timeout = timeout
        self.status_code = 200
        self.background = None
        self.init_headers({
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
            **(headers or {}),
        })

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await send({
            "type": "http.response.start",
            "status": self.status_code,
            "headers": self.raw_headers,
        })
        sink = ASGISink(send)

        run = asyncio.create_task(
            asyncio.wait_for(
                self._service.run_streaming(self._kind, self._target, sink),
                timeout=self._timeout,
            )
        )
        watcher = asyncio.create_task(_listen_for_disconnect(receive))
        try:
            await asyncio.wait({run, watcher}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not run.done():
                sink.close()
                run.cancel()
            watcher.cancel()

        (outcome,) = await asyncio.gather(run, return_exceptions=True)
        if isinstance(outcome, asyncio.TimeoutError):
            logger.warning("probe=%s target=%s stream timed out", self._kind.value, self._target)
        elif isinstance(outcome, asyncio.CancelledError):
            logger.info("probe=%s target=%s client disconnected", self._kind.value, self._target)
        elif isinstance(outcome, BaseException):
            raise outcome

        if not sink.closed:
            await send({"type": "http.response.body", "body": b"", "more_body": False})
        if self.background is not None:
            await self.background()


async def _listen_for_disconnect(receive: Receive) -> None:
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            return


class RequestLogMiddleware:
    """Logs method, path, status and latency of every HTTP request."""

    def __init__(self, app) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        t_start = time.time()
        status = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            query = scope.get("query_string", b"").decode("latin-1")
            path = scope["path"] + (f"?{query}" if query else "")
            logger.info(
                '"%s %s" %d %.1fms',
                scope["method"], path, status, (time.time() - t_start) * 1000,
            )
