"""FastAPI adapter: thin translation layer, no business logic."""

from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from probe_engine import create_service
from probe_engine.adapters.web_fastapi.streaming import NDJSONStreamResponse, RequestLogMiddleware
from probe_engine.config import Settings
from probe_engine.engine.errors import InvalidTargetError, ProbeError
from probe_engine.engine.models import ProbeKind
from probe_engine.engine.service import ProbeService

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, service: ProbeService | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    service = service or create_service(settings)
    app = FastAPI(title="ProbeEngine API", version="0.1.0")
    app.add_middleware(RequestLogMiddleware)

    @app.exception_handler(InvalidTargetError)
    async def invalid_target(request: Request, exc: InvalidTargetError) -> JSONResponse:
        return JSONResponse({"error": "Invalid target"}, status_code=400)

    @app.exception_handler(RequestValidationError)
    async def invalid_query(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        name = ".".join(str(part) for part in first.get("loc", ())[1:]) or "request"
        return JSONResponse(
            {"error": f"Invalid parameter '{name}': {first.get('msg', 'invalid value')}"},
            status_code=400,
        )

    @app.exception_handler(Exception)
    async def unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    async def run_probe(kind: ProbeKind, target: str, streaming: bool) -> Response:
        service.command_for(kind, target)  # InvalidTargetError → 400 before anything runs

        if streaming:
            return NDJSONStreamResponse(service, kind, target, timeout=settings.request_timeout)

        try:
            events = await asyncio.wait_for(
                service.run_buffered(kind, target),
                timeout=settings.request_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("probe=%s target=%s timed out", kind.value, target)
            return JSONResponse({"error": "probe timed out"}, status_code=500)
        except ProbeError as exc:
            logger.warning("probe=%s target=%s failed: %s", kind.value, target, exc)
            return JSONResponse({"error": str(exc)}, status_code=500)

        return JSONResponse([e.model_dump(mode="json", by_alias=True) for e in events])

    @app.get("/probe-latency")
    async def probe_latency(target: str = "", streaming: bool = False) -> Response:
        return await run_probe(ProbeKind.LATENCY, target, streaming)

    @app.get("/probe-route")
    async def probe_route(target: str = "", streaming: bool = False) -> Response:
        return await run_probe(ProbeKind.ROUTE, target, streaming)

    @app.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return app


# Module-level instance for ``uvicorn probe_engine.adapters.web_fastapi.app:app``
app = create_app()


def serve() -> None:
    """Entry-point for ``probe-web`` console script."""
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(
        "probe_engine.adapters.web_fastapi.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )
