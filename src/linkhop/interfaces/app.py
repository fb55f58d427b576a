"""FastAPI application factory."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from linkhop.infrastructure.config import AppConfig
from linkhop.interfaces.api.resolve.router import router as resolve_router
from linkhop.interfaces.api.tokens.router import router as tokens_router
from linkhop.interfaces.app_state import AppState
from linkhop.interfaces.composition import lifespan

log = structlog.get_logger(__name__)

API_PREFIX = "/api/v1"

RequestHandler = Callable[[Request], Awaitable[Response]]


def _add_health_routes(app: FastAPI, config: AppConfig) -> None:
    @app.get(f"{API_PREFIX}/healthz")
    async def healthz() -> dict[str, Any]:
        """Liveness: 200 while the process runs."""
        return {
            "status": "ok",
            "app": config.app_name,
            "maxHops": config.resolver.max_hops,
            "strategies": list(config.resolver.strategies),
        }

    @app.get(f"{API_PREFIX}/readyz")
    async def readyz() -> Response:
        """Readiness: 503 until the lifespan has wired the resolver."""
        if getattr(app.state, "resolve_uc", None) is None:
            return JSONResponse({"status": "not_ready"}, status_code=503)
        return JSONResponse({"status": "ready"})


def _add_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next: RequestHandler) -> Response:
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
                client_host=request.client.host if request.client else None,
            )


def create_app(config: AppConfig) -> FastAPI:
    """Build the app from *config*. No I/O happens here.

    The HTTP client, codec and resolve use case are created by ``lifespan``
    when the server starts.
    """
    app = FastAPI(
        title="Linkhop",
        description="Redirect resolution and link classification service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state = AppState()
    app.state.config = config

    app.include_router(resolve_router, prefix=API_PREFIX)
    app.include_router(tokens_router, prefix=API_PREFIX)
    _add_health_routes(app, config)
    _add_request_logging(app)
    return app
