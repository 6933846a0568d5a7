from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from relayplay.domain.entities.errors import (
    HardBlockedSourceError,
    InvalidInputError,
    PlaybackError,
)
from relayplay.infrastructure.config import AppConfig
from relayplay.interfaces.app_state import AppState
from relayplay.interfaces.composition import lifespan

log = structlog.get_logger(__name__)

_ERROR_STATUS: dict[type[PlaybackError], int] = {
    InvalidInputError: 400,
    HardBlockedSourceError: 422,
}


def build_app(config: AppConfig) -> FastAPI:
    """Build the FastAPI app. Configuration only, resources live in lifespan()."""
    app = FastAPI(
        title="relayplay",
        description="Media locator resolution and playback fallback engine",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from relayplay.interfaces.api.playback.router import router as playback_router

    app.include_router(playback_router)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.exception_handler(PlaybackError)
    async def playback_error_handler(
        request: Request, exc: PlaybackError
    ) -> JSONResponse:
        status_code = _ERROR_STATUS.get(type(exc), 502)
        log.warning(
            "playback_error",
            path=request.url.path,
            error=type(exc).__name__,
            status_code=status_code,
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": type(exc).__name__, "message": exc.user_message},
        )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
