"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import structlog
from fastapi import FastAPI

from relayplay.infrastructure.composition import open_engine
from relayplay.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the engine for the lifetime of the app."""
    state = cast(AppState, app.state)

    async with open_engine(state.config) as engine:
        state.engine = engine
        log.info("app_startup_complete")
        try:
            yield
        finally:
            log.info("app_shutdown_complete")
