"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.datastructures import State

from relayplay.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from relayplay.infrastructure.composition import Engine


class AppState(State):
    """FastAPI application state.

    ``engine`` is set by composition.py::lifespan().
    """

    config: AppConfig
    engine: Engine
