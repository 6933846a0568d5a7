"""JSON endpoints exposing the resolve cycle to front-ends."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import APIRouter, Query, Request

from relayplay.application.use_cases.playback import (
    BLOCKED_FALLBACK_MESSAGE,
    INVALID_INPUT_MESSAGE,
)
from relayplay.domain.entities.errors import HardBlockedSourceError, InvalidInputError
from relayplay.domain.entities.media import MediaDescriptor
from relayplay.interfaces.app_state import AppState

if TYPE_CHECKING:
    from relayplay.infrastructure.composition import Engine

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["playback"])


def media_to_dict(media: MediaDescriptor) -> dict[str, Any]:
    data = asdict(media)
    data["is_torrent"] = media.is_torrent
    return data


async def resolve_or_raise(engine: Engine, raw: str) -> MediaDescriptor:
    media = await engine.resolver.resolve(raw)
    if media is None:
        raise InvalidInputError(INVALID_INPUT_MESSAGE)
    return media


async def resolve_payload(engine: Engine, raw: str) -> dict[str, Any]:
    """Descriptor, candidate chain and download URL for one locator.

    Raises:
        InvalidInputError: *raw* is empty.
        HardBlockedSourceError: the source cannot be played passively.
    """
    media = await resolve_or_raise(engine, raw)
    if media.blocked:
        raise HardBlockedSourceError(media.warning or BLOCKED_FALLBACK_MESSAGE, media)

    candidates = [] if media.is_torrent else engine.fallback.candidates(media)
    log.debug(
        "resolve_payload_built",
        media_id=media.id[:120],
        candidates=len(candidates),
    )
    return {
        "media": media_to_dict(media),
        "candidates": [{"url": c.url, "label": c.label.value} for c in candidates],
        "download_url": engine.resolver.download_url(media),
    }


@router.get("/resolve")
async def resolve_media(
    request: Request,
    input: str = Query(..., description="URL, magnet link or .torrent link"),
) -> dict[str, Any]:
    """Run one resolve cycle and return the descriptor with its candidate chain.

    Errors map to 400 (empty input) and 422 (hard-blocked source).
    """
    state = cast(AppState, request.app.state)
    return await resolve_payload(state.engine, input)


@router.get("/range-probe")
async def range_probe(
    request: Request,
    url: str = Query(..., min_length=1),
) -> dict[str, str]:
    state = cast(AppState, request.app.state)
    support = await state.engine.range_probe.probe(url)
    return {"range_support": support.value}


@router.get("/download-url")
async def download_url(
    request: Request,
    input: str = Query(...),
) -> dict[str, str]:
    state = cast(AppState, request.app.state)
    media = await resolve_or_raise(state.engine, input)
    return {"download_url": state.engine.resolver.download_url(media)}
