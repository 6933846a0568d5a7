"""PixelDrain file metadata via the public file API.

    GET https://{host}/api/file/{id}/info
        -> {"name": "...", "size": 123, "mime_type": "video/mp4", ...}
    GET https://{host}/api/file/{id}/thumbnail?size=256

PixelDrain-compatible mirrors expose the same API under another host.
"""

from __future__ import annotations

import time
from collections.abc import Callable

import httpx
import structlog

from relayplay.domain.entities.media import CachedMetadata

log = structlog.get_logger(__name__)

DEFAULT_HOST = "pixeldrain.com"


def file_url(cache_id: str, host: str = DEFAULT_HOST) -> str:
    """Raw file endpoint (supports byte ranges)."""
    return f"https://{host}/api/file/{cache_id}"


def thumbnail_url(cache_id: str, host: str = DEFAULT_HOST) -> str:
    return f"https://{host}/api/file/{cache_id}/thumbnail?size=256"


class PixelDrainMetadataFetcher:
    """Fetches name/size/mime type for one PixelDrain file id.

    Raises ``httpx.HTTPError`` on transport failures; returns ``None``
    for non-200 responses and unusable bodies.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        host: str = DEFAULT_HOST,
        timeout: float = 5.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._http = http_client
        self._host = host
        self._timeout = timeout
        self._clock = clock

    @property
    def host(self) -> str:
        return self._host

    async def fetch(self, cache_id: str) -> CachedMetadata | None:
        resp = await self._http.get(
            f"{file_url(cache_id, self._host)}/info",
            timeout=self._timeout,
        )
        if resp.status_code != 200:
            log.warning(
                "pixeldrain_info_http_error",
                cache_id=cache_id,
                status=resp.status_code,
            )
            return None

        try:
            data = resp.json()
        except ValueError:
            log.warning("pixeldrain_info_invalid_json", cache_id=cache_id)
            return None
        if not isinstance(data, dict):
            return None

        size = data.get("size")
        return CachedMetadata(
            fetched_at=self._clock(),
            name=data.get("name") or None,
            size=size if isinstance(size, int) and not isinstance(size, bool) else None,
            mime_type=data.get("mime_type") or data.get("content_type") or None,
            thumbnail_url=thumbnail_url(cache_id, self._host),
        )
