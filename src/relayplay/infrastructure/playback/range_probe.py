"""Byte-range support probe.

Issues a one-byte ``Range`` GET and classifies the response headers.
The body is never read.  Inconclusive outcomes map to
``RangeSupport.UNKNOWN``, never to ``UNSUPPORTED``.
"""

from __future__ import annotations

import asyncio

import httpx
import structlog

from relayplay.domain.entities.media import RangeSupport
from relayplay.infrastructure.common.deadline import with_deadline

log = structlog.get_logger(__name__)

DEFAULT_PROBE_TIMEOUT = 5.0

_PROBE_HEADERS = {
    "Range": "bytes=0-0",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


def classify_range_response(status_code: int, headers: httpx.Headers) -> RangeSupport:
    """206 or ``Accept-Ranges: bytes`` is proof; ``Accept-Ranges: none`` disproves."""
    if status_code == 206:
        return RangeSupport.SUPPORTED
    accept_ranges = headers.get("accept-ranges", "").lower()
    if "bytes" in accept_ranges:
        return RangeSupport.SUPPORTED
    if accept_ranges.strip() == "none":
        return RangeSupport.UNSUPPORTED
    return RangeSupport.UNKNOWN


class RangeProbe:
    """Checks whether a source URL honours partial-content requests."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        self._http = http_client
        self._timeout = timeout

    async def _fetch_headers(self, url: str) -> tuple[int, httpx.Headers]:
        async with self._http.stream(
            "GET", url, headers=_PROBE_HEADERS, timeout=self._timeout
        ) as resp:
            return resp.status_code, resp.headers

    async def probe(self, url: str) -> RangeSupport:
        try:
            status_code, headers = await with_deadline(
                self._fetch_headers(url), self._timeout, label="range_probe"
            )
        except (asyncio.TimeoutError, httpx.HTTPError) as exc:
            log.debug(
                "range_probe_inconclusive",
                url=url[:120],
                error=type(exc).__name__,
            )
            return RangeSupport.UNKNOWN

        support = classify_range_response(status_code, headers)
        log.debug(
            "range_probe_result",
            url=url[:120],
            status=status_code,
            support=support.value,
        )
        return support
