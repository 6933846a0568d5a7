"""httpx client for the external resolve endpoint.

Contract::

    GET {base}/resolve?url=<percent-encoded source>
    Accept: application/json

    {"resolved": true, "url": "...", "referer": "...", "origin": "...",
     "cookie": "...", "headers": {...}, "note": "...", "filename": "...",
     "filesize": 123, "mode": "...", "blocked_reason": "..."}

Every failure is a soft failure: the caller falls back to proxy
streaming of the original URL.  Timeout vs. transport error is kept
apart in the outcome reason for diagnostics only.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from relayplay.domain.entities.media import (
    ResolutionOutcome,
    ResolutionResult,
    UnresolvedReason,
)
from relayplay.infrastructure.common.deadline import with_deadline

from .proxy import ProxyEndpoint

log = structlog.get_logger(__name__)

_ACCEPT_JSON = {"Accept": "application/json"}


def _opt_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _opt_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


def _normalize_headers(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items() if v is not None}


def parse_resolve_payload(data: Any) -> ResolutionOutcome:
    """Turn a decoded resolve response body into an outcome."""
    if not isinstance(data, dict):
        return ResolutionOutcome.unavailable(UnresolvedReason.INVALID_JSON)

    url = data.get("url")
    if not data.get("resolved") or not isinstance(url, str) or not url:
        return ResolutionOutcome.unavailable(UnresolvedReason.NOT_RESOLVED)

    return ResolutionOutcome.success(
        ResolutionResult(
            resolved_url=url,
            referer=_opt_str(data.get("referer")),
            origin=_opt_str(data.get("origin")),
            cookie=_opt_str(data.get("cookie")),
            headers=_normalize_headers(data.get("headers")),
            note=_opt_str(data.get("note")),
            filename=_opt_str(data.get("filename")),
            filesize=_opt_int(data.get("filesize")),
            mode=_opt_str(data.get("mode")) or "resolved",
            blocked_reason=_opt_str(data.get("blocked_reason")),
        )
    )


class HttpxResolutionClient:
    """Calls the resolve endpoint with a hard, cancelling deadline."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        proxy: ProxyEndpoint,
        *,
        timeout: float = 15.0,
    ) -> None:
        self._http = http_client
        self._proxy = proxy
        self._timeout = timeout

    async def resolve(self, url: str) -> ResolutionOutcome:
        if not self._proxy.enabled:
            log.warning("resolve_no_proxy_configured", url=url[:120])
            return ResolutionOutcome.unavailable(UnresolvedReason.NO_PROXY_CONFIGURED)

        endpoint = self._proxy.resolve_url(url)
        log.debug("resolve_request", endpoint=endpoint[:120])

        try:
            resp = await with_deadline(
                self._http.get(endpoint, headers=_ACCEPT_JSON, timeout=self._timeout),
                self._timeout,
                label="resolve",
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            log.warning("resolve_timeout", url=url[:120], timeout=self._timeout)
            return ResolutionOutcome.unavailable(UnresolvedReason.TIMEOUT)
        except httpx.HTTPError as exc:
            log.warning("resolve_transport_error", url=url[:120], error=str(exc))
            return ResolutionOutcome.unavailable(UnresolvedReason.TRANSPORT_ERROR)

        if not 200 <= resp.status_code < 300:
            log.warning("resolve_http_error", url=url[:120], status=resp.status_code)
            return ResolutionOutcome.unavailable(UnresolvedReason.HTTP_STATUS)

        try:
            data = resp.json()
        except ValueError:
            log.warning("resolve_invalid_json", url=url[:120], body=resp.text[:200])
            return ResolutionOutcome.unavailable(UnresolvedReason.INVALID_JSON)

        outcome = parse_resolve_payload(data)
        if outcome.result is None:
            log.warning("resolve_not_resolved", url=url[:120], reason=outcome.reason)
            return outcome

        log.info(
            "resolve_success",
            url=url[:120],
            resolved=outcome.result.resolved_url[:120],
            note=outcome.result.note,
            mode=outcome.result.mode,
        )
        return outcome
