"""Fallback chain engine.

Builds the ordered, de-duplicated candidate list for a media descriptor
and tries each candidate against the playback sink until one becomes
ready.  Attempts are strictly sequential: the next candidate is only
assigned after the previous attempt has settled.
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Callable

import structlog

from relayplay.domain.entities.media import (
    CandidateFailure,
    CandidateLabel,
    CandidateUrl,
    FallbackOutcome,
    MediaDescriptor,
)
from relayplay.domain.ports.playback_sink import (
    READY_EVENTS,
    PlaybackSinkPort,
    SinkEvent,
)
from relayplay.infrastructure.common.deadline import with_deadline
from relayplay.infrastructure.resolution.proxy import ProxyEndpoint

from .strategy import download_url

log = structlog.get_logger(__name__)

DEFAULT_ATTEMPT_TIMEOUT = 20.0

EXHAUSTED_HEADLINE = "All candidate URLs failed to load."
DOWNLOAD_DIRECTIVE = (
    "Use the download link to fetch the file, then play it with an "
    "external player such as VLC."
)


class FallbackState(str, enum.Enum):
    IDLE = "idle"
    BUILDING = "building"
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


def build_candidates(
    media: MediaDescriptor, proxy: ProxyEndpoint
) -> list[CandidateUrl]:
    """Ordered candidate chain, cheapest first, no duplicate URL strings.

    1. strategy-selected play URL
    2. resolved direct URL
    3. direct URL through the proxy
    4. original source URL through the proxy
    """
    candidates: list[CandidateUrl] = []
    seen: set[str] = set()

    def _add(url: str | None, label: CandidateLabel) -> None:
        if not url or url in seen:
            return
        seen.add(url)
        candidates.append(CandidateUrl(url=url, label=label))

    _add(media.play_url, CandidateLabel.PRIMARY)
    _add(media.direct_url, CandidateLabel.DIRECT)
    if media.direct_url:
        _add(proxy.wrap(media.direct_url), CandidateLabel.PROXY_FALLBACK)
    if media.source_url and media.source_url != media.direct_url:
        _add(proxy.wrap(media.source_url), CandidateLabel.PROXY_ORIGINAL)
    return candidates


def exhausted_message(
    media: MediaDescriptor,
    failures: list[CandidateFailure],
    download: str | None = None,
) -> str:
    """Composite diagnostic for an exhausted chain."""
    parts = [EXHAUSTED_HEADLINE]
    advice = media.codec_advice
    if advice is not None and not advice.can_play_heuristic:
        format_line = f"Format: {advice.container} / {advice.codec}"
        if advice.warning:
            format_line += f"\n{advice.warning}"
        parts.append(format_line)
    if failures:
        parts.append(
            "Details:\n" + "\n".join(failure.describe() for failure in failures)
        )
    directive = DOWNLOAD_DIRECTIVE
    if download:
        directive += f"\nDownload: {download}"
    parts.append(directive)
    return "\n\n".join(parts)


class FallbackChainEngine:
    """Sequentially exhausts a candidate chain against a playback sink.

    :meth:`run` never raises for load failures; an exhausted chain is
    reported through :class:`FallbackOutcome`.
    """

    def __init__(
        self,
        proxy: ProxyEndpoint,
        *,
        attempt_timeout: float = DEFAULT_ATTEMPT_TIMEOUT,
    ) -> None:
        self._proxy = proxy
        self._attempt_timeout = attempt_timeout

    def candidates(self, media: MediaDescriptor) -> list[CandidateUrl]:
        return build_candidates(media, self._proxy)

    async def run(
        self, sink: PlaybackSinkPort, media: MediaDescriptor
    ) -> FallbackOutcome:
        state = FallbackState.BUILDING
        candidates = self.candidates(media)
        log.info(
            "fallback_chain_built",
            media_id=media.id[:120],
            candidates=[c.label.value for c in candidates],
        )

        failures: list[CandidateFailure] = []
        for index, candidate in enumerate(candidates):
            state = FallbackState.ATTEMPTING
            log.debug(
                "fallback_attempt",
                state=state.value,
                index=index,
                total=len(candidates),
                label=candidate.label.value,
                url=candidate.url[:120],
            )
            failure = await self._attempt(sink, candidate)
            if failure is None:
                state = FallbackState.SUCCEEDED
                log.info(
                    "fallback_succeeded",
                    state=state.value,
                    index=index,
                    label=candidate.label.value,
                    url=candidate.url[:120],
                )
                return FallbackOutcome(
                    success=True,
                    used_url=candidate.url,
                    tried_index=index,
                    label=candidate.label,
                    failures=tuple(failures),
                    attempts=index + 1,
                )
            failures.append(failure)
            log.warning(
                "fallback_attempt_failed",
                index=index,
                detail=failure.describe(),
                url=candidate.url[:120],
            )

        state = FallbackState.EXHAUSTED
        log.warning(
            "fallback_exhausted",
            state=state.value,
            attempts=len(candidates),
            media_id=media.id[:120],
        )
        return FallbackOutcome(
            success=False,
            error=exhausted_message(
                media, failures, download_url(media, self._proxy)
            ),
            failures=tuple(failures),
            attempts=len(candidates),
        )

    async def _attempt(
        self, sink: PlaybackSinkPort, candidate: CandidateUrl
    ) -> CandidateFailure | None:
        """Load one candidate; ``None`` on readiness, else the failure."""
        loop = asyncio.get_running_loop()
        settled: asyncio.Future[SinkEvent] = loop.create_future()
        listeners: list[tuple[SinkEvent, Callable[[], None]]] = []

        def _listener_for(event: SinkEvent) -> Callable[[], None]:
            def _on_event() -> None:
                if not settled.done():
                    settled.set_result(event)

            return _on_event

        for event in (*READY_EVENTS, SinkEvent.ERROR):
            callback = _listener_for(event)
            sink.add_listener(event, callback)
            listeners.append((event, callback))

        try:
            try:
                sink.assign(candidate.url)
                sink.begin_load()
            except Exception as exc:
                log.warning(
                    "fallback_sink_rejected",
                    url=candidate.url[:120],
                    error=str(exc),
                )
                return CandidateFailure(
                    label=candidate.label,
                    url=candidate.url,
                    message=str(exc),
                )
            event = await with_deadline(
                settled, self._attempt_timeout, label="fallback_attempt"
            )
        except asyncio.TimeoutError:
            return CandidateFailure(
                label=candidate.label,
                url=candidate.url,
                message=f"no ready signal within {self._attempt_timeout:g}s",
                timed_out=True,
            )
        finally:
            for event_name, callback in listeners:
                sink.remove_listener(event_name, callback)

        if event is SinkEvent.ERROR:
            error = sink.error
            return CandidateFailure(
                label=candidate.label,
                url=candidate.url,
                code=error.code if error is not None else None,
                message=error.message if error is not None else "",
            )
        return None
