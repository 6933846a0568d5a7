"""Playback driver: owns "current media" for one playback sink.

Flow per load:
    1. Resolve the raw locator into a media descriptor.
    2. Stop on hard-blocked sources (no candidate is ever attempted).
    3. Hand torrents back to the caller.
    4. Exhaust the fallback chain against the sink.
    5. Decide range support for the winning URL (HLS is implicit).

Loads are numbered.  A load that is superseded by a newer ``load()`` or
``reset()`` while suspended returns ``None`` and leaves the newer
state alone.
"""

from __future__ import annotations

from typing import Protocol

import structlog

from relayplay.domain.entities.errors import (
    AllCandidatesFailedError,
    HardBlockedSourceError,
    InvalidInputError,
)
from relayplay.domain.entities.media import (
    FallbackOutcome,
    LoadResult,
    MediaDescriptor,
    RangeSupport,
    SeekOutcome,
    SeekResult,
)
from relayplay.domain.ports.playback_sink import PlaybackSinkPort

log = structlog.get_logger(__name__)

INVALID_INPUT_MESSAGE = "Invalid input: paste a URL, magnet link or .torrent link."
BLOCKED_FALLBACK_MESSAGE = "This source cannot be played in the browser."
EXHAUSTED_FALLBACK_MESSAGE = "Cannot load video."

# ---------------------------------------------------------------------------
# Collaborator protocols
# ---------------------------------------------------------------------------


class _CapabilityProbe(Protocol):
    def __call__(self, mime_type: str) -> bool: ...


class _MediaResolver(Protocol):
    async def resolve(
        self, raw: str | None, *, can_play: _CapabilityProbe | None = None
    ) -> MediaDescriptor | None: ...

    def download_url(self, media: MediaDescriptor) -> str: ...


class _FallbackEngine(Protocol):
    async def run(
        self, sink: PlaybackSinkPort, media: MediaDescriptor
    ) -> FallbackOutcome: ...


class _RangeProbe(Protocol):
    async def probe(self, url: str) -> RangeSupport: ...


class _SeekGuard(Protocol):
    range_support: RangeSupport

    async def seek(self, target: float) -> SeekResult: ...


def _probe_target(url: str) -> bool:
    return url.startswith(("http://", "https://"))


class PlaybackDriver:
    """Strings resolve, fallback chain, range probe and safe seek together."""

    def __init__(
        self,
        *,
        sink: PlaybackSinkPort,
        resolver: _MediaResolver,
        fallback: _FallbackEngine,
        range_probe: _RangeProbe,
        seek_guard: _SeekGuard,
    ) -> None:
        self._sink = sink
        self._resolver = resolver
        self._fallback = fallback
        self._range_probe = range_probe
        self._seek_guard = seek_guard
        self._generation = 0
        self.current: MediaDescriptor | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def range_support(self) -> RangeSupport:
        return self._seek_guard.range_support

    def _set_range_support(self, support: RangeSupport) -> None:
        self._seek_guard.range_support = support

    def _superseded(self, generation: int, step: str) -> bool:
        if generation == self._generation:
            return False
        log.info(
            "load_superseded",
            step=step,
            generation=generation,
            current_generation=self._generation,
        )
        return True

    async def load(self, raw: str | None) -> LoadResult | None:
        """Run one full load cycle.

        Raises:
            InvalidInputError: *raw* is empty.
            HardBlockedSourceError: the source resolved but is unplayable.
            AllCandidatesFailedError: every fallback candidate failed.
        """
        self._generation += 1
        generation = self._generation

        media = await self._resolver.resolve(raw, can_play=self._sink.can_play)
        if self._superseded(generation, "resolve"):
            return None
        if media is None:
            log.warning("load_invalid_input")
            raise InvalidInputError(INVALID_INPUT_MESSAGE)
        if media.blocked:
            log.warning("load_hard_blocked", media_id=media.id[:120])
            raise HardBlockedSourceError(
                media.warning or BLOCKED_FALLBACK_MESSAGE, media
            )

        self.current = media
        self._set_range_support(RangeSupport.UNKNOWN)
        download = self._resolver.download_url(media)

        if media.is_torrent:
            self._set_range_support(RangeSupport.SUPPORTED)
            return LoadResult(
                media=media,
                range_support=RangeSupport.SUPPORTED,
                download_url=download,
            )

        outcome = await self._fallback.run(self._sink, media)
        if self._superseded(generation, "fallback"):
            return None
        if not outcome.success or outcome.used_url is None:
            log.warning(
                "load_all_candidates_failed",
                media_id=media.id[:120],
                attempts=outcome.attempts,
            )
            raise AllCandidatesFailedError(
                outcome.error or EXHAUSTED_FALLBACK_MESSAGE,
                media,
                outcome,
                download,
            )

        if media.is_hls:
            support = RangeSupport.SUPPORTED
        elif _probe_target(outcome.used_url):
            support = await self._range_probe.probe(outcome.used_url)
            if self._superseded(generation, "range_probe"):
                return None
        else:
            support = RangeSupport.UNKNOWN

        self._set_range_support(support)
        log.info(
            "load_complete",
            media_id=media.id[:120],
            label=outcome.label.value if outcome.label else None,
            range_support=support.value,
        )
        return LoadResult(
            media=media,
            range_support=support,
            download_url=download,
            outcome=outcome,
        )

    def reset(self) -> None:
        """Forget current media; in-flight loads become stale."""
        self._generation += 1
        self.current = None
        self._set_range_support(RangeSupport.UNKNOWN)

    async def seek(self, target: float) -> SeekResult:
        if self.current is None:
            return SeekResult(outcome=SeekOutcome.IGNORED, target=target)
        return await self._seek_guard.seek(target)

    async def skip(self, delta: float) -> SeekResult:
        return await self.seek(self._sink.current_time + delta)

    def download_url(self) -> str | None:
        if self.current is None:
            return None
        return self._resolver.download_url(self.current)
