"""Resolve cycle: raw locator text to a :class:`MediaDescriptor`.

    classify -> (metadata lookup || resolve endpoint) -> codec advice
             -> play-url strategy -> descriptor

Neither the metadata lookup nor the resolve call can fail the cycle;
both degrade to "nothing known" and the fallback chain takes over.
"""

from __future__ import annotations

import asyncio

import structlog

from relayplay.domain.entities.media import (
    CachedMetadata,
    LocatorDescriptor,
    LocatorKind,
    MediaDescriptor,
    ProviderTag,
    ResolutionOutcome,
    UnresolvedReason,
)
from relayplay.domain.ports.metadata import MetadataCachePort
from relayplay.domain.ports.resolution_client import ResolutionClientPort
from relayplay.infrastructure.codec import CapabilityProbe, detect_codec_support
from relayplay.infrastructure.locator import classify, host_needs_resolve
from relayplay.infrastructure.metadata import pixeldrain
from relayplay.infrastructure.playback.strategy import (
    blocked_warning,
    download_url,
    media_id,
    select_play_url,
    select_title,
    select_warning,
)

from .proxy import ProxyEndpoint

log = structlog.get_logger(__name__)

_NOT_APPLICABLE = ResolutionOutcome.unavailable(UnresolvedReason.NOT_APPLICABLE)


class MediaResolver:
    """Runs one resolve cycle per call.  Holds no per-cycle state."""

    def __init__(
        self,
        resolution_client: ResolutionClientPort,
        metadata_cache: MetadataCachePort | None,
        proxy: ProxyEndpoint,
        *,
        metadata_host: str = pixeldrain.DEFAULT_HOST,
    ) -> None:
        self._client = resolution_client
        self._metadata = metadata_cache
        self.proxy = proxy
        self._metadata_host = metadata_host

    async def resolve(
        self,
        raw: str | None,
        *,
        can_play: CapabilityProbe | None = None,
    ) -> MediaDescriptor | None:
        """Resolve *raw*; ``None`` when the text is empty."""
        locator = classify(raw)
        if locator is None:
            return None
        if locator.kind is LocatorKind.TORRENT:
            return self._torrent_descriptor(locator)
        return await self._url_descriptor(locator, can_play)

    def download_url(self, media: MediaDescriptor) -> str:
        return download_url(media, self.proxy)

    @staticmethod
    def _torrent_descriptor(locator: LocatorDescriptor) -> MediaDescriptor:
        handle = locator.direct_url
        return MediaDescriptor(
            kind=LocatorKind.TORRENT,
            provider=ProviderTag.TORRENT,
            original_input=locator.raw_input,
            source_url=locator.raw_input,
            direct_url=handle,
            play_url=handle,
            id=media_id(LocatorKind.TORRENT, locator.raw_input),
            title="Torrent",
            torrent_id=locator.torrent_id,
        )

    async def _lookup_metadata(self, cache_id: str | None) -> CachedMetadata | None:
        if not cache_id or self._metadata is None:
            return None
        return await self._metadata.lookup(cache_id)

    async def _resolve_source(self, url: str, needs_resolve: bool) -> ResolutionOutcome:
        if not needs_resolve:
            return _NOT_APPLICABLE
        return await self._client.resolve(url)

    async def _url_descriptor(
        self,
        locator: LocatorDescriptor,
        can_play: CapabilityProbe | None,
    ) -> MediaDescriptor:
        source_url = locator.direct_url
        needs_resolve = host_needs_resolve(source_url)
        log.info(
            "media_resolve_start",
            provider=locator.provider.value,
            needs_resolve=needs_resolve,
            url=source_url[:120],
        )

        direct_url = source_url
        if locator.cache_id:
            direct_url = pixeldrain.file_url(locator.cache_id, self._metadata_host)

        metadata, outcome = await asyncio.gather(
            self._lookup_metadata(locator.cache_id),
            self._resolve_source(source_url, needs_resolve),
        )

        resolution = outcome.result
        if resolution is not None:
            direct_url = resolution.resolved_url
        elif needs_resolve:
            log.warning(
                "media_resolve_unavailable",
                reason=outcome.reason.value if outcome.reason else None,
                url=source_url[:120],
            )

        blocked = blocked_warning(resolution)
        play_url = select_play_url(
            direct_url,
            self.proxy,
            needs_resolve=needs_resolve,
            cache_id=locator.cache_id,
        )
        filename = (resolution.filename if resolution else None) or (
            metadata.name if metadata else None
        )
        advice = detect_codec_support(
            direct_url,
            metadata.mime_type if metadata else None,
            filename=filename,
            can_play=can_play,
        )

        descriptor = MediaDescriptor(
            kind=LocatorKind.URL,
            provider=locator.provider,
            original_input=locator.raw_input,
            source_url=source_url,
            direct_url=direct_url,
            play_url=play_url,
            id=media_id(LocatorKind.URL, direct_url),
            title=select_title(
                url=source_url,
                provider=locator.provider,
                resolution=resolution,
                metadata=metadata,
            ),
            needs_resolve=needs_resolve,
            resolution=resolution,
            codec_advice=advice,
            cached_metadata=metadata,
            cache_id=locator.cache_id,
            warning=select_warning(blocked=blocked, codec_advice=advice),
            blocked=blocked is not None,
        )
        log.info(
            "media_resolved",
            media_id=descriptor.id[:120],
            title=descriptor.title,
            container=advice.container,
            codec=advice.codec,
            can_play=advice.can_play_heuristic,
            blocked=descriptor.blocked,
            play_url=play_url[:120],
        )
        return descriptor
