"""Wiring of the playback engine from an :class:`AppConfig`.

Shared by the FastAPI lifespan and the CLI.  Resources (HTTP client,
key-value store) are opened on entry and closed on exit in reverse
order.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx
import structlog

from relayplay.application.use_cases.playback import PlaybackDriver
from relayplay.domain.ports.key_value_store import KeyValueStorePort
from relayplay.domain.ports.playback_sink import PlaybackSinkPort
from relayplay.infrastructure.config.schema import AppConfig
from relayplay.infrastructure.metadata import MetadataCache, PixelDrainMetadataFetcher
from relayplay.infrastructure.playback import (
    FallbackChainEngine,
    RangeProbe,
    SafeSeekGuard,
)
from relayplay.infrastructure.resolution import (
    HttpxResolutionClient,
    MediaResolver,
    ProxyEndpoint,
)
from relayplay.infrastructure.store import create_store

log = structlog.get_logger(__name__)


@dataclass
class Engine:
    """Process-wide engine components (one metadata cache per process)."""

    config: AppConfig
    http_client: httpx.AsyncClient
    store: KeyValueStorePort
    proxy: ProxyEndpoint
    metadata_cache: MetadataCache
    resolver: MediaResolver
    fallback: FallbackChainEngine
    range_probe: RangeProbe

    def build_driver(self, sink: PlaybackSinkPort) -> PlaybackDriver:
        """One driver per playback sink."""
        guard = SafeSeekGuard(
            sink,
            grace_seconds=self.config.seek_grace_seconds,
            tolerance_seconds=self.config.seek_tolerance_seconds,
        )
        return PlaybackDriver(
            sink=sink,
            resolver=self.resolver,
            fallback=self.fallback,
            range_probe=self.range_probe,
            seek_guard=guard,
        )


def build_http_client(config: AppConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )


@asynccontextmanager
async def open_engine(config: AppConfig) -> AsyncIterator[Engine]:
    """Open all engine resources.

    Order matters:
        1. Key-value store (metadata cache depends on it)
        2. HTTP client (resolve, metadata and range calls share it)
        3. Components (stateless apart from the two resources above)
    """
    store = create_store(
        config.cache_backend,
        directory=str(config.cache_dir),
        redis_url=config.cache_redis_url,
        max_concurrent=config.cache_max_concurrent,
    )
    await store.__aenter__()
    log.info("store_initialized", backend=config.cache_backend)

    http_client = build_http_client(config)
    try:
        proxy = ProxyEndpoint(config.proxy_base_url)
        if not proxy.enabled:
            log.warning("proxy_not_configured")

        fetcher = PixelDrainMetadataFetcher(
            http_client,
            host=config.metadata_host,
            timeout=config.metadata_timeout_seconds,
        )
        metadata_cache = MetadataCache(
            store,
            fetcher,
            fetch_timeout=config.metadata_timeout_seconds,
            ttl_days=config.metadata_ttl_days,
        )
        client = HttpxResolutionClient(
            http_client, proxy, timeout=config.resolve_timeout_seconds
        )
        engine = Engine(
            config=config,
            http_client=http_client,
            store=store,
            proxy=proxy,
            metadata_cache=metadata_cache,
            resolver=MediaResolver(
                client,
                metadata_cache,
                proxy,
                metadata_host=config.metadata_host,
            ),
            fallback=FallbackChainEngine(
                proxy, attempt_timeout=config.attempt_timeout_seconds
            ),
            range_probe=RangeProbe(
                http_client, timeout=config.range_probe_timeout_seconds
            ),
        )
        log.info("engine_initialized", proxy=repr(proxy))
        yield engine
    finally:
        await http_client.aclose()
        log.info("http_client_closed")
        await store.aclose()
        log.info("store_closed")
