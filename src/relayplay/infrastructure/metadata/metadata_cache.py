"""Time-bounded metadata cache backed by a KeyValueStorePort."""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Callable

import httpx
import structlog

from relayplay.domain.entities.media import CachedMetadata
from relayplay.domain.ports.key_value_store import KeyValueStorePort
from relayplay.domain.ports.metadata import MetadataFetcherPort
from relayplay.infrastructure.common.deadline import with_deadline

log = structlog.get_logger(__name__)

_SECONDS_PER_DAY = 86_400


def _serialize(meta: CachedMetadata) -> str:
    return json.dumps(meta.to_dict())


def _deserialize(data: str) -> CachedMetadata:
    return CachedMetadata.from_dict(json.loads(data))


class MetadataCache:
    """Per-file metadata with a validity window and a bounded fetch.

    One instance per process, shared by everything that needs provider
    metadata.  Entries are advisory: concurrent writers simply overwrite
    each other.
    """

    def __init__(
        self,
        store: KeyValueStorePort,
        fetcher: MetadataFetcherPort,
        *,
        fetch_timeout: float = 5.0,
        ttl_days: float = 7.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self._fetcher = fetcher
        self._fetch_timeout = fetch_timeout
        self._ttl_seconds = ttl_days * _SECONDS_PER_DAY
        self._clock = clock

    @staticmethod
    def _key(cache_id: str) -> str:
        return f"metadata:{cache_id}"

    def is_fresh(self, meta: CachedMetadata) -> bool:
        return (self._clock() - meta.fetched_at) < self._ttl_seconds

    async def get(self, cache_id: str) -> CachedMetadata | None:
        """Return a fresh cached entry, or ``None`` on miss, expiry or store error."""
        try:
            data = await self.store.get(self._key(cache_id))
        except Exception as e:
            log.error("metadata_store_read_error", cache_id=cache_id, error=str(e))
            return None
        if data is None:
            log.debug("metadata_cache_miss", cache_id=cache_id)
            return None

        try:
            meta = _deserialize(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            log.error("metadata_deserialize_error", cache_id=cache_id, error=str(e))
            return None

        if not self.is_fresh(meta):
            log.debug("metadata_cache_expired", cache_id=cache_id)
            return None

        log.debug("metadata_cache_hit", cache_id=cache_id)
        return meta

    async def save(self, cache_id: str, meta: CachedMetadata) -> None:
        await self.store.set(
            self._key(cache_id),
            _serialize(meta),
            ttl=int(self._ttl_seconds),
        )
        log.debug("metadata_saved", cache_id=cache_id)

    async def lookup(self, cache_id: str) -> CachedMetadata | None:
        """Cached entry if fresh, else one bounded fetch.

        Timeouts and fetch failures yield ``None``; a successful fetch
        is written back before it is returned.  Store errors never
        propagate: a failed read is a miss, a failed write is logged.
        """
        cached = await self.get(cache_id)
        if cached is not None:
            return cached

        try:
            meta = await with_deadline(
                self._fetcher.fetch(cache_id),
                self._fetch_timeout,
                label="metadata_fetch",
            )
        except asyncio.TimeoutError:
            log.warning(
                "metadata_fetch_timeout",
                cache_id=cache_id,
                timeout=self._fetch_timeout,
            )
            return None
        except httpx.HTTPError as exc:
            log.warning("metadata_fetch_failed", cache_id=cache_id, error=str(exc))
            return None

        if meta is None:
            return None

        try:
            await self.save(cache_id, meta)
        except Exception as e:
            log.error("metadata_store_write_error", cache_id=cache_id, error=str(e))
        return meta
