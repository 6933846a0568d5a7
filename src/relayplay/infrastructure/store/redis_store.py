"""Redis-backed key-value store via ``redis.asyncio``."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

log = structlog.get_logger(__name__)


class RedisStore:
    """Async Redis store for text values.

    Values are stored as UTF-8 strings under ``{namespace}:{key}``.
    Redis errors are logged and degrade to a miss (reads) or a no-op
    (writes): everything kept here is advisory.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        *,
        namespace: str = "relayplay",
        max_concurrent: int = 50,
    ) -> None:
        self.url = url
        self.namespace = namespace
        self._client: Redis | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def __aenter__(self) -> RedisStore:
        if self._client is None:
            self._client = Redis.from_url(self.url, decode_responses=True)
            try:
                await self._client.ping()
            except RedisError as e:
                log.error("redis_connection_failed", url=self.url, error=str(e))
                await self._client.aclose()
                self._client = None
                raise
            log.info("redis_connected", url=self.url)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.info("redis_closed")

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def _require_open(self) -> Redis:
        if self._client is None:
            raise RuntimeError("Store not opened. Use 'async with store:' first.")
        return self._client

    async def get(self, key: str, default: Any = None) -> Any:
        client = self._require_open()
        async with self._semaphore:
            try:
                value = await client.get(self._key(key))
            except RedisError as e:
                log.error("redis_get_error", key=key, error=str(e))
                return default
        if value is None:
            log.debug("store_miss", key=key)
            return default
        log.debug("store_hit", key=key)
        return value

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        client = self._require_open()
        async with self._semaphore:
            try:
                await client.set(self._key(key), value, ex=ttl)
            except RedisError as e:
                log.error("redis_set_error", key=key, error=str(e))
                return
        log.debug("store_set", key=key, ttl=ttl)

    async def delete(self, key: str) -> bool:
        if self._client is None:
            return False
        async with self._semaphore:
            try:
                deleted = await self._client.delete(self._key(key))
            except RedisError as e:
                log.error("redis_delete_error", key=key, error=str(e))
                return False
        return deleted > 0
