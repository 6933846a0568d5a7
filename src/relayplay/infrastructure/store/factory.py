"""Builds the configured key-value store backend."""

from __future__ import annotations

from typing import Literal

import structlog

from relayplay.domain.ports.key_value_store import KeyValueStorePort

from .diskcache_store import DiskcacheStore
from .redis_store import RedisStore

log = structlog.get_logger(__name__)

StoreBackend = Literal["diskcache", "redis"]


def create_store(
    backend: StoreBackend = "diskcache",
    *,
    directory: str = "./.cache/relayplay",
    redis_url: str = "redis://localhost:6379/0",
    max_concurrent: int = 10,
) -> KeyValueStorePort:
    """Create an unopened store; callers enter it with ``async with``.

    Raises:
        ValueError: unknown *backend*.
    """
    if backend == "diskcache":
        log.info("store_create", backend=backend, directory=directory)
        return DiskcacheStore(directory, max_concurrent=max_concurrent)
    if backend == "redis":
        log.info("store_create", backend=backend, url=redis_url)
        return RedisStore(redis_url)
    raise ValueError(
        f"Unknown store backend: {backend!r}. Must be 'diskcache' or 'redis'."
    )
