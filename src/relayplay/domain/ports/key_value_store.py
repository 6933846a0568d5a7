"""Key-value store port used for persisted advisory data."""

from __future__ import annotations

from typing import Any, Protocol


class KeyValueStorePort(Protocol):
    """Async key-value store with optional TTL.

    Implementations:
      - DiskcacheAdapter (SQLite-based, no daemon)
      - RedisAdapter (Redis async client)

    Each adapter MUST support async context-manager semantics:
        async with store:
            await store.set("key", value)
    """

    async def get(self, key: str, default: Any = None) -> Any:
        """Retrieve value, or *default* when missing/expired."""
        ...

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        """Set value with optional TTL (seconds)."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete key. True = deleted, False = did not exist."""
        ...

    async def aclose(self) -> None: ...

    async def __aenter__(self) -> KeyValueStorePort: ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None: ...
