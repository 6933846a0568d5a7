"""Ports for provider file metadata."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from relayplay.domain.entities.media import CachedMetadata


@runtime_checkable
class MetadataFetcherPort(Protocol):
    """Fetches metadata for one provider file id.

    Returns ``None`` when the provider has nothing usable.  May raise
    transport errors; callers bound it with a deadline.
    """

    async def fetch(self, cache_id: str) -> CachedMetadata | None: ...


@runtime_checkable
class MetadataCachePort(Protocol):
    """Time-bounded metadata lookup that never fails the caller."""

    async def lookup(self, cache_id: str) -> CachedMetadata | None: ...
