"""Provider file metadata (fetchers + time-bounded cache)."""

from __future__ import annotations

from .metadata_cache import MetadataCache
from .pixeldrain import PixelDrainMetadataFetcher

__all__ = ["MetadataCache", "PixelDrainMetadataFetcher"]
