"""Locator classification: raw text, provider detection, cache ids."""

from __future__ import annotations

from .classifier import (
    classify,
    detect_provider,
    extract_cache_id,
    guess_name,
    host_needs_resolve,
    hostname_of,
    is_dash_url,
    is_hls_url,
    normalize_url,
)

__all__ = [
    "classify",
    "detect_provider",
    "extract_cache_id",
    "guess_name",
    "host_needs_resolve",
    "hostname_of",
    "is_dash_url",
    "is_hls_url",
    "normalize_url",
]
