"""Playback: play-url strategy, fallback chain, range probe, safe seek."""

from __future__ import annotations

from .fallback import FallbackChainEngine, FallbackState, build_candidates
from .range_probe import RangeProbe, classify_range_response
from .safe_seek import SafeSeekGuard
from .strategy import download_url, select_play_url

__all__ = [
    "FallbackChainEngine",
    "FallbackState",
    "RangeProbe",
    "SafeSeekGuard",
    "build_candidates",
    "classify_range_response",
    "download_url",
    "select_play_url",
]
