"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "relayplay",
    "environment": "dev",
    "proxy": {
        "base_url": "",
    },
    "http": {
        "timeout_seconds": 30.0,
        "follow_redirects": True,
        "user_agent": "relayplay/0.1.0",
    },
    "resolver": {
        "resolve_timeout_seconds": 15.0,
        "metadata_timeout_seconds": 5.0,
        "metadata_ttl_days": 7.0,
        "metadata_host": "pixeldrain.com",
    },
    "playback": {
        "attempt_timeout_seconds": 20.0,
        "range_probe_timeout_seconds": 5.0,
        "seek_grace_seconds": 0.9,
        "seek_tolerance_seconds": 2.0,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "backend": "diskcache",
        "dir": "./.cache/relayplay",
        "redis_url": "redis://localhost:6379/0",
        "max_concurrent": 10,
    },
}
