"""Shared fixtures for integration tests.

These tests use real infrastructure components (DiskcacheStore,
HttpxResolutionClient, MetadataCache, open_engine) with mocked HTTP via
respx.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import respx

from relayplay.infrastructure.config import AppConfig
from relayplay.infrastructure.store import DiskcacheStore


@pytest.fixture()
async def http_client() -> httpx.AsyncClient:
    """Real httpx.AsyncClient for use with respx mocking."""
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture()
async def diskcache(tmp_path: Path) -> DiskcacheStore:
    """Real DiskcacheStore backed by tmp_path (auto-cleaned)."""
    store = DiskcacheStore(tmp_path / "cache", max_concurrent=5)
    async with store:
        yield store


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture()
def engine_config(tmp_path: Path) -> AppConfig:
    """Config for a fully wired engine with fast timeouts."""
    return AppConfig(
        proxy_base_url="https://proxy.test",
        cache_dir=tmp_path / "engine-cache",
        attempt_timeout_seconds=0.2,
        resolve_timeout_seconds=1.0,
        metadata_timeout_seconds=1.0,
        range_probe_timeout_seconds=1.0,
        seek_grace_seconds=0.01,
    )
