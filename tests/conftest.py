"""Shared test fixtures for the relayplay test suite."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Sequence
from unittest.mock import AsyncMock

import pytest

from relayplay.domain.entities.media import (
    CachedMetadata,
    LocatorKind,
    MediaDescriptor,
    ProviderTag,
    ResolutionResult,
    SinkError,
)
from relayplay.domain.ports.playback_sink import SinkEvent
from relayplay.infrastructure.resolution.proxy import ProxyEndpoint

PROXY_BASE = "https://proxy.test"

# ---------------------------------------------------------------------------
# Fake playback sink
# ---------------------------------------------------------------------------


class FakeSink:
    """Scripted playback sink.

    ``script`` maps a URL to the event fired on ``begin_load()``:
    a ready event, ``SinkEvent.ERROR`` or ``None`` (never settles, so
    the attempt times out).  Unscripted URLs use ``default``.
    """

    def __init__(
        self,
        script: dict[str, SinkEvent | None] | None = None,
        *,
        default: SinkEvent | None = SinkEvent.ERROR,
        supported_types: Sequence[str] = (),
    ) -> None:
        self.script = dict(script or {})
        self.default = default
        self.supported_types = set(supported_types)
        self.assigned: list[str] = []
        self.load_calls = 0
        self.seeks: list[float] = []
        self.listeners: dict[SinkEvent, list[Callable[[], None]]] = defaultdict(list)
        self.error_for: dict[str, SinkError] = {}
        self._error: SinkError | None = None
        self.current_time = 0.0
        self.duration: float | None = 600.0
        self.buffered_ranges: list[tuple[float, float]] = []
        # When set, seek() lands here instead of at the requested position.
        self.seek_lands_at: float | None = None

    @property
    def assignments(self) -> int:
        return len(self.assigned)

    @property
    def error(self) -> SinkError | None:
        return self._error

    def assign(self, url: str) -> None:
        self.assigned.append(url)
        self._error = None

    def begin_load(self) -> None:
        self.load_calls += 1
        url = self.assigned[-1]
        event = self.script.get(url, self.default)
        if event is None:
            return
        if event is SinkEvent.ERROR:
            self._error = self.error_for.get(url, SinkError(code=4, message="unsupported"))
        self.emit(event)

    def emit(self, event: SinkEvent) -> None:
        for callback in list(self.listeners[event]):
            callback()

    def can_play(self, mime_type: str) -> bool:
        return mime_type in self.supported_types

    def add_listener(self, event: SinkEvent, callback: Callable[[], None]) -> None:
        self.listeners[event].append(callback)

    def remove_listener(self, event: SinkEvent, callback: Callable[[], None]) -> None:
        self.listeners[event].remove(callback)

    def listener_count(self) -> int:
        return sum(len(v) for v in self.listeners.values())

    def buffered(self) -> list[tuple[float, float]]:
        return list(self.buffered_ranges)

    def seek(self, position: float) -> None:
        self.seeks.append(position)
        if self.seek_lands_at is not None and len(self.seeks) == 1:
            self.current_time = self.seek_lands_at
        else:
            self.current_time = position


@pytest.fixture()
def fake_sink() -> FakeSink:
    return FakeSink()


@pytest.fixture()
def make_sink() -> type[FakeSink]:
    """The FakeSink class, for tests that need a scripted sink."""
    return FakeSink


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def proxy() -> ProxyEndpoint:
    return ProxyEndpoint(PROXY_BASE)


@pytest.fixture()
def resolution_result() -> ResolutionResult:
    return ResolutionResult(
        resolved_url="https://cdn.example.com/files/movie.mp4",
        referer="https://gofile.io/",
        filename="Movie.2024.1080p.mp4",
        filesize=1_234_567,
    )


@pytest.fixture()
def cached_metadata() -> CachedMetadata:
    return CachedMetadata(
        fetched_at=1_700_000_000.0,
        name="holiday.mp4",
        size=42,
        mime_type="video/mp4",
        thumbnail_url="https://pixeldrain.com/api/file/abc123/thumbnail?size=256",
    )


@pytest.fixture()
def direct_media() -> MediaDescriptor:
    """Plain direct-link descriptor (no resolution, no proxy)."""
    url = "https://files.example.com/video.mp4"
    return MediaDescriptor(
        kind=LocatorKind.URL,
        provider=ProviderTag.DIRECT,
        original_input="files.example.com/video.mp4",
        source_url=url,
        direct_url=url,
        play_url=url,
        id=f"url:{url}",
        title="video.mp4",
    )


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_store() -> AsyncMock:
    """Mock KeyValueStorePort."""
    store = AsyncMock()
    store.get = AsyncMock(return_value=None)
    store.set = AsyncMock()
    store.delete = AsyncMock(return_value=True)
    store.aclose = AsyncMock()
    return store
