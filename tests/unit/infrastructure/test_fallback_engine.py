"""Tests for the fallback chain engine."""

from __future__ import annotations

from dataclasses import replace

import pytest

from relayplay.domain.entities.media import (
    CandidateLabel,
    CodecAdvice,
    MediaDescriptor,
    ProviderTag,
    SinkError,
)
from relayplay.domain.ports.playback_sink import SinkEvent
from relayplay.infrastructure.playback.fallback import (
    DOWNLOAD_DIRECTIVE,
    EXHAUSTED_HEADLINE,
    FallbackChainEngine,
    build_candidates,
)
from relayplay.infrastructure.resolution.proxy import ProxyEndpoint

MEGA_PAGE = "https://mega.nz/file/abc"
RESOLVED = "https://cdn.example.com/files/movie.mp4"


@pytest.fixture()
def resolved_media(direct_media: MediaDescriptor, proxy: ProxyEndpoint) -> MediaDescriptor:
    """Hoster page resolved to a CDN file, played through the proxy."""
    return replace(
        direct_media,
        provider=ProviderTag.MEGA,
        original_input=MEGA_PAGE,
        source_url=MEGA_PAGE,
        direct_url=RESOLVED,
        play_url=proxy.wrap(RESOLVED),
        needs_resolve=True,
    )


class TestBuildCandidates:
    def test_direct_link(self, direct_media: MediaDescriptor, proxy: ProxyEndpoint) -> None:
        candidates = build_candidates(direct_media, proxy)
        assert [c.label for c in candidates] == [
            CandidateLabel.PRIMARY,
            CandidateLabel.PROXY_FALLBACK,
        ]
        assert candidates[1].url == proxy.wrap(direct_media.direct_url)

    def test_resolved_hoster_page(
        self, resolved_media: MediaDescriptor, proxy: ProxyEndpoint
    ) -> None:
        candidates = build_candidates(resolved_media, proxy)
        assert [(c.label, c.url) for c in candidates] == [
            (CandidateLabel.PRIMARY, proxy.wrap(RESOLVED)),
            (CandidateLabel.DIRECT, RESOLVED),
            (CandidateLabel.PROXY_ORIGINAL, proxy.wrap(MEGA_PAGE)),
        ]

    def test_no_duplicate_urls(
        self, resolved_media: MediaDescriptor, proxy: ProxyEndpoint
    ) -> None:
        urls = [c.url for c in build_candidates(resolved_media, proxy)]
        assert len(urls) == len(set(urls))

    def test_all_four_labels(
        self, resolved_media: MediaDescriptor, proxy: ProxyEndpoint
    ) -> None:
        media = replace(resolved_media, play_url="https://mirror.example.com/movie.mp4")
        labels = [c.label for c in build_candidates(media, proxy)]
        assert labels == [
            CandidateLabel.PRIMARY,
            CandidateLabel.DIRECT,
            CandidateLabel.PROXY_FALLBACK,
            CandidateLabel.PROXY_ORIGINAL,
        ]

    def test_disabled_proxy_collapses_chain(self, direct_media: MediaDescriptor) -> None:
        candidates = build_candidates(direct_media, ProxyEndpoint(""))
        assert [c.label for c in candidates] == [CandidateLabel.PRIMARY]


class TestRun:
    async def test_first_candidate_ready(
        self, make_sink, direct_media: MediaDescriptor, proxy: ProxyEndpoint
    ) -> None:
        sink = make_sink({direct_media.play_url: SinkEvent.CAN_PLAY})
        outcome = await FallbackChainEngine(proxy).run(sink, direct_media)

        assert outcome.success
        assert outcome.used_url == direct_media.play_url
        assert outcome.tried_index == 0
        assert outcome.label is CandidateLabel.PRIMARY
        assert outcome.attempts == 1
        assert sink.assignments == 1
        assert sink.load_calls == 1

    @pytest.mark.parametrize("ready", [SinkEvent.LOADED_DATA, SinkEvent.LOADED_METADATA])
    async def test_any_ready_event_counts(
        self, make_sink, direct_media: MediaDescriptor, proxy: ProxyEndpoint, ready: SinkEvent
    ) -> None:
        sink = make_sink({direct_media.play_url: ready})
        outcome = await FallbackChainEngine(proxy).run(sink, direct_media)
        assert outcome.success

    async def test_error_then_success(
        self, make_sink, resolved_media: MediaDescriptor, proxy: ProxyEndpoint
    ) -> None:
        sink = make_sink({RESOLVED: SinkEvent.CAN_PLAY})
        sink.error_for[proxy.wrap(RESOLVED)] = SinkError(code=2, message="network")

        outcome = await FallbackChainEngine(proxy).run(sink, resolved_media)

        assert outcome.success
        assert outcome.used_url == RESOLVED
        assert outcome.tried_index == 1
        assert outcome.label is CandidateLabel.DIRECT
        assert sink.assigned == [proxy.wrap(RESOLVED), RESOLVED]
        assert len(outcome.failures) == 1
        assert outcome.failures[0].code == 2

    async def test_silent_candidate_times_out(
        self, make_sink, direct_media: MediaDescriptor, proxy: ProxyEndpoint
    ) -> None:
        sink = make_sink(
            {
                direct_media.play_url: None,
                proxy.wrap(direct_media.direct_url): SinkEvent.CAN_PLAY,
            }
        )
        engine = FallbackChainEngine(proxy, attempt_timeout=0.05)

        outcome = await engine.run(sink, direct_media)

        assert outcome.success
        assert outcome.label is CandidateLabel.PROXY_FALLBACK
        assert outcome.failures[0].timed_out
        assert "timed out" in outcome.failures[0].describe()

    async def test_late_event_after_timeout_is_ignored(
        self, make_sink, direct_media: MediaDescriptor, proxy: ProxyEndpoint
    ) -> None:
        sink = make_sink({direct_media.play_url: None}, default=None)
        engine = FallbackChainEngine(proxy, attempt_timeout=0.02)

        outcome = await engine.run(sink, direct_media)
        sink.emit(SinkEvent.CAN_PLAY)

        assert not outcome.success
        assert outcome.attempts == 2

    async def test_exhausted_chain(
        self, make_sink, resolved_media: MediaDescriptor, proxy: ProxyEndpoint
    ) -> None:
        sink = make_sink()
        outcome = await FallbackChainEngine(proxy).run(sink, resolved_media)

        assert not outcome.success
        assert outcome.used_url is None
        assert outcome.attempts == 3
        assert sink.assignments == 3
        assert outcome.error is not None
        assert outcome.error.startswith(EXHAUSTED_HEADLINE)
        assert "Details:" in outcome.error
        assert 'primary: error code=4 msg="unsupported"' in outcome.error
        assert DOWNLOAD_DIRECTIVE in outcome.error
        assert f"Download: {proxy.wrap(RESOLVED)}" in outcome.error

    async def test_exhausted_reports_unplayable_format(
        self, make_sink, direct_media: MediaDescriptor, proxy: ProxyEndpoint
    ) -> None:
        media = replace(
            direct_media,
            codec_advice=CodecAdvice(
                container="AVI",
                codec="unknown",
                can_play_heuristic=False,
                warning="AVI is not supported",
            ),
        )
        outcome = await FallbackChainEngine(proxy).run(make_sink(), media)
        assert outcome.error is not None
        assert "Format: AVI / unknown\nAVI is not supported" in outcome.error

    async def test_listeners_removed_after_every_attempt(
        self, make_sink, resolved_media: MediaDescriptor, proxy: ProxyEndpoint
    ) -> None:
        sink = make_sink({proxy.wrap(MEGA_PAGE): None})
        await FallbackChainEngine(proxy, attempt_timeout=0.02).run(sink, resolved_media)
        assert sink.listener_count() == 0

    async def test_sink_rejecting_source_moves_to_next_candidate(
        self, make_sink, direct_media: MediaDescriptor, proxy: ProxyEndpoint
    ) -> None:
        class RejectingSink(make_sink):
            def assign(self, url: str) -> None:
                if not self.assigned:
                    self.assigned.append(url)
                    raise ValueError("sink rejected src")
                super().assign(url)

        wrapped = proxy.wrap(direct_media.direct_url)
        sink = RejectingSink({wrapped: SinkEvent.CAN_PLAY})

        outcome = await FallbackChainEngine(proxy).run(sink, direct_media)

        assert outcome.success
        assert outcome.tried_index == 1
        assert outcome.used_url == wrapped
        assert outcome.failures[0].message == "sink rejected src"
        assert sink.load_calls == 1
        assert sink.listener_count() == 0

    async def test_never_raises_on_disabled_proxy(
        self, make_sink, direct_media: MediaDescriptor
    ) -> None:
        sink = make_sink()
        outcome = await FallbackChainEngine(ProxyEndpoint("")).run(sink, direct_media)
        assert not outcome.success
        assert outcome.attempts == 1
