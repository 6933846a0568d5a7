"""Tests for the codec advisor heuristics."""

from __future__ import annotations

import pytest

from relayplay.infrastructure.codec import detect_codec_support, get_extension
from relayplay.infrastructure.codec.advisor import (
    HEVC_CODEC,
    HEVC_PROBE_TYPE,
    HEVC_WARNING,
    MKV_H264_PROBE_TYPE,
    MKV_WARNING,
    TEN_BIT_WARNING,
)


def _supports(*types: str):
    supported = set(types)
    return lambda mime: mime in supported


class TestGetExtension:
    @pytest.mark.parametrize(
        ("url", "ext"),
        [
            ("video.avi", "avi"),
            ("https://x.com/a/b.MKV?token=1", "mkv"),
            ("https://x.com/a/b", ""),
            ("https://x.com/", ""),
        ],
    )
    def test_extension(self, url: str, ext: str) -> None:
        assert get_extension(url) == ext


class TestDefaults:
    def test_mp4_without_hint_is_playable(self) -> None:
        advice = detect_codec_support("video.mp4")
        assert advice.can_play_heuristic is True
        assert advice.warning is None
        assert advice.container == "MP4"
        assert advice.codec == "unknown"
        assert advice.needs_special_handling is False

    def test_no_extension(self) -> None:
        advice = detect_codec_support("https://cdn.example.com/stream")
        assert advice.container == "unknown"
        assert advice.can_play_heuristic is True


class TestUnsupportedContainers:
    @pytest.mark.parametrize("name", ["video.avi", "clip.flv", "old.wmv"])
    def test_hard_unplayable(self, name: str) -> None:
        advice = detect_codec_support(name)
        assert advice.can_play_heuristic is False
        assert advice.warning is not None
        assert advice.needs_special_handling is True


class TestMkv:
    def test_mkv_without_capabilities_warns_softly(self) -> None:
        advice = detect_codec_support("movie.mkv")
        assert advice.container == "MKV"
        assert advice.needs_special_handling is True
        assert advice.can_play_heuristic is True
        assert advice.warning == MKV_WARNING

    def test_mkv_with_h264_capability_has_no_warning(self) -> None:
        advice = detect_codec_support(
            "movie.mkv", can_play=_supports(MKV_H264_PROBE_TYPE)
        )
        assert advice.warning is None

    def test_matroska_mime(self) -> None:
        advice = detect_codec_support(
            "https://cdn/x", "video/x-matroska", can_play=_supports()
        )
        assert advice.container == "MKV"
        assert advice.needs_special_handling is True


class TestHevc:
    def test_hevc_mime_unsupported(self) -> None:
        advice = detect_codec_support("https://cdn/x.mp4", 'video/mp4; codecs="hev1"')
        assert advice.codec == HEVC_CODEC
        assert advice.can_play_heuristic is False
        assert advice.warning == HEVC_WARNING

    def test_hevc_mime_supported(self) -> None:
        advice = detect_codec_support(
            "https://cdn/x.mp4", "video/hevc", can_play=_supports(HEVC_PROBE_TYPE)
        )
        assert advice.can_play_heuristic is True
        assert advice.warning is None

    def test_hevc_filename_overrides_mkv_warning(self) -> None:
        advice = detect_codec_support("Show.S01E01.x265.mkv")
        assert advice.codec == HEVC_CODEC
        assert advice.can_play_heuristic is False
        assert advice.warning == HEVC_WARNING

    def test_hevc_marker_in_resolver_filename(self) -> None:
        advice = detect_codec_support(
            "https://cdn/download", filename="Movie.2024.H265.mp4"
        )
        assert advice.codec == HEVC_CODEC
        assert advice.container == "MP4"


class TestTenBit:
    def test_ten_bit_h264_soft_warning(self) -> None:
        advice = detect_codec_support("Movie.10bit.mp4")
        assert advice.codec == "unknown 10-bit"
        assert advice.warning == TEN_BIT_WARNING
        assert advice.can_play_heuristic is True

    def test_ten_bit_never_replaces_existing_warning(self) -> None:
        advice = detect_codec_support("Movie.10-bit.mkv")
        assert advice.warning == MKV_WARNING

    def test_ten_bit_hevc_keeps_hevc_warning(self) -> None:
        advice = detect_codec_support("Movie.x265.10bit.mp4")
        assert advice.codec == f"{HEVC_CODEC} 10-bit"
        assert advice.warning == HEVC_WARNING
