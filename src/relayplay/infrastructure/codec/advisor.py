"""Codec advisor: a-priori playability guess from URL, filename and mime.

Optimistic by default: browser-class decoders handle the common
containers, so an unrecognised file is assumed playable.  The fallback
chain is the real arbiter.

Rules are additive.  A hard verdict (``can_play_heuristic=False``) may
replace an earlier warning; a soft warning never replaces one.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from urllib.parse import urlparse

from relayplay.domain.entities.media import CodecAdvice

CapabilityProbe = Callable[[str], bool]

HEVC_PROBE_TYPE = 'video/mp4; codecs="hvc1.1.6.L93.B0"'
MKV_H264_PROBE_TYPE = 'video/x-matroska; codecs="avc1.640028"'
WEBM_VP9_PROBE_TYPE = 'video/webm; codecs="vp9"'

HEVC_CODEC = "HEVC/x265"

HEVC_WARNING = (
    "HEVC/x265 is not supported by this player. Use Safari, Edge with the "
    "HEVC extension, or an external player such as VLC."
)
MKV_WARNING = (
    "MKV may not play here. Playback will still be attempted; MKV with "
    "H.264 video often works."
)
TEN_BIT_WARNING = (
    "10-bit video is rarely supported. Playback will still be attempted; "
    "if it fails, use an external player such as VLC."
)

_UNSUPPORTED_CONTAINERS = frozenset({"avi", "flv", "wmv"})

_HEVC_MIME_MARKERS = ("x265", "hevc", "hvc1", "hev1")
_MATROSKA_MIME_MARKERS = ("matroska", "x-matroska")

_HEVC_NAME_RE = re.compile(r"x265|h\.?265|hevc", re.IGNORECASE)
_TEN_BIT_RE = re.compile(r"10[-.]?bit", re.IGNORECASE)


def unsupported_container_warning(container: str) -> str:
    return (
        f"{container} is not supported by browser-class players. "
        "Use an external player such as VLC, or download the file."
    )


def get_extension(url: str) -> str:
    """Lower-cased extension of the last path segment ("" if none).

    Accepts bare filenames as well as URLs.
    """
    try:
        path = urlparse(url).path
    except ValueError:
        return ""
    segment = path.rsplit("/", 1)[-1].lower()
    dot = segment.rfind(".")
    return "" if dot < 0 else segment[dot + 1 :]


def _no_capabilities(_: str) -> bool:
    return False


def detect_codec_support(
    url: str,
    mime_type: str | None = None,
    *,
    filename: str | None = None,
    can_play: CapabilityProbe | None = None,
) -> CodecAdvice:
    """Infer container/codec and decide a-priori playability.

    *can_play* is the playback sink's capability query; without one,
    no optional codec is assumed to be available.  *filename* (e.g.
    from a resolver) supplies the extension when the URL has none and
    is scanned for codec markers alongside the URL.
    """
    probe = can_play or _no_capabilities
    ext = get_extension(url) or (get_extension(filename) if filename else "")
    haystack = f"{url} {filename}" if filename else url

    container = ext.upper() or "unknown"
    codec = "unknown"
    playable = True
    warning: str | None = None
    special = False

    if mime_type:
        mt = mime_type.lower()
        if any(marker in mt for marker in _HEVC_MIME_MARKERS):
            codec = HEVC_CODEC
            playable = probe(HEVC_PROBE_TYPE)
            if not playable:
                warning = HEVC_WARNING
        if any(marker in mt for marker in _MATROSKA_MIME_MARKERS):
            container = "MKV"
            special = True

    if ext == "mkv":
        container = "MKV"
        special = True
        if not probe(MKV_H264_PROBE_TYPE) and not probe(WEBM_VP9_PROBE_TYPE):
            warning = warning or MKV_WARNING
    elif ext in _UNSUPPORTED_CONTAINERS:
        container = ext.upper()
        special = True
        playable = False
        warning = unsupported_container_warning(container)

    if _HEVC_NAME_RE.search(haystack):
        codec = HEVC_CODEC
        if not probe(HEVC_PROBE_TYPE):
            playable = False
            warning = HEVC_WARNING

    if _TEN_BIT_RE.search(haystack):
        codec = f"{codec} 10-bit"
        if HEVC_CODEC not in codec:
            warning = warning or TEN_BIT_WARNING

    return CodecAdvice(
        container=container,
        codec=codec,
        can_play_heuristic=playable,
        warning=warning,
        needs_special_handling=special,
    )
