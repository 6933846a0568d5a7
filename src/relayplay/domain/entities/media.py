"""Domain entities for media resolution and playback.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any


HLS_MANIFEST_RE = re.compile(r"\.m3u8(?:[?#]|$)", re.IGNORECASE)


class LocatorKind(str, enum.Enum):
    """What a raw user locator points at."""

    TORRENT = "torrent"
    URL = "url"


class ProviderTag(str, enum.Enum):
    """Hosting service a URL belongs to, detected from its hostname."""

    GOFILE = "GoFile"
    GOOGLE_DRIVE = "Google Drive"
    MEGA = "MEGA"
    PIXELDRAIN = "PixelDrain"
    MEDIAFIRE = "MediaFire"
    MEGAUP = "MegaUp"
    ONEFICHIER = "1Fichier"
    KRAKENFILES = "Krakenfiles"
    SENDCM = "Send.cm"
    STREAMTAPE = "StreamTape"
    DOODSTREAM = "DoodStream"
    FILEMOON = "FileMoon"
    STREAMWISH = "StreamWish"
    MP4UPLOAD = "Mp4Upload"
    MIXDROP = "MixDrop"
    VIDOZA = "Vidoza"
    VOE = "Voe"
    UPSTREAM = "Upstream"
    FILELIONS = "FileLions"
    VTUBE = "VTube"
    HEXUPLOAD = "HexUpload"
    RACATY = "Racaty"
    USERSDRIVE = "UsersDrive"
    BUZZHEAVIER = "Buzzheavier"
    TORRENT = "Torrent"
    HLS = "HLS"
    DASH = "DASH"
    DIRECT = "Direct"


class CandidateLabel(str, enum.Enum):
    """Diagnostic label of a fallback candidate (never used for selection)."""

    PRIMARY = "primary"
    DIRECT = "direct"
    PROXY_FALLBACK = "proxy-fallback"
    PROXY_ORIGINAL = "proxy-original"


class RangeSupport(str, enum.Enum):
    """Tri-state result of a byte-range probe.

    ``UNKNOWN`` must be treated like ``UNSUPPORTED`` for seek safety.
    """

    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


class UnresolvedReason(str, enum.Enum):
    """Why the resolve endpoint produced no usable result."""

    NOT_APPLICABLE = "not_applicable"
    NO_PROXY_CONFIGURED = "no_proxy_configured"
    HTTP_STATUS = "http_status"
    INVALID_JSON = "invalid_json"
    NOT_RESOLVED = "not_resolved"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class LocatorDescriptor:
    """Typed form of a raw user locator. One per resolve call."""

    kind: LocatorKind
    raw_input: str
    provider: ProviderTag
    normalized_url: str | None = None
    torrent_id: str | None = None
    cache_id: str | None = None

    @property
    def direct_url(self) -> str:
        """Best direct URL known before any network activity."""
        if self.kind is LocatorKind.TORRENT:
            return self.torrent_id or self.raw_input
        return self.normalized_url or self.raw_input


@dataclass(frozen=True)
class ResolutionResult:
    """Normalized payload of a successful resolve endpoint call."""

    resolved_url: str
    referer: str | None = None
    origin: str | None = None
    cookie: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    note: str | None = None
    filename: str | None = None
    filesize: int | None = None
    mode: str = "resolved"
    blocked_reason: str | None = None


@dataclass(frozen=True)
class ResolutionOutcome:
    """Two-variant result of a resolution attempt.

    Exactly one of ``result`` / ``reason`` is set.  Use :meth:`success`
    and :meth:`unavailable` instead of the constructor.
    """

    result: ResolutionResult | None = None
    reason: UnresolvedReason | None = None

    @classmethod
    def success(cls, result: ResolutionResult) -> ResolutionOutcome:
        return cls(result=result)

    @classmethod
    def unavailable(cls, reason: UnresolvedReason) -> ResolutionOutcome:
        return cls(reason=reason)

    @property
    def resolved(self) -> bool:
        return self.result is not None


@dataclass(frozen=True)
class CachedMetadata:
    """Advisory per-file metadata from a provider API."""

    fetched_at: float
    name: str | None = None
    size: int | None = None
    mime_type: str | None = None
    thumbnail_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "size": self.size,
            "mime_type": self.mime_type,
            "thumbnail_url": self.thumbnail_url,
            "fetched_at": self.fetched_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CachedMetadata:
        size = data.get("size")
        return cls(
            fetched_at=float(data["fetched_at"]),
            name=data.get("name"),
            size=size if isinstance(size, int) else None,
            mime_type=data.get("mime_type"),
            thumbnail_url=data.get("thumbnail_url"),
        )


@dataclass(frozen=True)
class CodecAdvice:
    """A-priori playability guess for a media URL.

    ``can_play_heuristic`` is best-effort: real playability is only known
    after a load attempt.
    """

    container: str
    codec: str
    can_play_heuristic: bool = True
    warning: str | None = None
    needs_special_handling: bool = False


@dataclass(frozen=True)
class MediaDescriptor:
    """Output of one resolve cycle. Created fresh every cycle."""

    kind: LocatorKind
    provider: ProviderTag
    original_input: str
    source_url: str
    direct_url: str
    play_url: str
    id: str
    title: str
    needs_resolve: bool = False
    resolution: ResolutionResult | None = None
    codec_advice: CodecAdvice | None = None
    cached_metadata: CachedMetadata | None = None
    cache_id: str | None = None
    torrent_id: str | None = None
    warning: str | None = None
    blocked: bool = False

    @property
    def is_torrent(self) -> bool:
        return self.kind is LocatorKind.TORRENT

    @property
    def is_hls(self) -> bool:
        """Segment-addressed manifest source."""
        return HLS_MANIFEST_RE.search(self.direct_url) is not None


@dataclass(frozen=True)
class CandidateUrl:
    """One entry of the fallback chain."""

    url: str
    label: CandidateLabel


@dataclass(frozen=True)
class CandidateFailure:
    """Why a single fallback candidate did not become ready."""

    label: CandidateLabel
    url: str
    code: int | None = None
    message: str = ""
    timed_out: bool = False

    def describe(self) -> str:
        if self.timed_out:
            return f"{self.label.value}: timed out ({self.message})"
        return f'{self.label.value}: error code={self.code} msg="{self.message}"'


@dataclass(frozen=True)
class FallbackOutcome:
    """Terminal state of a fallback chain run. Never raised."""

    success: bool
    used_url: str | None = None
    tried_index: int | None = None
    label: CandidateLabel | None = None
    error: str | None = None
    failures: tuple[CandidateFailure, ...] = ()
    attempts: int = 0


@dataclass(frozen=True)
class SinkError:
    """Error reported by the playback sink (code mirrors media error codes)."""

    code: int | None = None
    message: str = ""


class SeekOutcome(str, enum.Enum):
    """How a guarded seek ended."""

    IGNORED = "ignored"
    DIRECT = "direct"
    LANDED = "landed"
    REVERTED = "reverted"


@dataclass(frozen=True)
class SeekResult:
    """Result of a guarded seek. ``notice`` is set only when reverted."""

    outcome: SeekOutcome
    target: float
    position_before: float | None = None
    notice: str | None = None


@dataclass(frozen=True)
class LoadResult:
    """Successful end of a playback load.

    ``outcome`` is ``None`` for torrents, which are handed back to the
    caller without a fallback chain.
    """

    media: MediaDescriptor
    range_support: RangeSupport
    download_url: str
    outcome: FallbackOutcome | None = None
