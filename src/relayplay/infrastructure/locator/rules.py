"""Hostname rule tables for provider detection and resolution gating.

Tables are ordered; the first matching rule wins.  Patterns are applied
with ``re.search`` against the lower-cased hostname.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from relayplay.domain.entities.media import ProviderTag


@dataclass(frozen=True)
class ProviderRule:
    """A single ``hostname pattern -> provider`` mapping."""

    pattern: re.Pattern[str]
    provider: ProviderTag

    def matches(self, hostname: str) -> bool:
        return self.pattern.search(hostname) is not None


def _rule(pattern: str, provider: ProviderTag) -> ProviderRule:
    return ProviderRule(re.compile(pattern), provider)


PROVIDER_RULES: tuple[ProviderRule, ...] = (
    _rule(r"gofile\.io", ProviderTag.GOFILE),
    _rule(r"google\.com|googleusercontent\.com", ProviderTag.GOOGLE_DRIVE),
    _rule(r"mega\.nz|mega\.co\.nz", ProviderTag.MEGA),
    _rule(r"pixeldrain\.com", ProviderTag.PIXELDRAIN),
    _rule(r"mediafire\.com", ProviderTag.MEDIAFIRE),
    _rule(r"megaup\.net", ProviderTag.MEGAUP),
    _rule(r"1fichier\.com", ProviderTag.ONEFICHIER),
    _rule(r"krakenfiles\.com", ProviderTag.KRAKENFILES),
    _rule(r"send\.cm", ProviderTag.SENDCM),
    _rule(r"streamtape|strtape", ProviderTag.STREAMTAPE),
    _rule(r"dood|ds2play|d0", ProviderTag.DOODSTREAM),
    _rule(r"filemoon", ProviderTag.FILEMOON),
    _rule(r"streamwish|wish", ProviderTag.STREAMWISH),
    _rule(r"mp4upload", ProviderTag.MP4UPLOAD),
    _rule(r"mixdrop|mixdrp", ProviderTag.MIXDROP),
    _rule(r"vidoza", ProviderTag.VIDOZA),
    _rule(r"voe\.", ProviderTag.VOE),
    _rule(r"upstream", ProviderTag.UPSTREAM),
    _rule(r"filelions|lions", ProviderTag.FILELIONS),
    _rule(r"vtube|vtbe", ProviderTag.VTUBE),
    _rule(r"hexupload", ProviderTag.HEXUPLOAD),
    _rule(r"racaty", ProviderTag.RACATY),
    _rule(r"usersdrive", ProviderTag.USERSDRIVE),
    _rule(r"buzzheavier|bfrm\.io", ProviderTag.BUZZHEAVIER),
)

# Hosts whose pages never expose a streamable URL directly.
NEEDS_RESOLVE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (
        r"gofile\.io",
        r"drive\.google\.com",
        r"docs\.google\.com",
        r"drive\.usercontent\.google\.com",
        r"mega\.nz",
        r"mega\.co\.nz",
        r"pixeldrain\.com",
        r"mediafire\.com",
        r"megaup\.net",
        r"1fichier\.com",
        r"krakenfiles\.com",
        r"send\.cm",
        r"streamtape\.",
        r"strtape\.",
        r"doodstream\.",
        r"dood\.\w+",
        r"filemoon\.",
        r"streamwish\.",
        r"mp4upload\.com",
        r"mixdrop\.",
        r"vidoza\.",
        r"voe\.\w+",
        r"upstream\.",
        r"filelions\.",
        r"vtube\.",
        r"vtbe\.",
        r"hexupload\.",
        r"racaty\.",
        r"usersdrive\.com",
        r"buzzheavier\.com",
        r"bfrm\.io",
    )
)


@dataclass(frozen=True)
class CacheIdRule:
    """Extracts a stable provider file id from one URL shape."""

    provider: ProviderTag
    pattern: re.Pattern[str]


# PixelDrain exposes the same id in share links and raw API links.
CACHE_ID_RULES: tuple[CacheIdRule, ...] = (
    CacheIdRule(
        ProviderTag.PIXELDRAIN,
        re.compile(r"pixeldrain\.com/u/([a-zA-Z0-9]+)"),
    ),
    CacheIdRule(
        ProviderTag.PIXELDRAIN,
        re.compile(r"pixeldrain\.com/api/file/([a-zA-Z0-9]+)"),
    ),
)
