"""Locator classifier: raw text to :class:`LocatorDescriptor`.

Every function here is pure: the result depends only on the input text.
"""

from __future__ import annotations

import re
from urllib.parse import unquote, urlparse

import structlog

from relayplay.domain.entities.media import (
    HLS_MANIFEST_RE,
    LocatorDescriptor,
    LocatorKind,
    ProviderTag,
)

from .rules import CACHE_ID_RULES, NEEDS_RESOLVE_PATTERNS, PROVIDER_RULES

log = structlog.get_logger(__name__)

_TORRENT_FILE_RE = re.compile(r"\.torrent(?:[?#]|$)", re.IGNORECASE)
_HTTP_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_DASH_RE = re.compile(r"\.mpd(?:[?#]|$)", re.IGNORECASE)


def hostname_of(url: str) -> str:
    """Lower-cased hostname, or ``""`` when the URL cannot be parsed."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def is_hls_url(url: str) -> bool:
    return HLS_MANIFEST_RE.search(url) is not None


def is_dash_url(url: str) -> bool:
    return _DASH_RE.search(url) is not None


def is_torrent_locator(text: str) -> bool:
    """Magnet links and ``.torrent`` file URLs (query/fragment allowed)."""
    return text.startswith("magnet:") or _TORRENT_FILE_RE.search(text) is not None


def normalize_url(text: str) -> str:
    """Prefix ``https://`` unless the text has an http(s) scheme or is a blob handle."""
    if _HTTP_SCHEME_RE.match(text) or text.startswith("blob:"):
        return text
    return f"https://{text}"


def detect_provider(url: str) -> ProviderTag:
    """Map a URL to exactly one provider tag.

    Hostname rules first (first match wins), then URL shape, then
    ``Direct``.  Unparseable URLs have no hostname and fall through to
    the shape check.
    """
    hostname = hostname_of(url)
    if hostname:
        for rule in PROVIDER_RULES:
            if rule.matches(hostname):
                return rule.provider
    if is_hls_url(url):
        return ProviderTag.HLS
    if is_dash_url(url):
        return ProviderTag.DASH
    return ProviderTag.DIRECT


def host_needs_resolve(url: str) -> bool:
    """True when the host only serves pages, not media, and must be resolved."""
    hostname = hostname_of(url)
    if not hostname:
        return False
    return any(p.search(hostname) for p in NEEDS_RESOLVE_PATTERNS)


def extract_cache_id(url: str) -> str | None:
    """Stable provider file id usable as a metadata cache key."""
    for rule in CACHE_ID_RULES:
        match = rule.pattern.search(url)
        if match:
            return match.group(1)
    return None


def guess_name(url: str, fallback: str = "Video") -> str:
    """Last non-empty path segment, percent-decoded, else *fallback*."""
    try:
        path = urlparse(url).path
    except ValueError:
        return fallback
    segment = path.rsplit("/", 1)[-1]
    if not segment:
        return fallback
    return unquote(segment)


def classify(raw: str | None) -> LocatorDescriptor | None:
    """Parse raw user text into a descriptor.

    Returns ``None`` for empty or whitespace-only input.
    """
    text = (raw or "").strip()
    if not text:
        return None

    if is_torrent_locator(text):
        return LocatorDescriptor(
            kind=LocatorKind.TORRENT,
            raw_input=text,
            provider=ProviderTag.TORRENT,
            torrent_id=text,
        )

    url = normalize_url(text)
    descriptor = LocatorDescriptor(
        kind=LocatorKind.URL,
        raw_input=text,
        provider=detect_provider(url),
        normalized_url=url,
        cache_id=extract_cache_id(url),
    )
    log.debug(
        "locator_classified",
        provider=descriptor.provider.value,
        cache_id=descriptor.cache_id,
        url=url[:120],
    )
    return descriptor
