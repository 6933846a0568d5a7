"""Play-URL strategy plus title and warning precedence."""

from __future__ import annotations

from relayplay.domain.entities.media import (
    CachedMetadata,
    CodecAdvice,
    LocatorKind,
    MediaDescriptor,
    ProviderTag,
    ResolutionResult,
)
from relayplay.infrastructure.locator import guess_name, is_hls_url
from relayplay.infrastructure.resolution.proxy import ProxyEndpoint

ENCRYPTED_NOTE_MARKER = "encrypted"

ENCRYPTED_WARNING = (
    "This file is encrypted client-side by its host (e.g. MEGA AES). A "
    "passive player cannot decode it. Download it with the host's own app "
    "and play it with an external player such as VLC."
)


def blocked_warning(resolution: ResolutionResult | None) -> str | None:
    """Hard-blocking warning for a resolution, if any.

    A structured ``blocked_reason`` wins; the free-text ``note`` check
    is kept for resolve endpoints that do not send one yet.
    """
    if resolution is None:
        return None
    if resolution.blocked_reason:
        return (
            f"This source cannot be played in the browser "
            f"({resolution.blocked_reason}). Download it and play it with an "
            "external player such as VLC."
        )
    if resolution.note and ENCRYPTED_NOTE_MARKER in resolution.note.lower():
        return ENCRYPTED_WARNING
    return None


def select_play_url(
    direct_url: str,
    proxy: ProxyEndpoint,
    *,
    needs_resolve: bool,
    cache_id: str | None,
) -> str:
    """First matching rule wins.

    1. Resolve-gated or provider-hosted (cache id) sources go through the proxy.
    2. HLS manifests go through the proxy so relative segments are rewritten.
    3. Everything else is tried directly.
    """
    if needs_resolve or cache_id:
        return proxy.wrap(direct_url)
    if is_hls_url(direct_url):
        return proxy.wrap(direct_url)
    return direct_url


def select_title(
    *,
    url: str,
    provider: ProviderTag,
    resolution: ResolutionResult | None = None,
    metadata: CachedMetadata | None = None,
) -> str:
    """Resolver filename > cached metadata name > URL guess > provider name."""
    if resolution is not None and resolution.filename:
        return resolution.filename
    if metadata is not None and metadata.name:
        return metadata.name
    return guess_name(url, fallback=provider.value)


def select_warning(
    *,
    blocked: str | None,
    codec_advice: CodecAdvice | None,
) -> str | None:
    """Hard-blocking warning first; a codec warning never replaces it."""
    if blocked:
        return blocked
    if codec_advice is not None:
        return codec_advice.warning
    return None


def media_id(kind: LocatorKind, key: str) -> str:
    """Stable content key used by history/bookmark stores."""
    prefix = "tor" if kind is LocatorKind.TORRENT else "url"
    return f"{prefix}:{key}"


def download_url(media: MediaDescriptor, proxy: ProxyEndpoint) -> str:
    """Proxy-wrapped URL for the external download path."""
    if media.is_torrent:
        return media.direct_url
    if media.resolution is not None and media.resolution.resolved_url:
        return proxy.wrap(media.resolution.resolved_url)
    if media.direct_url:
        return proxy.wrap(media.direct_url)
    return proxy.wrap(media.source_url)
