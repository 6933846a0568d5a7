"""Proxy endpoint URL helpers (pure string transforms).

The proxy fetches on the client's behalf (CORS, cookies, referer).
Two routes are used:

    GET {base}/?url=<encoded>          stream/rewrite any URL
    GET {base}/resolve?url=<encoded>   resolve a hoster page to a file URL
"""

from __future__ import annotations

from urllib.parse import quote

# Same reserved set as JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


class ProxyEndpoint:
    """Builds proxy URLs from a configured base.

    An empty base disables proxying: :meth:`wrap` returns its input
    unchanged and :attr:`enabled` is ``False``.
    """

    def __init__(self, base_url: str = "") -> None:
        self.base_url = (base_url or "").strip().removesuffix("/")

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def wrap(self, url: str) -> str:
        """Route *url* through the rewriting proxy."""
        if not self.enabled:
            return url
        return f"{self.base_url}/?url={encode_uri_component(url)}"

    def resolve_url(self, url: str) -> str:
        """Resolve-endpoint URL for a hoster page URL."""
        return f"{self.base_url}/resolve?url={encode_uri_component(url)}"

    def is_wrapped(self, url: str) -> bool:
        return self.enabled and url.startswith(f"{self.base_url}/?url=")

    def __repr__(self) -> str:
        return f"ProxyEndpoint(base_url={self.base_url!r})"
