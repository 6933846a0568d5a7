"""Resolution: proxy endpoint helpers, resolve client, resolve cycle."""

from __future__ import annotations

from .media_resolver import MediaResolver
from .proxy import ProxyEndpoint
from .resolve_client import HttpxResolutionClient

__all__ = ["HttpxResolutionClient", "MediaResolver", "ProxyEndpoint"]
