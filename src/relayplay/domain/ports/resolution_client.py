"""Port for the external resolve endpoint."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from relayplay.domain.entities.media import ResolutionOutcome


@runtime_checkable
class ResolutionClientPort(Protocol):
    """Turns a hoster page URL into a directly fetchable URL.

    Never raises for remote failures: every failure is reported as an
    unresolved :class:`ResolutionOutcome` with a reason.
    """

    async def resolve(self, url: str) -> ResolutionOutcome: ...
