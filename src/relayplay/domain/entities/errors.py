"""Terminal playback failures surfaced to the caller.

Everything else (resolution failures, inconclusive probes, codec
suspicion) is absorbed as a value and only logged.
"""

from __future__ import annotations

from relayplay.domain.entities.media import (
    CandidateFailure,
    FallbackOutcome,
    MediaDescriptor,
)


class PlaybackError(Exception):
    """Base class for user-facing playback failures."""

    def __init__(self, user_message: str) -> None:
        super().__init__(user_message)
        self.user_message = user_message


class InvalidInputError(PlaybackError):
    """Raised for empty or unparseable locator text. No network activity."""


class HardBlockedSourceError(PlaybackError):
    """Raised when the source resolved but cannot be played passively."""

    def __init__(self, user_message: str, media: MediaDescriptor) -> None:
        super().__init__(user_message)
        self.media = media


class AllCandidatesFailedError(PlaybackError):
    """Raised when every fallback candidate errored or timed out."""

    def __init__(
        self,
        user_message: str,
        media: MediaDescriptor,
        outcome: FallbackOutcome,
        download_url: str | None = None,
    ) -> None:
        super().__init__(user_message)
        self.media = media
        self.outcome = outcome
        self.download_url = download_url

    @property
    def failures(self) -> tuple[CandidateFailure, ...]:
        return self.outcome.failures
