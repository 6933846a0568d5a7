"""Safe-seek guard.

Long-distance seeks on servers that ignore ``Range`` requests silently
restart the stream from byte zero.  When range support is not
confirmed, the guard seeks speculatively, checks after a grace period
that the position landed near the target, and otherwise reverts.
"""

from __future__ import annotations

import asyncio

import structlog

from relayplay.domain.entities.media import RangeSupport, SeekOutcome, SeekResult
from relayplay.domain.ports.playback_sink import PlaybackSinkPort

log = structlog.get_logger(__name__)

DEFAULT_GRACE_SECONDS = 0.9
DEFAULT_TOLERANCE_SECONDS = 2.0

SEEK_NOT_SUPPORTED_NOTICE = (
    "The server does not support long-distance seeking. "
    "Wait for the video to buffer, or download it first."
)


def clamp(target: float, duration: float | None) -> float:
    upper = duration if duration and duration > 0 else None
    position = max(0.0, target)
    if upper is not None:
        position = min(position, upper)
    return position


def buffered_contains(
    intervals: list[tuple[float, float]] | tuple[tuple[float, float], ...],
    position: float,
) -> bool:
    return any(start <= position <= end for start, end in intervals)


class SafeSeekGuard:
    """Verify-and-revert seek policy for one playback sink.

    ``range_support`` is updated by the playback driver after each load.
    """

    def __init__(
        self,
        sink: PlaybackSinkPort,
        *,
        grace_seconds: float = DEFAULT_GRACE_SECONDS,
        tolerance_seconds: float = DEFAULT_TOLERANCE_SECONDS,
        range_support: RangeSupport = RangeSupport.UNKNOWN,
    ) -> None:
        self._sink = sink
        self._grace = grace_seconds
        self._tolerance = tolerance_seconds
        self.range_support = range_support

    async def seek(self, target: float) -> SeekResult:
        duration = self._sink.duration
        if duration is None or duration <= 0:
            log.debug("seek_ignored_unknown_duration", target=target)
            return SeekResult(outcome=SeekOutcome.IGNORED, target=target)

        position = clamp(target, duration)
        if self.range_support is RangeSupport.SUPPORTED or buffered_contains(
            list(self._sink.buffered()), position
        ):
            self._sink.seek(position)
            return SeekResult(outcome=SeekOutcome.DIRECT, target=position)

        before = self._sink.current_time
        self._sink.seek(position)
        await asyncio.sleep(self._grace)

        landed = abs(self._sink.current_time - position) <= self._tolerance
        if (
            landed
            or buffered_contains(list(self._sink.buffered()), position)
            or self.range_support is RangeSupport.SUPPORTED
        ):
            return SeekResult(
                outcome=SeekOutcome.LANDED, target=position, position_before=before
            )

        log.info(
            "seek_reverted",
            target=position,
            landed_at=self._sink.current_time,
            reverted_to=before,
        )
        self._sink.seek(before)
        return SeekResult(
            outcome=SeekOutcome.REVERTED,
            target=position,
            position_before=before,
            notice=SEEK_NOT_SUPPORTED_NOTICE,
        )
