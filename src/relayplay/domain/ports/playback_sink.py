"""Port for the media rendering surface the engine drives."""

from __future__ import annotations

import enum
from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from relayplay.domain.entities.media import SinkError


class SinkEvent(str, enum.Enum):
    """Signals a playback sink can emit while loading."""

    CAN_PLAY = "canplay"
    LOADED_DATA = "loadeddata"
    LOADED_METADATA = "loadedmetadata"
    ERROR = "error"


READY_EVENTS: tuple[SinkEvent, ...] = (
    SinkEvent.CAN_PLAY,
    SinkEvent.LOADED_DATA,
    SinkEvent.LOADED_METADATA,
)


@runtime_checkable
class PlaybackSinkPort(Protocol):
    """A media element the engine assigns URLs to and observes.

    Implementations live outside this package (browser bridge, mpv IPC,
    test doubles).  Listener callbacks are invoked on the event loop
    thread.
    """

    def assign(self, url: str) -> None:
        """Set the source URL without starting to load it."""
        ...

    def begin_load(self) -> None:
        """Start loading the assigned source."""
        ...

    def can_play(self, mime_type: str) -> bool:
        """Codec/container capability query (e.g. ``video/webm; codecs="vp9"``)."""
        ...

    def add_listener(self, event: SinkEvent, callback: Callable[[], None]) -> None: ...

    def remove_listener(
        self, event: SinkEvent, callback: Callable[[], None]
    ) -> None: ...

    @property
    def error(self) -> SinkError | None:
        """Last load error, if any."""
        ...

    @property
    def current_time(self) -> float:
        """Current playback position in seconds."""
        ...

    @property
    def duration(self) -> float | None:
        """Total duration in seconds; ``None`` while unknown."""
        ...

    def buffered(self) -> Sequence[tuple[float, float]]:
        """Currently buffered ``(start, end)`` intervals in seconds."""
        ...

    def seek(self, position: float) -> None:
        """Move the playback position."""
        ...
