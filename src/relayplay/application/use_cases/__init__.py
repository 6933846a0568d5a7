from .playback import PlaybackDriver

__all__ = ["PlaybackDriver"]
