from .key_value_store import KeyValueStorePort
from .metadata import MetadataCachePort, MetadataFetcherPort
from .playback_sink import READY_EVENTS, PlaybackSinkPort, SinkEvent
from .resolution_client import ResolutionClientPort

__all__ = [
    "KeyValueStorePort",
    "MetadataCachePort",
    "MetadataFetcherPort",
    "PlaybackSinkPort",
    "READY_EVENTS",
    "ResolutionClientPort",
    "SinkEvent",
]
