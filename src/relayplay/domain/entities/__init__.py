from .errors import (
    AllCandidatesFailedError,
    HardBlockedSourceError,
    InvalidInputError,
    PlaybackError,
)
from .media import (
    CachedMetadata,
    CandidateFailure,
    CandidateLabel,
    CandidateUrl,
    CodecAdvice,
    FallbackOutcome,
    LoadResult,
    LocatorDescriptor,
    LocatorKind,
    MediaDescriptor,
    ProviderTag,
    RangeSupport,
    ResolutionOutcome,
    ResolutionResult,
    SeekOutcome,
    SeekResult,
    SinkError,
    UnresolvedReason,
)

__all__ = [
    "AllCandidatesFailedError",
    "CachedMetadata",
    "CandidateFailure",
    "CandidateLabel",
    "CandidateUrl",
    "CodecAdvice",
    "FallbackOutcome",
    "HardBlockedSourceError",
    "InvalidInputError",
    "LoadResult",
    "LocatorDescriptor",
    "LocatorKind",
    "MediaDescriptor",
    "PlaybackError",
    "ProviderTag",
    "RangeSupport",
    "ResolutionOutcome",
    "ResolutionResult",
    "SeekOutcome",
    "SeekResult",
    "SinkError",
    "UnresolvedReason",
]
