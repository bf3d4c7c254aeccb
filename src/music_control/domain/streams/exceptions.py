"""Stream playback exceptions for error handling."""

from typing import Optional

from music_control.core.store import StoreError
from music_control.domain.catalog.models import UnknownTrack


class StreamControlError(Exception):
    """Base exception for stream playback operations."""

    pass


class InvalidIndex(StreamControlError):
    """Raised when an up-next index is outside the current queue."""

    def __init__(self, index: int, message: Optional[str] = None):
        self.index = index
        super().__init__(message or f"no up next entry at index {index}")


class NoContentAvailable(StreamControlError):
    """Raised when neither the catalog nor the history has anything to play.

    An operational condition, not a system fault. Retrying will not help
    until tracks are added.
    """

    def __init__(self, stream: str):
        self.stream = stream
        super().__init__(f"apparently there is no music to play on {stream!r}")


class EncodingFailure(StreamControlError):
    """Raised when an event payload cannot be serialized."""

    pass


__all__ = [
    "StreamControlError",
    "UnknownTrack",
    "InvalidIndex",
    "NoContentAvailable",
    "EncodingFailure",
    "StoreError",
]
