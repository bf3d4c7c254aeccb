"""
Stream playback domain module.

Provides the per-stream up-next queue, play history, next-track selection,
shared playback state and change events.
"""

from .events import GLOBAL_TOPIC, EventPublisher, encode_event
from .exceptions import (
    EncodingFailure,
    InvalidIndex,
    NoContentAvailable,
    StoreError,
    StreamControlError,
    UnknownTrack,
)
from .models import TrackCandidate, stream_topic
from .recency import RecencyTracker
from .selector import TrackSelector, choose_track
from .service import StreamService
from .state import StreamStateManager, parse_bool
from .upnext import UpNextQueue
