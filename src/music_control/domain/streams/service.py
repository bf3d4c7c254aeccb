"""
Stream playback service.

Wires the queue, history, selector, state and event components around one
store. Holds no state of its own between calls, so a single instance can serve
every request.
"""

import random
from typing import Any, Mapping, Optional

from music_control.core.config import Config
from music_control.core.store import Store
from music_control.domain.catalog.catalog import Catalog

from .events import EventPublisher
from .models import TrackCandidate
from .recency import RecencyTracker
from .selector import TrackSelector
from .state import StreamStateManager
from .upnext import UpNextQueue


class StreamService:
    """Operations available to players and operators of every stream."""

    def __init__(self, store: Store, config: Config, rng: Optional[random.Random] = None):
        self.store = store
        self.publisher = EventPublisher(store)
        self.catalog = Catalog(store, config.streams.music_root)
        self.recency = RecencyTracker(store, config.streams.history_length)
        self.upnext = UpNextQueue(store, self.catalog, self.publisher)
        self.selector = TrackSelector(self.catalog, self.upnext, self.recency, rng=rng)
        self.state = StreamStateManager(store, self.catalog, self.recency, self.publisher)

    def enqueue_track(self, stream: str, track_id: str) -> None:
        self.upnext.enqueue(stream, track_id)

    def list_queue(self, stream: str) -> list[Optional[str]]:
        return self.upnext.list(stream)

    def remove_queue_entry(self, stream: str, index: int) -> None:
        self.upnext.remove_at(stream, index)

    def next_track(self, stream: str) -> TrackCandidate:
        return self.selector.select_next(stream)

    def get_state(self, stream: str) -> dict[str, Any]:
        return self.state.get(stream)

    def patch_state(self, stream: str, fields: Mapping[str, Optional[str]]) -> None:
        self.state.patch(stream, fields)

    def history(self, stream: str) -> list[str]:
        return self.recency.list(stream)
