"""
Next-track selection for a stream.

Order of preference:
1. The head of the up-next queue (tombstones and unknown ids skipped)
2. A uniformly random catalog track that is not in the recent history
3. The least recently played track in the history, when everything in the
   catalog has been played recently
4. Nothing: the catalog and history are both empty (NoContentAvailable)

Selection never records anything as played. Players report what actually
started through a currentTrack state patch, so a candidate can be previewed
without being committed. Two players asking at the same moment may both be
offered the same random track.
"""

import random
from typing import Optional

from loguru import logger

from music_control.domain.catalog.catalog import Catalog

from .exceptions import NoContentAvailable
from .models import TrackCandidate
from .recency import RecencyTracker
from .upnext import UpNextQueue


def choose_track(
    catalog_ids: set[str], history: list[str], rng: random.Random
) -> Optional[tuple[str, str]]:
    """Pure fallback selection from catalog and history snapshots.

    Args:
        catalog_ids: Every known track id
        history: Recently played ids, most recent first
        rng: Random source

    Returns:
        (track_id, source) or None if there is nothing at all to play
    """
    available = catalog_ids - set(history)
    if available:
        # Sorted so a seeded rng picks the same track regardless of set order
        return rng.choice(sorted(available)), "random"
    if history:
        # Reuse is unavoidable; reuse the stalest track
        return history[-1], "history"
    return None


class TrackSelector:
    """Decides what a stream's players should play next."""

    def __init__(
        self,
        catalog: Catalog,
        upnext: UpNextQueue,
        recency: RecencyTracker,
        rng: Optional[random.Random] = None,
    ):
        self.catalog = catalog
        self.upnext = upnext
        self.recency = recency
        self.rng = rng or random.Random()

    def select_next(self, stream: str) -> TrackCandidate:
        """Pick the next track for a stream.

        Raises:
            NoContentAvailable: If there is genuinely nothing to play
            StoreError: If a store call fails
        """
        queued = self.upnext.dequeue_next(stream)
        if queued is not None:
            return self._candidate(queued, "upnext")

        # The library and history are expected to be small, so fetch both whole
        history = self.recency.list(stream)
        catalog_ids = self.catalog.all_ids()

        choice = choose_track(catalog_ids, history, self.rng)
        if choice is None:
            logger.warning(f"No music to play on {stream}")
            raise NoContentAvailable(stream)

        track_id, source = choice
        logger.debug(f"Selected {track_id} for {stream} ({source})")
        return self._candidate(track_id, source)

    def _candidate(self, track_id: str, source: str) -> TrackCandidate:
        return TrackCandidate(
            track_id=track_id,
            track_url=self.catalog.track_url(track_id),
            source=source,
        )
