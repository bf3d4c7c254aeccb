"""
Manually curated up-next queue for a stream.

Operators hold indices from a previous listing, so entries are never physically
removed from the middle of the queue. Removing an entry overwrites its slot
with a tombstone; only the head of the queue is ever popped. The remaining
caveat is that a pop from the head (end of a track) shifts every index by one.
"""

from typing import Optional

import redis
from loguru import logger

from music_control.core.store import Store, StoreError, store_errors
from music_control.domain.catalog.catalog import Catalog

from .events import EventPublisher
from .exceptions import InvalidIndex, UnknownTrack
from .models import TOMBSTONE, slot_from_store, up_next_key


class UpNextQueue:
    """Per-stream ordered list of pending track ids and tombstones."""

    def __init__(self, store: Store, catalog: Catalog, publisher: EventPublisher):
        self.store = store
        self.catalog = catalog
        self.publisher = publisher

    def enqueue(self, stream: str, track_id: str) -> None:
        """Append a track to the tail of the queue.

        Raises:
            UnknownTrack: If the catalog does not know the track
            StoreError: If the store call fails
        """
        if not self.catalog.exists(track_id):
            raise UnknownTrack(track_id)
        with store_errors(f"pushing track onto {stream} up next"):
            self.store.rpush(up_next_key(stream), track_id)
        logger.info(f"Queued {track_id} on {stream}")
        self._publish_snapshot(stream)

    def list(self, stream: str) -> list[Optional[str]]:
        """Current slots in order; tombstones are None.

        An empty or never-used queue is an empty list.
        """
        with store_errors(f"listing {stream} up next"):
            values = self.store.lrange(up_next_key(stream), 0, -1)
        return [slot_from_store(value) for value in values or []]

    def remove_at(self, stream: str, index: int) -> None:
        """Tombstone the slot at index without shifting any other slot.

        Raises:
            InvalidIndex: If index is outside the current queue
            StoreError: If the store call fails
        """
        # The store would read a negative index from the tail
        if index < 0:
            raise InvalidIndex(index)
        with store_errors(f"removing {stream} up next entry {index}"):
            try:
                self.store.lset(up_next_key(stream), index, TOMBSTONE)
            except redis.exceptions.ResponseError as e:
                # LSET rejects out of range indices (and missing keys) atomically
                raise InvalidIndex(
                    index, f"failed to remove up next entry at index {index}: {e}"
                ) from e
        logger.info(f"Removed up next entry {index} on {stream}")
        self._publish_snapshot(stream)

    def dequeue_next(self, stream: str) -> Optional[str]:
        """Pop from the head until a playable track id turns up.

        Tombstones and ids the catalog no longer knows are consumed silently.
        Each pop is a single atomic LPOP, so concurrent callers never receive
        the same slot.

        Returns:
            The track id, or None once the queue is exhausted

        Raises:
            StoreError: If a store call fails. A track popped before its
                catalog lookup failed is put back at the head first.
        """
        key = up_next_key(stream)
        consumed = 0
        found = None
        while True:
            with store_errors(f"popping {stream} up next"):
                value = self.store.lpop(key)
            if value is None:
                break
            consumed += 1
            if value == TOMBSTONE:
                continue
            try:
                known = self.catalog.exists(value)
            except StoreError:
                self._requeue(stream, value)
                if consumed > 1:
                    self._publish_snapshot(stream)
                raise
            if not known:
                logger.warning(f"Dropping unknown track {value!r} from {stream} up next")
                continue
            found = value
            break

        if consumed:
            self._publish_snapshot(stream)
        return found

    def _requeue(self, stream: str, track_id: str) -> None:
        """Put a popped track back at the head after a failed lookup."""
        try:
            self.store.lpush(up_next_key(stream), track_id)
        except redis.exceptions.RedisError as e:
            logger.error(f"Lost up next entry {track_id!r} on {stream}: {e}")

    def _publish_snapshot(self, stream: str) -> None:
        try:
            slots = self.list(stream)
        except StoreError as e:
            # The mutation already succeeded; the snapshot event is best effort
            logger.error(f"Failed to read {stream} up next for update event: {e}")
            return
        self.publisher.publish_up_next(stream, slots)
