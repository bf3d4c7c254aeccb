"""
Shared playback state for a stream.

State is a flat hash of recognized fields (currentTrack, playing, autoplay).
There is no state machine beyond the field values: every change is a
field-level write followed by an update event. A patch may carry several
fields; each is applied on its own and a failing field is logged without
affecting the others.
"""

from typing import Any, Mapping, Optional

import redis
from loguru import logger

from music_control.core.store import Store, StoreError, store_errors
from music_control.domain.catalog.catalog import Catalog, find_track

from .events import EventPublisher
from .models import AUTOPLAY, CURRENT_TRACK, PLAYING, SKIP, state_key
from .recency import RecencyTracker

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


def parse_bool(value: str) -> bool:
    """Parse a form-style boolean.

    Raises:
        ValueError: If the value is not a recognized boolean spelling
    """
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def format_bool(value: bool) -> str:
    return "true" if value else "false"


class StreamStateManager:
    """Reads and patches a stream's playback state."""

    def __init__(
        self,
        store: Store,
        catalog: Catalog,
        recency: RecencyTracker,
        publisher: EventPublisher,
    ):
        self.store = store
        self.catalog = catalog
        self.recency = recency
        self.publisher = publisher

    def get(self, stream: str) -> dict[str, Any]:
        """Current state with the current track's metadata inlined.

        The track lookup is best effort: if it fails, currentTrack is left
        out instead of failing the whole read.

        Raises:
            StoreError: If the state hash cannot be read
        """
        with store_errors(f"fetching {stream} state"):
            raw = self.store.hgetall(state_key(stream)) or {}

        state: dict[str, Any] = {}
        current = raw.get(CURRENT_TRACK)
        if current:
            track = find_track(self.catalog, current)
            if track is not None:
                state[CURRENT_TRACK] = track.to_dict()

        for key in (PLAYING, AUTOPLAY):
            if key not in raw:
                continue
            try:
                state[key] = parse_bool(raw[key])
            except ValueError:
                logger.warning(f"Ignoring malformed {key}={raw[key]!r} in {stream} state")
        return state

    def patch(self, stream: str, fields: Mapping[str, Optional[str]]) -> None:
        """Apply each field independently; failures are logged per field.

        Recognized keys:
        - currentTrack: set the track and record it as played, atomically
        - playing / autoplay: set a boolean flag
        - skip: ask the stream's players to move on (no state change)
        Anything else is ignored.
        """
        for key, value in fields.items():
            if value is None:
                continue
            try:
                self._apply(stream, key, value)
            except (StoreError, ValueError) as e:
                logger.error(f"Failed to apply {key}={value!r} to {stream}: {e}")

    def _apply(self, stream: str, key: str, value: str) -> None:
        if key == CURRENT_TRACK:
            self.set_current_track(stream, value)
        elif key in (PLAYING, AUTOPLAY):
            self.set_flag(stream, key, parse_bool(value))
        elif key == SKIP:
            self.request_skip(stream)
        else:
            logger.debug(f"Ignoring unrecognized state field {key!r} for {stream}")

    def set_current_track(self, stream: str, track_id: str) -> None:
        """Set currentTrack and record it as played in one transaction.

        Both writes go out as one MULTI/EXEC, so no reader sees one without
        the other while both succeed. EXEC does not roll back: if one command
        errors inside the transaction (WRONGTYPE on the history key, say) the
        other write stays applied. A connection failure before EXEC applies
        nothing.

        Raises:
            ValueError: If track_id is empty
            StoreError: If the transaction could not be sent or a command in
                it failed. No update event is published in either case.
        """
        if not track_id:
            raise ValueError("currentTrack cannot be empty")

        with store_errors(f"executing current track update for {stream}"):
            pipe = self.store.pipeline(transaction=True)
            pipe.hset(state_key(stream), CURRENT_TRACK, track_id)
            self.recency.record_played(stream, track_id, pipe=pipe)
            results = pipe.execute(raise_on_error=False)

        errors = [result for result in results if isinstance(result, redis.exceptions.RedisError)]
        if errors:
            raise StoreError(f"current track update for {stream} failed: {errors[0]}")

        logger.info(f"{stream} is now playing {track_id}")
        self.publisher.publish_update(stream, CURRENT_TRACK, track_id)

    def set_flag(self, stream: str, key: str, value: bool) -> None:
        encoded = format_bool(value)
        with store_errors(f"setting {key} for {stream}"):
            self.store.hset(state_key(stream), key, encoded)
        logger.info(f"{stream} {key} set to {encoded}")
        self.publisher.publish_update(stream, key, encoded)

    def request_skip(self, stream: str) -> None:
        """Hint to the stream's players to fetch a new track now.

        With several players on one stream each of them may act on it.
        """
        logger.info(f"Skip requested on {stream}")
        self.publisher.publish_skip_request(stream)
