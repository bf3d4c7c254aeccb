"""
Track catalog backed by the shared store.

Each track is a hash of its metadata plus membership in the track pool set.
The playback engine only reads from here; tracks are added by the upload
pipeline.
"""

from typing import Optional

from loguru import logger

from music_control.core.store import Store, StoreError, store_errors

from .models import Track, UnknownTrack

TRACK_POOL_KEY = "track-pool"
TRACK_KEY = "track:{track_id}"


def track_key(track_id: str) -> str:
    return TRACK_KEY.format(track_id=track_id)


class Catalog:
    """Lookup and registration of known tracks."""

    def __init__(self, store: Store, music_root: str):
        self.store = store
        self.music_root = music_root

    def track_url(self, track_id: str) -> str:
        return self.music_root + track_id

    def exists(self, track_id: str) -> bool:
        """Existence probe used before queueing or serving a track."""
        if not track_id:
            return False
        with store_errors(f"checking track {track_id}"):
            return self.store.exists(track_key(track_id)) > 0

    def metadata(self, track_id: str) -> Track:
        """Resolve a track id to its metadata.

        Raises:
            UnknownTrack: If the catalog has no entry for the id
            StoreError: If the store call fails
        """
        with store_errors(f"looking up track {track_id}"):
            data = self.store.hgetall(track_key(track_id))
        if not data:
            raise UnknownTrack(track_id)
        return self._to_track(track_id, data)

    def all_ids(self) -> set[str]:
        with store_errors("listing track ids"):
            return set(self.store.smembers(TRACK_POOL_KEY))

    def list_tracks(self) -> dict[str, Track]:
        """Fetch every track with its metadata in one round trip.

        The library is expected to be small enough to return whole. Tracks
        whose metadata cannot be read are logged and left out.
        """
        track_ids = sorted(self.all_ids())
        if not track_ids:
            return {}

        with store_errors("looking up track data"):
            pipe = self.store.pipeline(transaction=False)
            for track_id in track_ids:
                pipe.hgetall(track_key(track_id))
            results = pipe.execute(raise_on_error=False)

        tracks = {}
        for track_id, result in zip(track_ids, results):
            if isinstance(result, Exception):
                logger.warning(f"Couldn't look up data for track {track_id!r}: {result}")
                continue
            if not result:
                logger.warning(f"Track {track_id!r} is in the pool but has no metadata")
                continue
            tracks[track_id] = self._to_track(track_id, result)
        return tracks

    def add_track(self, track_id: str, title: str, artist: str) -> Track:
        """Register a track: metadata and pool membership in one transaction."""
        with store_errors(f"storing metadata for track {track_id}"):
            pipe = self.store.pipeline(transaction=True)
            pipe.hset(track_key(track_id), mapping={"title": title, "artist": artist})
            pipe.sadd(TRACK_POOL_KEY, track_id)
            pipe.execute()
        logger.info(f"Added track {track_id}: {title} - {artist}")
        return Track(id=track_id, title=title, artist=artist, url=self.track_url(track_id))

    def _to_track(self, track_id: str, data: dict[str, str]) -> Track:
        return Track(
            id=track_id,
            title=data.get("title", ""),
            artist=data.get("artist", ""),
            url=self.track_url(track_id),
        )


def find_track(catalog: Catalog, track_id: Optional[str]) -> Optional[Track]:
    """Best-effort metadata lookup; logs and returns None on failure."""
    if not track_id:
        return None
    try:
        return catalog.metadata(track_id)
    except UnknownTrack:
        logger.warning(f"Track {track_id!r} is not in the catalog")
    except StoreError as e:
        logger.warning(f"Couldn't look up track {track_id!r}: {e}")
    return None
