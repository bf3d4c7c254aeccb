"""
Bounded play history per stream.

The history is most-recent-first, holds each track id at most once and never
grows beyond the configured length. Random selection avoids everything in it.
"""

from typing import Optional

from music_control.core.config import DEFAULT_HISTORY_LENGTH
from music_control.core.store import PipelineProtocol, Store, store_errors

from .models import recently_played_key


class RecencyTracker:
    """Records played tracks and exposes the recent history."""

    def __init__(self, store: Store, max_length: int = DEFAULT_HISTORY_LENGTH):
        if max_length < 1:
            raise ValueError(f"max_length must be at least 1, got {max_length}")
        self.store = store
        self.max_length = max_length

    def record_played(
        self, stream: str, track_id: str, pipe: Optional[PipelineProtocol] = None
    ) -> None:
        """Move track_id to the head of the history and drop the oldest overflow.

        When pipe is given the commands are only queued on it, so the caller
        can make them part of a larger transaction. Otherwise they run as a
        transaction of their own.

        Args:
            stream: Stream name
            track_id: Track that started playing
            pipe: Optional pipeline to queue the commands on
        """
        if pipe is not None:
            self._queue_commands(pipe, stream, track_id)
            return

        with store_errors(f"recording {track_id} as played on {stream}"):
            own_pipe = self.store.pipeline(transaction=True)
            self._queue_commands(own_pipe, stream, track_id)
            own_pipe.execute()

    def list(self, stream: str) -> list[str]:
        """History, most recently played first."""
        with store_errors(f"listing {stream} history"):
            return list(self.store.lrange(recently_played_key(stream), 0, -1) or [])

    def _queue_commands(self, pipe: PipelineProtocol, stream: str, track_id: str) -> None:
        key = recently_played_key(stream)
        pipe.lrem(key, 0, track_id)
        pipe.lpush(key, track_id)
        pipe.ltrim(key, 0, self.max_length - 1)
