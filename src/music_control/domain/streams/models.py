"""
Stream domain models.

Contains the selection result type and the store key layout used per
stream.
"""

from dataclasses import dataclass
from typing import Literal, Optional

# Store keys, one instance per stream
UP_NEXT_KEY = "upnext-{stream}"
RECENTLY_PLAYED_KEY = "recent-{stream}"
STATE_KEY = "state-{stream}"
EVENTS_TOPIC = "events-{stream}"

# Tombstoned up-next slots are stored as empty strings
TOMBSTONE = ""

# Recognized state hash fields
CURRENT_TRACK = "currentTrack"
PLAYING = "playing"
AUTOPLAY = "autoplay"
SKIP = "skip"

SelectionSource = Literal["upnext", "random", "history"]


def up_next_key(stream: str) -> str:
    return UP_NEXT_KEY.format(stream=stream)


def recently_played_key(stream: str) -> str:
    return RECENTLY_PLAYED_KEY.format(stream=stream)


def state_key(stream: str) -> str:
    return STATE_KEY.format(stream=stream)


def stream_topic(stream: str) -> str:
    return EVENTS_TOPIC.format(stream=stream)


def slot_from_store(value: str) -> Optional[str]:
    """Up-next slot as seen by callers: track id, or None for a tombstone."""
    return value if value != TOMBSTONE else None


def slot_to_wire(slot: Optional[str]) -> str:
    """Tombstones are rendered as empty entries in events and responses."""
    return slot if slot is not None else TOMBSTONE


@dataclass(frozen=True)
class TrackCandidate:
    """The track offered to a player in answer to "what plays next?".

    Offering a candidate commits nothing; the player reports it back through
    a ``currentTrack`` state patch once it actually starts playing.
    """

    track_id: str
    track_url: str
    source: SelectionSource
