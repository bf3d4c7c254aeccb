"""
Catalog domain models.
"""

from dataclasses import asdict, dataclass
from typing import Optional


@dataclass(frozen=True)
class Track:
    """A catalog entry.

    The playable URL is derived from the catalog root and the track id.
    """

    id: str
    title: str
    artist: str
    url: str

    def to_dict(self) -> dict:
        return asdict(self)


class UnknownTrack(Exception):
    """Raised when a track id is not in the catalog."""

    def __init__(self, track_id: str, message: Optional[str] = None):
        self.track_id = track_id
        super().__init__(message or f"no such track {track_id!r}")
