"""
Track catalog domain module.

Known tracks, their metadata and the upload pipeline that adds to them.
"""

from .catalog import TRACK_POOL_KEY, Catalog, find_track, track_key
from .models import Track, UnknownTrack
from .metadata import AudioTags, UnsupportedAudioError, read_audio_tags
from .upload import import_upload
