"""
Upload pipeline: tag extraction, media storage and catalog registration.
"""

import shutil
import tempfile
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from loguru import logger

from .catalog import Catalog
from .metadata import read_audio_tags
from .models import Track

# Avoid circular import
if TYPE_CHECKING:
    from music_control.domain.streams.events import EventPublisher


def import_upload(
    source: BinaryIO,
    catalog: Catalog,
    publisher: "EventPublisher",
    media_dir: Path,
) -> Track:
    """Store an uploaded audio file and add it to the track pool.

    The file is buffered to a temporary file so it can be parsed, then copied
    into the media directory under its new id. Track URLs are the music root
    plus the id, so the stored file has no extension.

    Args:
        source: Readable binary stream with the audio data
        catalog: Catalog to register the track in
        publisher: Publisher for the poolTrackAdded announcement
        media_dir: Directory served at the music root

    Returns:
        The newly registered track

    Raises:
        UnsupportedAudioError: If the upload is not an accepted audio format
        StoreError: If the file was stored but metadata storage failed
    """
    with tempfile.NamedTemporaryFile(prefix="tmpmusic") as buffered:
        shutil.copyfileobj(source, buffered)
        buffered.flush()

        tags = read_audio_tags(Path(buffered.name))
        logger.info(f"Adding {tags.title} - {tags.artist} ({tags.mime_type})...")

        track_id = str(uuid.uuid4())
        media_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(buffered.name, media_dir / track_id)

    track = catalog.add_track(track_id, tags.title, tags.artist)
    publisher.publish_pool_track_added(track.id, track.title, track.artist)
    return track
