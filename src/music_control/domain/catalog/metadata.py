"""
Audio tag extraction for uploaded tracks using Mutagen.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mutagen import File as MutagenFile
from mutagen import MutagenError
from mutagen.mp3 import MP3
from mutagen.mp4 import MP4
from mutagen.oggopus import OggOpus


class UnsupportedAudioError(Exception):
    """Raised when an upload is not an audio format players can stream."""

    pass


# Content types the media host should serve each accepted container with
MIME_TYPES: list[tuple[type, str]] = [
    (MP3, "audio/mpeg"),
    (MP4, "audio/aac"),
    (OggOpus, "audio/ogg"),
]


@dataclass(frozen=True)
class AudioTags:
    title: str
    artist: str
    mime_type: str


def get_tag_value(audio_file: MutagenFile, tag_names: list[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    if audio_file.tags is None:
        return None
    for tag_name in tag_names:
        try:
            value = audio_file.tags.get(tag_name)
        except (KeyError, ValueError):
            # Some formats (like Vorbis) raise ValueError for non-existent keys
            continue
        if value:
            if isinstance(value, list):
                return str(value[0])
            return str(value)
    return None


def read_audio_tags(path: Path) -> AudioTags:
    """Read title and artist from an audio file.

    Raises:
        UnsupportedAudioError: If the file cannot be parsed or is not an
            accepted format
    """
    try:
        audio_file = MutagenFile(path)
    except MutagenError as e:
        raise UnsupportedAudioError(f"couldn't parse file: {e}") from e

    if audio_file is None:
        raise UnsupportedAudioError("couldn't parse file: unrecognized audio format")

    mime_type = next(
        (mime for kind, mime in MIME_TYPES if isinstance(audio_file, kind)), None
    )
    if mime_type is None:
        raise UnsupportedAudioError(f"not a media type: {type(audio_file).__name__}")

    # ID3 (MP3), MP4 and Opus comment names
    title = get_tag_value(audio_file, ["TIT2", "\xa9nam", "title", "TITLE"]) or ""
    artist = get_tag_value(audio_file, ["TPE1", "\xa9ART", "artist", "ARTIST"]) or ""
    return AudioTags(title=title, artist=artist, mime_type=mime_type)
