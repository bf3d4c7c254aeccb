import asyncio
import io
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request

from music_control.core.config import Config
from music_control.domain.catalog import UnsupportedAudioError, import_upload
from music_control.domain.streams import StreamService

from ..deps import get_config, get_stream_service
from ..schemas import TrackInfo, TrackListResponse, UploadResponse

router = APIRouter()


@router.get("/tracks", response_model=TrackListResponse)
def list_tracks(service: StreamService = Depends(get_stream_service)):
    """Every track in the pool. The library is small enough to return whole."""
    tracks = service.catalog.list_tracks()
    return TrackListResponse(
        tracks={
            track_id: TrackInfo(title=track.title, artist=track.artist, url=track.url)
            for track_id, track in tracks.items()
        }
    )


@router.put("/tracks", response_model=UploadResponse)
async def upload_track(
    request: Request,
    service: StreamService = Depends(get_stream_service),
    config: Config = Depends(get_config),
):
    """Add a track from a raw audio request body."""
    body = await request.body()
    if not body:
        raise HTTPException(400, "Empty upload")

    try:
        track = await asyncio.to_thread(
            import_upload,
            io.BytesIO(body),
            service.catalog,
            service.publisher,
            Path(config.storage.media_dir),
        )
    except UnsupportedAudioError as e:
        raise HTTPException(415, f"Processing music failed: {e}")

    return UploadResponse(uuid=track.id)
