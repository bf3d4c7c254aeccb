"""
Stream playback API endpoints.

Players call /next when a track ends and report what they started through a
currentTrack state patch. Operators manage the up-next queue and state.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from loguru import logger

from music_control.domain.streams import (
    InvalidIndex,
    NoContentAvailable,
    StreamService,
    UnknownTrack,
)
from music_control.domain.streams.models import slot_to_wire
from music_control.domain.streams.state import format_bool

from ..deps import get_stream_service
from ..schemas import (
    EnqueueRequest,
    HistoryResponse,
    NextTrackResponse,
    StateResponse,
    StatusResponse,
    UpNextResponse,
)

router = APIRouter(prefix="/streams", tags=["streams"])

# Teapot: there is no music at all, which is not a server fault
NO_CONTENT_STATUS = 418


def patch_value(value: Any) -> Optional[str]:
    """Flatten a JSON patch value to the string form the state manager takes."""
    if value is None:
        return None
    if isinstance(value, bool):
        return format_bool(value)
    return str(value)


@router.get("/{stream}/next", response_model=NextTrackResponse)
def next_track(stream: str, service: StreamService = Depends(get_stream_service)):
    """Track the stream should play next (up next first, then random)."""
    try:
        candidate = service.next_track(stream)
    except NoContentAvailable as e:
        raise HTTPException(NO_CONTENT_STATUS, str(e))

    return NextTrackResponse(
        track_id=candidate.track_id,
        track_url=candidate.track_url,
        source=candidate.source,
    )


@router.get("/{stream}/upnext", response_model=UpNextResponse)
def get_up_next(stream: str, service: StreamService = Depends(get_stream_service)):
    slots = service.list_queue(stream)
    return UpNextResponse(up_next=[slot_to_wire(slot) for slot in slots])


@router.put("/{stream}/upnext", response_model=StatusResponse)
def enqueue(
    stream: str,
    request: EnqueueRequest,
    service: StreamService = Depends(get_stream_service),
):
    """Append a catalog track to the stream's up-next queue."""
    try:
        service.enqueue_track(stream, request.track_id)
    except UnknownTrack as e:
        raise HTTPException(424, str(e))
    return StatusResponse()


@router.delete("/{stream}/upnext/{index}", response_model=StatusResponse)
def remove_up_next_entry(
    stream: str, index: int, service: StreamService = Depends(get_stream_service)
):
    """Remove the entry at index without shifting the others."""
    try:
        service.remove_queue_entry(stream, index)
    except InvalidIndex as e:
        raise HTTPException(400, str(e))
    return StatusResponse()


@router.get("/{stream}/state", response_model=StateResponse)
def get_state(stream: str, service: StreamService = Depends(get_stream_service)):
    return StateResponse(state=service.get_state(stream))


@router.patch("/{stream}/state", response_model=StatusResponse)
def patch_state(
    stream: str,
    fields: dict[str, Any] = Body(...),
    service: StreamService = Depends(get_stream_service),
):
    """Patch state fields (currentTrack, playing, autoplay) or request a skip.

    Fields are applied independently. A field that fails is logged and does
    not fail the request.
    """
    logger.debug(f"State patch for {stream}: {sorted(fields)}")
    service.patch_state(stream, {key: patch_value(value) for key, value in fields.items()})
    return StatusResponse()


@router.get("/{stream}/history", response_model=HistoryResponse)
def get_history(stream: str, service: StreamService = Depends(get_stream_service)):
    return HistoryResponse(history=service.history(stream))
