from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire format uses camelCase keys, matching the event payloads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StatusResponse(CamelModel):
    status: str = "ok"


class NextTrackResponse(CamelModel):
    status: str = "ok"
    track_id: str
    track_url: str
    source: Literal["upnext", "random", "history"]


class UpNextResponse(CamelModel):
    status: str = "ok"
    up_next: list[str]  # Tombstoned slots are empty strings


class EnqueueRequest(CamelModel):
    track_id: str


class StateResponse(CamelModel):
    status: str = "ok"
    state: dict[str, Any]


class HistoryResponse(CamelModel):
    status: str = "ok"
    history: list[str]  # Most recently played first


class TrackInfo(CamelModel):
    title: str
    artist: str
    url: str


class TrackListResponse(CamelModel):
    tracks: dict[str, TrackInfo]


class UploadResponse(CamelModel):
    status: str = "ok"
    uuid: str
