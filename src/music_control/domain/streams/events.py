"""
Change notifications for streams.

Every mutation of a stream's queue or state is announced on the stream's topic.
Publishing is fire-and-forget: there is no acknowledgement, persistence or
replay, and a subscriber that connects later never sees earlier messages.
Delivery to subscribers is handled elsewhere (see the events relay endpoint).
"""

import json
from typing import Any, Optional

import redis
from loguru import logger

from music_control.core.store import Store

from .exceptions import EncodingFailure
from .models import slot_to_wire, stream_topic

# Catalog-wide notifications (new tracks) go here rather than to a stream topic
GLOBAL_TOPIC = "events"


def encode_event(payload: dict[str, Any]) -> str:
    """Serialize an event payload.

    Raises:
        EncodingFailure: If the payload is not JSON serializable
    """
    try:
        return json.dumps(payload)
    except (TypeError, ValueError) as e:
        raise EncodingFailure(f"failed to marshal json: {e}") from e


class EventPublisher:
    """One-directional sink for stream events."""

    def __init__(self, store: Store):
        self.store = store

    def publish(self, topic: str, payload: dict[str, Any]) -> bool:
        """Broadcast a payload on a topic.

        Failures are logged and never raised; the mutation that triggered the
        event has already succeeded on its own.

        Returns:
            True if the store accepted the message
        """
        try:
            message = encode_event(payload)
        except EncodingFailure as e:
            logger.error(f"Dropping {payload.get('event')} event for {topic}: {e}")
            return False

        try:
            self.store.publish(topic, message)
        except redis.exceptions.RedisError as e:
            logger.error(f"Failed to publish {payload.get('event')} event to {topic}: {e}")
            return False
        return True

    def publish_update(self, stream: str, key: str, value: str) -> bool:
        return self.publish(
            stream_topic(stream),
            {"event": "update", "stream": stream, "key": key, "value": value},
        )

    def publish_up_next(self, stream: str, slots: list[Optional[str]]) -> bool:
        return self.publish(
            stream_topic(stream),
            {
                "event": "updateUpNext",
                "stream": stream,
                "upNext": [slot_to_wire(slot) for slot in slots],
            },
        )

    def publish_skip_request(self, stream: str) -> bool:
        return self.publish(
            stream_topic(stream), {"event": "requestSkip", "stream": stream}
        )

    def publish_pool_track_added(self, track_id: str, title: str, artist: str) -> bool:
        return self.publish(
            GLOBAL_TOPIC,
            {
                "event": "poolTrackAdded",
                "trackId": track_id,
                "title": title,
                "artist": artist,
            },
        )
