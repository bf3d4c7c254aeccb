"""
Server-sent events relay.

Subscribes to the requested topic patterns and forwards every published
message as a ``data:`` frame. Nothing is buffered for clients that are not
connected; a comment ping keeps idle connections (and proxies) alive.
"""

import asyncio
from typing import Any, AsyncIterator

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from loguru import logger

from music_control.core.config import Config

from ..deps import get_async_store, get_config

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_message(data: Any) -> str:
    """Wrap a published payload in an SSE data frame."""
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    return f"data: {data}\n\n"


def parse_channels(channels: str) -> list[str]:
    return [channel.strip() for channel in channels.split(",") if channel.strip()]


async def relay_events(
    pubsub: Any, channels: list[str], ping_interval: float
) -> AsyncIterator[str]:
    """Yield SSE frames for messages on the given patterns until cancelled.

    Args:
        pubsub: redis.asyncio PubSub (or compatible) object
        channels: Topic patterns to subscribe to
        ping_interval: Seconds of silence before a keep-alive comment
    """
    await pubsub.psubscribe(*channels)
    try:
        yield ": hello\n\n"
        loop = asyncio.get_running_loop()
        next_ping = loop.time() + ping_interval
        while True:
            timeout = max(0.0, next_ping - loop.time())
            message = await pubsub.get_message(
                ignore_subscribe_messages=True, timeout=timeout
            )
            if message is not None:
                yield format_message(message["data"])
                continue
            if loop.time() >= next_ping:
                next_ping = loop.time() + ping_interval
                yield ": ping\n\n"
    finally:
        await pubsub.punsubscribe()
        await pubsub.aclose()


@router.get("/events")
async def events(
    channels: str = "",
    store: aioredis.Redis = Depends(get_async_store),
    config: Config = Depends(get_config),
):
    """Stream messages from comma separated topic patterns, e.g. events-main,events."""
    patterns = parse_channels(channels)
    if not patterns:
        raise HTTPException(400, "channels is required")

    logger.info(f"Event subscriber connected: {patterns}")
    return StreamingResponse(
        relay_events(store.pubsub(), patterns, config.web.ping_interval_seconds),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
