import secrets
from functools import lru_cache
from typing import Optional

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from music_control.core.config import Config, load_config
from music_control.core.store import Store, connect_store
from music_control.domain.streams import StreamService

basic_auth = HTTPBasic(auto_error=False)


@lru_cache
def get_config() -> Config:
    """FastAPI dependency for configuration."""
    return load_config()


@lru_cache
def _store_for(url: str) -> Store:
    return connect_store(url)


def get_store(config: Config = Depends(get_config)) -> Store:
    """FastAPI dependency for the shared redis client."""
    return _store_for(config.redis.url)


@lru_cache
def _async_store_for(url: str) -> aioredis.Redis:
    return aioredis.Redis.from_url(url, decode_responses=True)


def get_async_store(config: Config = Depends(get_config)) -> aioredis.Redis:
    """FastAPI dependency for the asyncio redis client used by pub/sub relays."""
    return _async_store_for(config.redis.url)


def get_stream_service(
    store: Store = Depends(get_store), config: Config = Depends(get_config)
) -> StreamService:
    """FastAPI dependency for stream operations. Cheap: holds no state."""
    return StreamService(store, config)


def require_auth(
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
    config: Config = Depends(get_config),
) -> None:
    """HTTP basic auth against the configured password (any user name).

    Disabled when no password is configured.
    """
    password = config.web.password
    if not password:
        return
    if credentials is None or not secrets.compare_digest(
        credentials.password.encode("utf-8"), password.encode("utf-8")
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorised.",
            headers={"WWW-Authenticate": f'Basic realm="{config.web.realm}"'},
        )
