"""
Key-value store adapter.

All durable state lives in a redis-compatible store. Components never hold a
module-level client; they receive something satisfying ``Store`` through their
constructor. A ``redis.Redis`` created with ``decode_responses=True`` satisfies
the protocol directly.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Protocol

import redis
from loguru import logger


class StoreError(Exception):
    """Raised when the underlying store call fails (network, availability).

    Never retried here; retry policy belongs to the caller.
    """

    pass


class PipelineProtocol(Protocol):
    """Buffered command batch. ``execute`` sends everything in one round trip."""

    def exists(self, *names: str) -> Any: ...
    def rpush(self, name: str, *values: str) -> Any: ...
    def lpush(self, name: str, *values: str) -> Any: ...
    def lrange(self, name: str, start: int, end: int) -> Any: ...
    def lrem(self, name: str, count: int, value: str) -> Any: ...
    def ltrim(self, name: str, start: int, end: int) -> Any: ...
    def sadd(self, name: str, *values: str) -> Any: ...
    def smembers(self, name: str) -> Any: ...
    def hset(
        self,
        name: str,
        key: Optional[str] = None,
        value: Optional[str] = None,
        mapping: Optional[Mapping[str, str]] = None,
    ) -> Any: ...
    def hgetall(self, name: str) -> Any: ...
    def execute(self, raise_on_error: bool = True) -> list[Any]: ...


class Store(Protocol):
    """The subset of redis primitives the playback engine relies on."""

    def exists(self, *names: str) -> int: ...
    def rpush(self, name: str, *values: str) -> int: ...
    def lpush(self, name: str, *values: str) -> int: ...
    def lpop(self, name: str) -> Optional[str]: ...
    def lrange(self, name: str, start: int, end: int) -> list[str]: ...
    def lset(self, name: str, index: int, value: str) -> bool: ...
    def lrem(self, name: str, count: int, value: str) -> int: ...
    def ltrim(self, name: str, start: int, end: int) -> bool: ...
    def sadd(self, name: str, *values: str) -> int: ...
    def smembers(self, name: str) -> set[str]: ...
    def hset(
        self,
        name: str,
        key: Optional[str] = None,
        value: Optional[str] = None,
        mapping: Optional[Mapping[str, str]] = None,
    ) -> int: ...
    def hget(self, name: str, key: str) -> Optional[str]: ...
    def hgetall(self, name: str) -> dict[str, str]: ...
    def publish(self, channel: str, message: str) -> int: ...
    def pipeline(self, transaction: bool = True) -> PipelineProtocol: ...


def connect_store(url: str) -> redis.Redis:
    """Create a redis client for the given URL.

    Responses are decoded to ``str`` so callers never see bytes.

    Raises:
        ValueError: If the URL cannot be parsed
    """
    try:
        client = redis.Redis.from_url(url, decode_responses=True)
    except ValueError as e:
        raise ValueError(f"invalid redis URL {url!r}: {e}") from e
    logger.info("Redis client configured")
    return client


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Translate redis failures into ``StoreError``.

    Args:
        action: Short description used in the log record and error message
    """
    try:
        yield
    except redis.exceptions.RedisError as e:
        logger.error(f"Store call failed while {action}: {e}")
        raise StoreError(f"{action} failed: {e}") from e
