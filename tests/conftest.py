"""Pytest configuration shared by domain and web tests.

Provides an in-memory stand-in for the redis store so the playback engine can
be exercised without a server.
"""

import json
import random
import threading
from typing import Any, Optional

import pytest
import redis

from music_control.core.config import Config, StreamsConfig
from music_control.domain.catalog import Catalog
from music_control.domain.streams import StreamService

MUSIC_ROOT = "https://music.example.com/"


class InMemoryStore:
    """Implements the Store protocol on plain dicts, lists and sets.

    Commands named in ``failing`` raise a redis ConnectionError, both when
    called directly and when they are part of a pipeline. A pipeline
    containing a failing command applies nothing, like a MULTI/EXEC that
    never reached the server.
    """

    def __init__(self):
        self.data: dict[str, Any] = {}
        self.published: list[tuple[str, str]] = []
        self.failing: set[str] = set()
        self._lock = threading.RLock()

    # Helpers

    def _check(self, command: str) -> None:
        if command in self.failing:
            raise redis.exceptions.ConnectionError(f"{command} failed: connection refused")

    def _list(self, name: str) -> list[str]:
        return self.data.setdefault(name, [])

    def _cleanup(self, name: str) -> None:
        if name in self.data and not self.data[name]:
            del self.data[name]

    @staticmethod
    def _bounds(length: int, start: int, end: int) -> tuple[int, int]:
        if start < 0:
            start = max(length + start, 0)
        if end < 0:
            end = length + end
        return start, min(end, length - 1)

    # Keys

    def exists(self, *names: str) -> int:
        self._check("exists")
        return sum(1 for name in names if self.data.get(name))

    # Lists

    def rpush(self, name: str, *values: str) -> int:
        self._check("rpush")
        with self._lock:
            items = self._list(name)
            items.extend(values)
            return len(items)

    def lpush(self, name: str, *values: str) -> int:
        self._check("lpush")
        with self._lock:
            items = self._list(name)
            for value in values:
                items.insert(0, value)
            return len(items)

    def lpop(self, name: str) -> Optional[str]:
        self._check("lpop")
        with self._lock:
            items = self.data.get(name)
            if not items:
                return None
            value = items.pop(0)
            self._cleanup(name)
            return value

    def lrange(self, name: str, start: int, end: int) -> list[str]:
        self._check("lrange")
        items = self.data.get(name, [])
        start, end = self._bounds(len(items), start, end)
        return list(items[start:end + 1])

    def lset(self, name: str, index: int, value: str) -> bool:
        self._check("lset")
        with self._lock:
            items = self.data.get(name)
            if not items:
                raise redis.exceptions.ResponseError("no such key")
            if index < 0:
                index += len(items)
            if not 0 <= index < len(items):
                raise redis.exceptions.ResponseError("index out of range")
            items[index] = value
            return True

    def lrem(self, name: str, count: int, value: str) -> int:
        self._check("lrem")
        with self._lock:
            items = self.data.get(name, [])
            kept = [item for item in items if item != value]
            removed = len(items) - len(kept)
            if name in self.data:
                self.data[name] = kept
                self._cleanup(name)
            return removed

    def ltrim(self, name: str, start: int, end: int) -> bool:
        self._check("ltrim")
        with self._lock:
            items = self.data.get(name, [])
            start, end = self._bounds(len(items), start, end)
            if name in self.data:
                self.data[name] = items[start:end + 1]
                self._cleanup(name)
            return True

    # Sets

    def sadd(self, name: str, *values: str) -> int:
        self._check("sadd")
        with self._lock:
            members = self.data.setdefault(name, set())
            before = len(members)
            members.update(values)
            return len(members) - before

    def smembers(self, name: str) -> set[str]:
        self._check("smembers")
        return set(self.data.get(name, set()))

    # Hashes

    def hset(self, name: str, key: Optional[str] = None, value: Optional[str] = None,
             mapping: Optional[dict] = None) -> int:
        self._check("hset")
        with self._lock:
            fields = self.data.setdefault(name, {})
            updates = dict(mapping or {})
            if key is not None:
                updates[key] = value
            added = len(set(updates) - set(fields))
            fields.update(updates)
            return added

    def hget(self, name: str, key: str) -> Optional[str]:
        self._check("hget")
        return self.data.get(name, {}).get(key)

    def hgetall(self, name: str) -> dict[str, str]:
        self._check("hgetall")
        return dict(self.data.get(name, {}))

    # Pub/sub

    def publish(self, channel: str, message: str) -> int:
        self._check("publish")
        self.published.append((channel, message))
        return 0

    def pipeline(self, transaction: bool = True) -> "InMemoryPipeline":
        return InMemoryPipeline(self, transaction)

    # Test helpers

    def events(self, event: Optional[str] = None) -> list[dict]:
        """Decoded published payloads, optionally filtered by event name."""
        payloads = [json.loads(message) for _, message in self.published]
        if event is None:
            return payloads
        return [payload for payload in payloads if payload.get("event") == event]


class InMemoryPipeline:
    """Buffers commands and runs them back to back under the store lock."""

    def __init__(self, store: InMemoryStore, transaction: bool):
        self.store = store
        self.transaction = transaction
        self.commands: list[tuple[str, tuple, dict]] = []

    def __getattr__(self, command: str):
        if command.startswith("_") or not hasattr(self.store, command):
            raise AttributeError(command)

        def queue(*args, **kwargs):
            self.commands.append((command, args, kwargs))
            return self

        return queue

    def execute(self, raise_on_error: bool = True) -> list[Any]:
        with self.store._lock:
            for command, _, _ in self.commands:
                self.store._check(command)
            results = []
            for command, args, kwargs in self.commands:
                try:
                    results.append(getattr(self.store, command)(*args, **kwargs))
                except redis.exceptions.ResponseError as e:
                    if raise_on_error:
                        raise
                    results.append(e)
            self.commands = []
            return results


def add_tracks(store: InMemoryStore, *track_ids: str) -> Catalog:
    """Register tracks titled after their ids."""
    catalog = Catalog(store, MUSIC_ROOT)
    for track_id in track_ids:
        catalog.add_track(track_id, f"Title {track_id}", f"Artist {track_id}")
    return catalog


@pytest.fixture
def anyio_backend() -> str:
    """The web backend runs on asyncio (uvicorn); async tests use it too."""
    return "asyncio"


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def config() -> Config:
    return Config(streams=StreamsConfig(history_length=20, music_root=MUSIC_ROOT))


@pytest.fixture
def service(store, config) -> StreamService:
    """Stream service with a seeded random source."""
    return StreamService(store, config, rng=random.Random(1234))


@pytest.fixture
def client(store, config, service, tmp_path):
    """TestClient for the API wired to the in-memory store, auth disabled."""
    from fastapi.testclient import TestClient

    from web.backend.deps import get_async_store, get_config, get_store, get_stream_service
    from web.backend.main import app

    config.storage.media_dir = str(tmp_path / "media")
    app.dependency_overrides[get_config] = lambda: config
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_async_store] = lambda: store
    app.dependency_overrides[get_stream_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
