"""Tests for the store connection helpers."""

import pytest
import redis

from music_control.core.store import StoreError, connect_store, store_errors


def test_connect_store_decodes_responses():
    client = connect_store("redis://localhost:6379/0")

    assert client.get_connection_kwargs()["decode_responses"] is True


def test_connect_store_invalid_url():
    with pytest.raises(ValueError):
        connect_store("not-a-url")


def test_store_errors_translates_redis_errors():
    with pytest.raises(StoreError, match="reading queue"):
        with store_errors("reading queue"):
            raise redis.exceptions.ConnectionError("refused")


def test_store_errors_leaves_other_errors_alone():
    with pytest.raises(KeyError):
        with store_errors("reading queue"):
            raise KeyError("x")
