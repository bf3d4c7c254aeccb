"""Tests for the bounded play history."""

import pytest

from music_control.domain.streams import RecencyTracker, StoreError


def test_history_is_most_recent_first(store):
    recency = RecencyTracker(store, max_length=5)
    for track_id in ["a", "b", "c"]:
        recency.record_played("main", track_id)

    assert recency.list("main") == ["c", "b", "a"]


def test_oldest_entry_evicted_past_max_length(store):
    """max 2: a, b, c -> [c, b]; a evicted."""
    recency = RecencyTracker(store, max_length=2)
    for track_id in ["a", "b", "c"]:
        recency.record_played("main", track_id)

    assert recency.list("main") == ["c", "b"]


def test_length_never_exceeds_max(store):
    recency = RecencyTracker(store, max_length=6)
    for i in range(50):
        recency.record_played("main", f"track-{i % 9}")
        assert len(recency.list("main")) <= 6


def test_recording_same_track_twice_is_idempotent(store):
    recency = RecencyTracker(store, max_length=5)
    recency.record_played("main", "a")
    recency.record_played("main", "b")
    recency.record_played("main", "b")

    assert recency.list("main") == ["b", "a"]


def test_replayed_track_moves_to_head(store):
    """Reinsertion removes the earlier occurrence instead of duplicating it."""
    recency = RecencyTracker(store, max_length=3)
    for track_id in ["a", "b", "c", "a"]:
        recency.record_played("main", track_id)

    assert recency.list("main") == ["a", "c", "b"]


def test_empty_history(store):
    assert RecencyTracker(store).list("main") == []


def test_default_max_length_is_twenty(store):
    recency = RecencyTracker(store)
    for i in range(25):
        recency.record_played("main", str(i))

    history = recency.list("main")
    assert len(history) == 20
    assert history[0] == "24"
    assert history[-1] == "5"


def test_record_on_caller_pipeline_waits_for_execute(store):
    recency = RecencyTracker(store, max_length=5)
    pipe = store.pipeline(transaction=True)

    recency.record_played("main", "a", pipe=pipe)
    assert recency.list("main") == []

    pipe.execute()
    assert recency.list("main") == ["a"]


def test_record_failure_applies_nothing(store):
    recency = RecencyTracker(store, max_length=5)
    recency.record_played("main", "a")
    store.failing.add("ltrim")

    with pytest.raises(StoreError):
        recency.record_played("main", "b")

    store.failing.clear()
    assert recency.list("main") == ["a"]


@pytest.mark.parametrize("max_length", [0, -3])
def test_invalid_max_length(store, max_length):
    with pytest.raises(ValueError):
        RecencyTracker(store, max_length=max_length)
