"""Tests for the store-backed track catalog."""

import pytest

from conftest import MUSIC_ROOT, add_tracks
from music_control.core.store import StoreError
from music_control.domain.catalog import TRACK_POOL_KEY, Catalog, Track, UnknownTrack, find_track, track_key
from music_control.domain.streams import InvalidIndex


class TestLookup:
    """Test existence checks and metadata lookup."""

    def test_exists(self, store):
        catalog = add_tracks(store, "a")

        assert catalog.exists("a") is True
        assert catalog.exists("b") is False

    def test_empty_id_never_exists(self, store):
        """Test an empty id is rejected without touching the store."""
        store.failing.add("exists")

        assert Catalog(store, MUSIC_ROOT).exists("") is False

    def test_exists_store_failure(self, store):
        store.failing.add("exists")

        with pytest.raises(StoreError):
            Catalog(store, MUSIC_ROOT).exists("a")

    def test_metadata(self, store):
        catalog = add_tracks(store, "a")

        assert catalog.metadata("a") == Track(
            id="a", title="Title a", artist="Artist a", url=MUSIC_ROOT + "a"
        )

    def test_metadata_unknown_track(self, store):
        with pytest.raises(UnknownTrack) as exc_info:
            Catalog(store, MUSIC_ROOT).metadata("missing")

        assert exc_info.value.track_id == "missing"

    def test_track_url_is_root_plus_id(self, store):
        assert Catalog(store, "http://media/").track_url("abc") == "http://media/abc"

    def test_find_track_is_best_effort(self, store):
        catalog = add_tracks(store, "a")

        assert find_track(catalog, "a").title == "Title a"
        assert find_track(catalog, "missing") is None
        assert find_track(catalog, None) is None

        store.failing.add("hgetall")
        assert find_track(catalog, "a") is None


class TestListing:
    """Test listing the whole pool."""

    def test_all_ids(self, store):
        catalog = add_tracks(store, "a", "b")

        assert catalog.all_ids() == {"a", "b"}

    def test_list_tracks(self, store):
        catalog = add_tracks(store, "b", "a")

        tracks = catalog.list_tracks()

        assert list(tracks) == ["a", "b"]
        assert tracks["b"].artist == "Artist b"

    def test_list_tracks_empty(self, store):
        assert Catalog(store, MUSIC_ROOT).list_tracks() == {}

    def test_list_tracks_skips_entries_without_metadata(self, store):
        catalog = add_tracks(store, "a")
        store.sadd(TRACK_POOL_KEY, "orphan")

        assert list(catalog.list_tracks()) == ["a"]

    def test_list_tracks_store_failure(self, store):
        catalog = add_tracks(store, "a")
        store.failing.add("smembers")

        with pytest.raises(StoreError):
            catalog.list_tracks()


class TestAddTrack:
    """Test registering tracks."""

    def test_add_track_writes_metadata_and_pool(self, store):
        track = Catalog(store, MUSIC_ROOT).add_track("n1", "Song", "Band")

        assert track.url == MUSIC_ROOT + "n1"
        assert store.hgetall(track_key("n1")) == {"title": "Song", "artist": "Band"}
        assert "n1" in store.smembers(TRACK_POOL_KEY)

    def test_add_track_failure_applies_nothing(self, store):
        store.failing.add("sadd")

        with pytest.raises(StoreError):
            Catalog(store, MUSIC_ROOT).add_track("n1", "Song", "Band")

        assert store.data == {}


class TestErrors:
    """Test error messages."""

    def test_unknown_track_default_message(self):
        assert str(UnknownTrack("abc")) == "no such track 'abc'"

    def test_unknown_track_custom_message(self):
        assert str(UnknownTrack("abc", "gone")) == "gone"

    def test_invalid_index_messages(self):
        assert str(InvalidIndex(3)) == "no up next entry at index 3"
        assert str(InvalidIndex(3, "out of range")) == "out of range"
