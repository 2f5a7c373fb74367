"""Tests for FileStore and the TTL tag cache."""

import json

import pytest

from committagger.domain import RepositoryKey
from committagger.infra import FileStore, TagCache

SHA_A = "a" * 40
KEY = RepositoryKey("octo", "hello")


class FakeClock:
    def __init__(self, now_ms: int = 1_000_000):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


@pytest.fixture
def store(tmp_path):
    return FileStore(tmp_path / "cache.json")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(store, clock):
    return TagCache(store, ttl_seconds=60, key_prefix="tag_cache_", clock=clock)


class TestFileStore:
    """Tests for FileStore persistence."""

    def test_creates_file(self, tmp_path):
        path = tmp_path / "nested" / "store.json"
        FileStore(path)
        assert json.loads(path.read_text()) == {}

    def test_set_get_persists(self, tmp_path):
        path = tmp_path / "store.json"
        FileStore(path).set("k", {"v": 1})
        assert FileStore(path).get("k") == {"v": 1}

    def test_delete(self, store):
        store.set("k", 1)
        assert store.delete("k")
        assert not store.delete("k")
        assert "k" not in store

    def test_delete_many(self, store):
        store.set("a", 1)
        store.set("b", 2)
        store.set("c", 3)
        assert store.delete_many(["a", "c", "missing"]) == 2
        assert store.keys() == ["b"]

    def test_pop_if(self, store):
        store.set("k", 5)
        assert not store.pop_if("k", lambda v: v > 10)
        assert store.pop_if("k", lambda v: v == 5)
        assert store.get("k") is None

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json")
        assert FileStore(path, auto_create=False).read() == {}

    def test_undecodable_file_reads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_bytes(b'\xff\xfe\x00garbage')
        store = FileStore(path, auto_create=False)
        assert store.read() == {}
        store.set("k", 1)
        assert FileStore(path).get("k") == 1


class TestTagCache:
    """Tests for TagCache TTL semantics."""

    def test_round_trip_within_ttl(self, cache, clock):
        cache.set(KEY, {SHA_A: ["v1.0"]})
        clock.advance(60)
        assert cache.get(KEY) == {SHA_A: ["v1.0"]}

    def test_expired_entry_is_miss_and_removed(self, cache, clock, store):
        cache.set(KEY, {SHA_A: ["v1.0"]})
        clock.advance(61)
        assert cache.get(KEY) is None
        assert "tag_cache_octo/hello" not in store

    def test_eviction_is_persisted(self, cache, clock, store):
        cache.set(KEY, {SHA_A: ["v1.0"]})
        clock.advance(120)
        cache.get(KEY)
        reopened = FileStore(store.path)
        assert reopened.get("tag_cache_octo/hello") is None

    def test_persisted_layout(self, cache, clock, store):
        cache.set(KEY, {SHA_A: ["v1.0"]})
        raw = json.loads(store.path.read_text())
        assert raw == {"tag_cache_octo/hello": {"data": {SHA_A: ["v1.0"]}, "timestamp": clock.now_ms}}

    def test_set_replaces_whole_entry(self, cache, clock):
        cache.set(KEY, {SHA_A: ["v1.0"]})
        clock.advance(50)
        cache.set(KEY, {"b" * 40: ["v2.0"]})
        clock.advance(50)
        # Timestamp was refreshed by the second write
        assert cache.get(KEY) == {"b" * 40: ["v2.0"]}

    def test_miss(self, cache):
        assert cache.get(KEY) is None

    def test_corrupt_entry_is_evicted(self, cache, store):
        store.set("tag_cache_octo/hello", "garbage")
        assert cache.get(KEY) is None
        assert "tag_cache_octo/hello" not in store

    def test_invalidate(self, cache):
        cache.set(KEY, {SHA_A: ["v1.0"]})
        assert cache.invalidate(KEY)
        assert cache.get(KEY) is None
        assert not cache.invalidate(KEY)

    def test_invalidate_all_only_touches_prefix(self, cache, store):
        cache.set(KEY, {SHA_A: ["v1.0"]})
        cache.set(RepositoryKey("octo", "other"), {SHA_A: ["v2.0"]})
        store.set("unrelated", 1)
        assert cache.invalidate_all() == 2
        assert store.keys() == ["unrelated"]

    def test_entries_skips_expired(self, cache, clock):
        cache.set(KEY, {SHA_A: ["v1.0"]})
        clock.advance(30)
        cache.set(RepositoryKey("octo", "fresh"), {SHA_A: ["v2.0"]})
        clock.advance(40)
        assert list(cache.entries()) == ["octo/fresh"]
