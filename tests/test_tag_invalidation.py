"""
Tag index behavior shared by every emulated store.

Runs the same scenarios against the in-process stores and, when diskcache
is installed, a disk store in a temporary directory.
"""

import pytest

from polycache.cache import Cache
from polycache.errors import NotFoundError
from polycache.options import invalidate_tags, tags
from polycache.store.base import tag_key
from polycache.store.memory import MemoryStore
from polycache.store.weighted import WeightedStore


@pytest.fixture(params=["memory", "weighted", "disk"])
def store(request, tmp_path):
    if request.param == "memory":
        yield MemoryStore()
    elif request.param == "weighted":
        yield WeightedStore()
    else:
        pytest.importorskip("diskcache")
        from polycache.store.disk import DiskStore

        disk_store = DiskStore.from_directory(str(tmp_path / "cache"))
        yield disk_store
        disk_store.client.close()


class TestTagIndex:
    def test_adding_a_member_twice_is_idempotent(self, store):
        for _ in range(3):
            store.set("k", b"v", tags("t"))

        assert store._tag_members(tag_key("t")) == ["k"]

    def test_members_listed(self, store):
        store.set("k1", b"v", tags("t"))
        store.set("k2", b"v", tags("t"))

        assert sorted(store._tag_members(tag_key("t"))) == ["k1", "k2"]

    def test_empty_tag_list_is_a_noop(self, store):
        store.set("k", b"v", tags())
        with pytest.raises(NotFoundError):
            store.get(tag_key(""))


class TestInvalidation:
    def test_every_member_is_removed(self, store):
        store.set("k1", b"1", tags("t"))
        store.set("k2", b"2", tags("t"))
        store.set("k3", b"3", tags("other"))

        store.invalidate(invalidate_tags("t"))

        for key in ("k1", "k2"):
            with pytest.raises(NotFoundError):
                store.get(key)
        assert store.get("k3") == b"3"

    def test_key_with_several_tags(self, store):
        store.set("k", b"v", tags("a", "b"))

        store.invalidate(invalidate_tags("b"))

        with pytest.raises(NotFoundError):
            store.get("k")

    def test_several_tags_at_once(self, store):
        store.set("k1", b"1", tags("a"))
        store.set("k2", b"2", tags("b"))

        store.invalidate(invalidate_tags("a", "b"))

        for key in ("k1", "k2"):
            with pytest.raises(NotFoundError):
                store.get(key)

    def test_unknown_tag(self, store):
        store.set("k", b"v")
        store.invalidate(invalidate_tags("never-used"))
        assert store.get("k") == b"v"

    def test_already_deleted_member(self, store):
        store.set("k", b"v", tags("t"))
        store.delete("k")

        store.invalidate(invalidate_tags("t"))

    def test_through_cache_facade(self, store):
        cache = Cache(store)
        cache.set("k", b"v", tags("t"))

        cache.invalidate(invalidate_tags("t"))

        with pytest.raises(NotFoundError):
            cache.get("k")
        stats = cache.get_codec().get_stats()
        assert stats.invalidate_success == 1
        assert stats.miss == 1
