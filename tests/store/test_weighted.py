"""Tests for polycache.store.weighted (cost-aware cachetools store)."""

import time
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from polycache.errors import BackendError, NotFoundError
from polycache.options import cost, expiration, invalidate_tags, tags
from polycache.store.base import tag_key
from polycache.store.weighted import WEIGHTED_TYPE, WeightedCache, WeightedStore


class TestWeightedCache:
    def test_get_set(self):
        cache = WeightedCache(max_cost=10)

        assert cache.set_with_ttl("k", "v", 3, timedelta(0))
        assert cache.get("k") == ("v", True)
        assert cache.current_cost == 3

    def test_missing(self):
        assert WeightedCache().get("absent") == (None, False)

    def test_unset_cost_weighs_one(self):
        cache = WeightedCache(max_cost=10)
        cache.set_with_ttl("k", "v", 0, timedelta(0))
        assert cache.current_cost == 1

    def test_oversized_entry_rejected(self):
        cache = WeightedCache(max_cost=10)
        assert not cache.set_with_ttl("k", "v", 11, timedelta(0))
        assert cache.get("k") == (None, False)

    def test_lru_eviction_by_cost(self):
        cache = WeightedCache(max_cost=10)
        cache.set_with_ttl("a", 1, 6, timedelta(0))
        cache.set_with_ttl("b", 2, 6, timedelta(0))

        assert cache.get("a") == (None, False)
        assert cache.get("b") == (2, True)
        assert cache.current_cost == 6

    def test_ttl_expiry(self):
        cache = WeightedCache()
        cache.set_with_ttl("k", "v", 1, timedelta(milliseconds=10))
        time.sleep(0.05)
        assert cache.get("k") == (None, False)

    def test_delete_and_clear(self):
        cache = WeightedCache()
        cache.set_with_ttl("a", 1, 1, timedelta(0))
        cache.set_with_ttl("b", 2, 1, timedelta(0))

        cache.delete("a")
        cache.delete("absent")
        assert cache.get("a") == (None, False)

        cache.clear()
        assert cache.current_cost == 0


class TestWeightedStore:
    def test_type(self, weighted_store):
        assert weighted_store.get_type() == WEIGHTED_TYPE == "weighted"

    def test_round_trip_keeps_objects(self, weighted_store):
        value = {"thumb": b"..."}
        weighted_store.set("k", value)
        assert weighted_store.get("k") is value

    def test_missing(self, weighted_store):
        with pytest.raises(NotFoundError):
            weighted_store.get("absent")

    def test_get_with_ttl_reports_zero(self, weighted_store):
        weighted_store.set("k", "v", expiration(60))
        assert weighted_store.get_with_ttl("k") == ("v", timedelta(0))

    def test_cost_and_expiration_forwarded(self):
        client = MagicMock()
        client.set_with_ttl.return_value = True

        WeightedStore(client).set("k", "v", cost(3), expiration(5))

        client.set_with_ttl.assert_called_once_with("k", "v", 3, timedelta(seconds=5))

    def test_rejected_write_raises(self):
        store = WeightedStore(WeightedCache(max_cost=10))

        with pytest.raises(BackendError) as exc_info:
            store.set("k", "v", cost(50))

        assert exc_info.value.context.operation == "set"

    def test_delete_missing_is_not_an_error(self, weighted_store):
        weighted_store.delete("absent")

    def test_clear(self, weighted_store):
        weighted_store.set("k", "v")
        weighted_store.clear()
        assert weighted_store.client.current_cost == 0

    def test_tag_index_is_delimited_bytes(self, weighted_store):
        weighted_store.set("a", 1, tags("t"))
        weighted_store.set("b", 2, tags("t"))

        assert weighted_store.get(tag_key("t")) == b"a,b"

    def test_invalidate_keeps_index(self, weighted_store):
        weighted_store.set("a", 1, tags("t"))

        weighted_store.invalidate(invalidate_tags("t"))

        with pytest.raises(NotFoundError):
            weighted_store.get("a")
        assert weighted_store.get(tag_key("t")) == b"a"
