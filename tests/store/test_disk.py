"""Tests for ``polycache.store.disk.DiskStore`` against a real diskcache directory.

Requires ``diskcache`` package. Tests are skipped if not installed.
"""

from __future__ import annotations

import time
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

diskcache = pytest.importorskip("diskcache")

from polycache.errors import BackendError, NotFoundError, SerializationError  # noqa: E402
from polycache.options import expiration, invalidate_tags, tags  # noqa: E402
from polycache.store.base import tag_key  # noqa: E402
from polycache.store.disk import DISK_TYPE, DiskStore  # noqa: E402

pytestmark = pytest.mark.integration


@pytest.fixture
def store(tmp_path):
    disk_store = DiskStore.from_directory(str(tmp_path / "cache"))
    yield disk_store
    disk_store.client.close()


class TestDiskStoreOperations:
    def test_type(self, store):
        assert store.get_type() == DISK_TYPE == "disk"

    def test_bytes_round_trip(self, store):
        store.set("k", b"\x00payload")
        assert store.get("k") == b"\x00payload"

    def test_str_is_utf8_encoded(self, store):
        store.set("k", "café")
        assert store.get("k") == "café".encode("utf-8")

    def test_objects_rejected(self, store):
        with pytest.raises(SerializationError):
            store.set("k", {"a": 1})

    def test_missing(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            store.get("absent")
        assert exc_info.value.context.backend == "disk"

    def test_get_with_ttl(self, store):
        store.set("k", b"v", expiration(60))

        value, ttl = store.get_with_ttl("k")

        assert value == b"v"
        assert timedelta(seconds=59) < ttl <= timedelta(seconds=60)

    def test_get_with_ttl_without_expiry(self, store):
        store.set("k", b"v")
        assert store.get_with_ttl("k") == (b"v", timedelta(0))

    def test_expired_entry_is_not_found(self, store):
        store.set("k", b"v", expiration(0.01))
        time.sleep(0.05)

        with pytest.raises(NotFoundError):
            store.get("k")

    def test_delete(self, store):
        store.set("k", b"v")
        store.delete("k")
        store.delete("k")

        with pytest.raises(NotFoundError):
            store.get("k")

    def test_clear(self, store):
        store.set("a", b"1")
        store.set("b", b"2")

        store.clear()

        with pytest.raises(NotFoundError):
            store.get("a")

    def test_timeout_is_wrapped(self):
        client = MagicMock()
        client.get.side_effect = diskcache.Timeout()

        with pytest.raises(BackendError) as exc_info:
            DiskStore(client).get("k")

        assert isinstance(exc_info.value.cause, diskcache.Timeout)


class TestDiskStoreTags:
    def test_tag_index_is_delimited_bytes(self, store):
        store.set("a", b"1", tags("reports"))
        store.set("b", b"2", tags("reports"))
        store.set("a", b"3", tags("reports"))

        assert store.get(tag_key("reports")) == b"a,b"

    def test_tag_index_has_long_ttl(self, store):
        store.set("a", b"1", tags("reports"))

        _, ttl = store.get_with_ttl(tag_key("reports"))

        assert ttl > timedelta(hours=719)

    def test_invalidate_keeps_index(self, store):
        store.set("a", b"1", tags("reports"))
        store.set("b", b"2", tags("other"))

        store.invalidate(invalidate_tags("reports"))

        with pytest.raises(NotFoundError):
            store.get("a")
        assert store.get("b") == b"2"
        assert store.get(tag_key("reports")) == b"a"

    def test_shared_directory(self, store, tmp_path):
        other = DiskStore.from_directory(str(tmp_path / "cache"))
        try:
            store.set("a", b"1", tags("reports"))
            other.invalidate(invalidate_tags("reports"))

            with pytest.raises(NotFoundError):
                store.get("a")
        finally:
            other.client.close()
