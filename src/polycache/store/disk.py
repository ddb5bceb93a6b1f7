"""
On-disk byte store (diskcache).

``DiskStore`` adapts a ``diskcache.Cache`` directory: values are byte
strings persisted in the cache's SQLite index and data segments, shared
between every process that opens the same directory. Tag indexes are
comma-delimited byte strings, appended inside ``Cache.transact()`` so
concurrent processes cannot lose each other's additions.

Examples:
    >>> import diskcache
    >>> store = DiskStore(diskcache.Cache("/tmp/polycache"))   # doctest: +SKIP
    >>> store.set("report:2024", b"...", tags("reports"))   # doctest: +SKIP

Guardrails:
    ❌ DON'T: Put the cache directory on a network filesystem
    ✅ DO: Use one local directory per logical cache

Tags:
    cache, diskcache, persistent, bytes, polycache

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import sqlite3
import time
from contextlib import AbstractContextManager
from datetime import timedelta
from typing import Any, Protocol

from diskcache import Timeout

from polycache.options import Options
from polycache.store.base import EmulatedTagStore, to_bytes

DISK_TYPE = "disk"

_MISSING = object()


class DiskClientInterface(Protocol):
    """Subset of ``diskcache.Cache`` used by ``DiskStore``."""

    def get(self, key: str, default: Any = None, expire_time: bool = False) -> Any: ...

    def set(self, key: str, value: Any, expire: float | None = None) -> bool: ...

    def delete(self, key: str) -> bool: ...

    def clear(self) -> int: ...

    def transact(self) -> AbstractContextManager[Any]: ...


class DiskStore(EmulatedTagStore):
    """Store backed by a ``diskcache.Cache`` directory."""

    store_type = DISK_TYPE
    client_errors = (Timeout, sqlite3.Error, OSError)

    @classmethod
    def from_directory(cls, directory: str, *options, **cache_settings: Any) -> DiskStore:
        """Open (or create) a ``diskcache.Cache`` at *directory* and wrap it."""
        import diskcache

        return cls(diskcache.Cache(directory, **cache_settings), *options)

    def _read(self, key: str, operation: str) -> tuple[Any, float | None]:
        with self._backend_call(operation, key):
            value, expire_time = self._client.get(key, default=_MISSING, expire_time=True)
        if value is _MISSING:
            raise self._not_found(key, operation)
        return value, expire_time

    def get(self, key: str) -> Any:
        value, _ = self._read(key, "get")
        return value

    def get_with_ttl(self, key: str) -> tuple[Any, timedelta]:
        value, expire_time = self._read(key, "get_with_ttl")
        if expire_time is None:
            return value, timedelta(0)
        return value, timedelta(seconds=max(expire_time - time.time(), 0.0))

    def _write(self, key: str, value: Any, options: Options) -> None:
        payload = to_bytes(value, key=key, backend=self.store_type)
        expire = options.expiration.total_seconds() or None
        with self._backend_call("set", key):
            self._client.set(key, payload, expire=expire)

    def delete(self, key: str) -> None:
        with self._backend_call("delete", key):
            self._client.delete(key)

    def clear(self) -> None:
        with self._backend_call("clear"):
            self._client.clear()

    def _tag_guard(self) -> AbstractContextManager[Any]:
        return self._client.transact()

    def _add_tag_member(self, index_key: str, key: str) -> None:
        with self._backend_call("set_tags", index_key):
            super()._add_tag_member(index_key, key)


__all__ = ["DISK_TYPE", "DiskClientInterface", "DiskStore"]
