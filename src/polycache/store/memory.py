"""
In-process map store.

``InMemoryCache`` is a bounded LRU map with per-entry expiration; it is the
client. ``MemoryStore`` adapts it to the store contract. Values are kept as
the Python objects they were given (no serialization), and tag indexes are
plain ``set`` objects stored under ``gocache_tag_<tag>``.

Architecture:
    ::

        MemoryStore (EmulatedTagStore, type "memory")
            │
            ▼
        InMemoryCache
            _store: key → (value, expires_at | None)
            _access_order: LRU order, oldest first

Examples:
    >>> from polycache.options import expiration, tags
    >>> store = MemoryStore(InMemoryCache(max_size=1000), expiration(60))
    >>> store.set("session:abc", {"user_id": 42}, tags("sessions"))
    >>> store.get("session:abc")
    {'user_id': 42}

Performance:
    - get/set: O(1) dict access plus O(n) LRU list maintenance
    - TTL cleanup: Lazy (checked on read)

Guardrails:
    ❌ DON'T: Use MemoryStore in multi-process deployments (no sharing)
    ✅ DO: Use RedisStore or MemcacheStore when processes must share entries

Tags:
    cache, in-memory, lru, ttl, polycache

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import threading
import time
from datetime import timedelta
from typing import Any, Protocol

from polycache.options import Option, Options
from polycache.store.base import EmulatedTagStore

MEMORY_TYPE = "memory"


class MemoryClientInterface(Protocol):
    """What ``MemoryStore`` needs from its client."""

    def get_with_expiration(self, key: str) -> tuple[Any, float | None]: ...

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None: ...

    def delete(self, key: str) -> None: ...

    def flush(self) -> None: ...


class InMemoryCache:
    """Bounded in-memory map with per-entry TTL.

    Uses LRU eviction when ``max_size`` is reached. All methods take an
    internal lock, so one instance can be shared across threads.

    Attributes:
        max_size: Maximum number of keys before LRU eviction.
    """

    def __init__(self, *, max_size: int = 10_000):
        self._store: dict[str, tuple[Any, float | None]] = {}
        self._access_order: list[str] = []
        self._max_size = max_size
        self._lock = threading.RLock()

    @property
    def max_size(self) -> int:
        return self._max_size

    def get_with_expiration(self, key: str) -> tuple[Any, float | None]:
        """Return ``(value, expires_at)``; raise ``KeyError`` if absent or expired."""
        with self._lock:
            if key not in self._store:
                raise KeyError(key)

            value, expires_at = self._store[key]

            if expires_at is not None and time.time() > expires_at:
                self._remove(key)
                raise KeyError(key)

            self._touch(key)
            return value, expires_at

    def get(self, key: str) -> Any:
        """Return the value for *key*; raise ``KeyError`` if absent or expired."""
        value, _ = self.get_with_expiration(key)
        return value

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        """Store a value; ``ttl_seconds`` of ``None`` or 0 means no expiry."""
        expires_at = (time.time() + ttl_seconds) if ttl_seconds else None

        with self._lock:
            if key not in self._store and len(self._store) >= self._max_size:
                if self._access_order:
                    lru_key = self._access_order.pop(0)
                    self._store.pop(lru_key, None)

            self._store[key] = (value, expires_at)
            self._touch(key)

    def delete(self, key: str) -> None:
        """Remove a key; no-op if it does not exist."""
        with self._lock:
            self._remove(key)

    def flush(self) -> None:
        """Remove all keys."""
        with self._lock:
            self._store.clear()
            self._access_order.clear()

    def size(self) -> int:
        """Return current number of stored keys (expired ones included)."""
        return len(self._store)

    def _touch(self, key: str) -> None:
        if key in self._access_order:
            self._access_order.remove(key)
        self._access_order.append(key)

    def _remove(self, key: str) -> None:
        self._store.pop(key, None)
        if key in self._access_order:
            self._access_order.remove(key)


class MemoryStore(EmulatedTagStore):
    """Store backed by an in-process ``InMemoryCache``."""

    store_type = MEMORY_TYPE

    def __init__(self, client: MemoryClientInterface | None = None, *options: Option):
        super().__init__(client if client is not None else InMemoryCache(), *options)

    def get(self, key: str) -> Any:
        try:
            value, _ = self._client.get_with_expiration(key)
        except KeyError:
            raise self._not_found(key) from None
        return value

    def get_with_ttl(self, key: str) -> tuple[Any, timedelta]:
        try:
            value, expires_at = self._client.get_with_expiration(key)
        except KeyError:
            raise self._not_found(key, "get_with_ttl") from None

        if expires_at is None:
            return value, timedelta(0)
        return value, timedelta(seconds=max(expires_at - time.time(), 0.0))

    def _write(self, key: str, value: Any, options: Options) -> None:
        ttl = options.expiration.total_seconds() or None
        self._client.set(key, value, ttl)

    def delete(self, key: str) -> None:
        self._client.delete(key)

    def clear(self) -> None:
        self._client.flush()

    def _encode_members(self, members: list[str]) -> set[str]:
        return set(members)

    def _decode_members(self, raw: Any) -> list[str]:
        if isinstance(raw, (set, frozenset)):
            return sorted(raw)
        return []


__all__ = ["MEMORY_TYPE", "MemoryClientInterface", "InMemoryCache", "MemoryStore"]
