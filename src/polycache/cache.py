"""
Front cache facade.

``Cache`` is the entry point callers hold. It derives a backend key from
whatever key value it is given (see ``polycache.hashing.derive_key``),
routes the call through a stats-counting ``Codec``, and lets the store
adapter do the rest.

Manifesto:
    Callers should not care which backend they talk to or how its keys are
    shaped:
    - **Any key:** Strings verbatim, structures hashed deterministically
    - **Any store:** Injected at construction, never inspected
    - **Always counted:** Every call goes through the stats wrapper

Architecture:
    ::

        caller ──► Cache.get(key)
                     derive_key(key)
                       ↓
                   Codec.get(cache_key)        (hits / miss)
                       ↓
                   Store.get(cache_key)        (memory, redis, ...)

Examples:
    >>> from polycache.options import expiration, invalidate_tags, tags
    >>> from polycache.store import MemoryStore
    >>> cache = Cache(MemoryStore())
    >>> cache.set({"user": 1, "page": 2}, ["row-a", "row-b"], tags("users"))
    >>> cache.get({"page": 2, "user": 1})
    ['row-a', 'row-b']
    >>> cache.invalidate(invalidate_tags("users"))
    >>> cache.get_codec().get_stats().invalidate_success
    1

Tags:
    cache, facade, key-derivation, polycache

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from polycache.codec import Codec
from polycache.hashing import derive_key
from polycache.options import InvalidateOption, Option
from polycache.protocols import StoreInterface

CACHE_TYPE = "cache"


class Cache:
    """Keyed cache over one store, instrumented with ``Codec`` stats."""

    def __init__(self, store: StoreInterface):
        self._codec = Codec(store)

    def get(self, key: Any) -> Any:
        """Return the cached value; raises ``NotFoundError`` on a miss."""
        return self._codec.get(self.get_cache_key(key))

    def get_with_ttl(self, key: Any) -> tuple[Any, timedelta]:
        return self._codec.get_with_ttl(self.get_cache_key(key))

    def set(self, key: Any, value: Any, *options: Option) -> None:
        self._codec.set(self.get_cache_key(key), value, *options)

    def delete(self, key: Any) -> None:
        self._codec.delete(self.get_cache_key(key))

    def invalidate(self, *options: InvalidateOption) -> None:
        self._codec.invalidate(*options)

    def clear(self) -> None:
        self._codec.clear()

    def get_codec(self) -> Codec:
        return self._codec

    def get_type(self) -> str:
        return CACHE_TYPE

    @staticmethod
    def get_cache_key(key: Any) -> str:
        return derive_key(key)

    def __repr__(self) -> str:
        return f"Cache(store={self._codec.get_store()!r})"


__all__ = ["CACHE_TYPE", "Cache"]
