"""
Cost-aware, object-evicting in-process store (cachetools).

``WeightedCache`` wraps a ``cachetools.TLRUCache`` whose capacity is a total
*cost* rather than an item count: every entry weighs its ``cost`` option
(1 when unset), least-recently-used entries are evicted until a new one
fits, and an entry heavier than the whole capacity is rejected outright.
Each entry carries its own time-to-live.

Tag indexes are comma-delimited byte strings, appended under the store's
lock.

Examples:
    >>> from polycache.options import cost, expiration
    >>> store = WeightedStore(WeightedCache(max_cost=100))
    >>> store.set("thumb:1", b"...", cost(10), expiration(300))
    >>> store.get("thumb:1")
    b'...'

Guardrails:
    ❌ DON'T: Expect ``get_with_ttl`` to report a lifetime (always zero here)
    ✅ DO: Size ``max_cost`` in the same unit you pass to ``cost()``

Tags:
    cache, cachetools, cost, eviction, in-memory, polycache

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Protocol

from cachetools import TLRUCache

from polycache.errors import BackendError
from polycache.options import Options
from polycache.store.base import EmulatedTagStore

WEIGHTED_TYPE = "weighted"


class WeightedClientInterface(Protocol):
    """What ``WeightedStore`` needs from its client."""

    def get(self, key: str) -> tuple[Any, bool]: ...

    def set_with_ttl(self, key: str, value: Any, cost: int, ttl: timedelta) -> bool: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...


@dataclass(frozen=True)
class _Entry:
    value: Any
    cost: int
    ttl_seconds: float


def _entry_expires(key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl_seconds if entry.ttl_seconds > 0 else math.inf


class WeightedCache:
    """Thread-safe cost-bounded cache with per-entry TTL."""

    def __init__(self, *, max_cost: int = 1 << 20):
        self._cache: TLRUCache = TLRUCache(
            maxsize=max_cost,
            ttu=_entry_expires,
            getsizeof=lambda entry: entry.cost,
        )
        self._lock = threading.Lock()

    @property
    def max_cost(self) -> int:
        return int(self._cache.maxsize)

    @property
    def current_cost(self) -> int:
        return int(self._cache.currsize)

    def get(self, key: str) -> tuple[Any, bool]:
        with self._lock:
            try:
                entry = self._cache[key]
            except KeyError:
                return None, False
        return entry.value, True

    def set_with_ttl(self, key: str, value: Any, cost: int, ttl: timedelta) -> bool:
        """Store *value*; return ``False`` when it cannot fit at all."""
        entry = _Entry(value=value, cost=max(cost, 1), ttl_seconds=ttl.total_seconds())
        with self._lock:
            try:
                self._cache[key] = entry
            except ValueError:
                return False
        return True

    def delete(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()


class WeightedStore(EmulatedTagStore):
    """Store backed by a cost-aware ``WeightedCache``."""

    store_type = WEIGHTED_TYPE

    def __init__(self, client: WeightedClientInterface | None = None, *options):
        super().__init__(client if client is not None else WeightedCache(), *options)

    def get(self, key: str) -> Any:
        value, found = self._client.get(key)
        if not found:
            raise self._not_found(key)
        return value

    def get_with_ttl(self, key: str) -> tuple[Any, timedelta]:
        return self.get(key), timedelta(0)

    def _write(self, key: str, value: Any, options: Options) -> None:
        if not self._client.set_with_ttl(key, value, options.cost, options.expiration):
            raise BackendError(
                f"An error has occurred while setting value on key {key!r}: "
                f"cost {options.cost} rejected"
            ).with_context(operation="set", key=key, backend=self.store_type)

    def delete(self, key: str) -> None:
        self._client.delete(key)

    def clear(self) -> None:
        self._client.clear()


__all__ = ["WEIGHTED_TYPE", "WeightedClientInterface", "WeightedCache", "WeightedStore"]
