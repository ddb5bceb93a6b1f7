"""
Stats-instrumented store wrapper.

``Codec`` sits between the ``Cache`` facade and a store adapter and counts
the outcome of every operation. It never alters a result or an exception:
the store's return value is passed back, the store's exception is re-raised
as-is, and the only side effect is one counter increment per call.

Architecture:
    ::

        Cache ──► Codec ──► StoreInterface
                   │
                   └── Stats
                         get / get_with_ttl   ok → hits        err → miss
                         set                  ok → set_success err → set_error
                         delete               ok → delete_success ...
                         invalidate           ok → invalidate_success ...
                         clear                ok → clear_success ...

Examples:
    >>> from polycache.store import MemoryStore
    >>> codec = Codec(MemoryStore())
    >>> codec.set("k", "v")
    >>> codec.get("k")
    'v'
    >>> codec.get_stats().hits, codec.get_stats().set_success
    (1, 1)

Tags:
    stats, metrics, instrumentation, decorator, polycache

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import asdict, dataclass, replace
from datetime import timedelta
from typing import Any, TypeVar

from polycache.options import InvalidateOption, Option
from polycache.protocols import StoreInterface

T = TypeVar("T")


@dataclass(frozen=True)
class Stats:
    """Operation counters; snapshots returned by ``Codec.get_stats()``."""

    hits: int = 0
    miss: int = 0
    set_success: int = 0
    set_error: int = 0
    delete_success: int = 0
    delete_error: int = 0
    invalidate_success: int = 0
    invalidate_error: int = 0
    clear_success: int = 0
    clear_error: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class Codec:
    """Wraps a store and records hits, misses, successes and errors."""

    def __init__(self, store: StoreInterface):
        self._store = store
        self._stats = Stats()
        self._lock = threading.Lock()

    def _record(self, counter: str) -> None:
        with self._lock:
            self._stats = replace(self._stats, **{counter: getattr(self._stats, counter) + 1})

    def _observe(self, call: Callable[[], T], success: str, error: str) -> T:
        try:
            result = call()
        except Exception:
            self._record(error)
            raise
        self._record(success)
        return result

    def get(self, key: str) -> Any:
        return self._observe(lambda: self._store.get(key), "hits", "miss")

    def get_with_ttl(self, key: str) -> tuple[Any, timedelta]:
        return self._observe(lambda: self._store.get_with_ttl(key), "hits", "miss")

    def set(self, key: str, value: Any, *options: Option) -> None:
        self._observe(lambda: self._store.set(key, value, *options), "set_success", "set_error")

    def delete(self, key: str) -> None:
        self._observe(lambda: self._store.delete(key), "delete_success", "delete_error")

    def invalidate(self, *options: InvalidateOption) -> None:
        self._observe(
            lambda: self._store.invalidate(*options), "invalidate_success", "invalidate_error"
        )

    def clear(self) -> None:
        self._observe(self._store.clear, "clear_success", "clear_error")

    def get_store(self) -> StoreInterface:
        return self._store

    def get_stats(self) -> Stats:
        """Current counters. The returned ``Stats`` is frozen."""
        return self._stats


__all__ = ["Stats", "Codec"]
