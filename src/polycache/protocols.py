"""
Canonical protocol definitions for polycache.

Every layer talks to the layer below through one of these structural
contracts, so a ``Codec`` can wrap any store, a ``Cache`` can be replaced by
a test double, and a metrics exporter only needs ``record_from_codec``.

Architecture:
    ::

        protocols.py
        ├── StoreInterface       : backend adapter contract (memory, redis, ...)
        ├── CacheInterface       : keyed facade contract (Cache, Marshaler)
        ├── SetterCacheInterface : CacheInterface + get_with_ttl + get_codec
        ├── CodecInterface       : stats-instrumented store wrapper
        └── MetricsRecorder      : exporter boundary reading Codec stats

    Client-side contracts (what a store needs from its client library) live
    next to each adapter: ``polycache.store.redis.RedisClientInterface`` etc.

Guardrails:
    ❌ DON'T: Branch on ``isinstance(store, RedisStore)`` in callers
    ✅ DO: Depend on ``StoreInterface`` and inject the concrete store

Tags:
    protocol, store, codec, metrics, polycache, contracts

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from polycache.codec import Stats
    from polycache.options import InvalidateOption, Option


@runtime_checkable
class StoreInterface(Protocol):
    """
    Uniform contract implemented once per backend kind.

    Misses raise ``NotFoundError``; client failures raise ``BackendError``.
    """

    def get(self, key: str) -> Any:
        """Return the stored value unchanged in type."""
        ...

    def get_with_ttl(self, key: str) -> tuple[Any, timedelta]:
        """Return the stored value and its remaining lifetime."""
        ...

    def set(self, key: str, value: Any, *options: Option) -> None:
        """Write *value*, then index *key* under the resolved tags."""
        ...

    def delete(self, key: str) -> None:
        """Remove one entry. Tag indexes are left alone."""
        ...

    def invalidate(self, *options: InvalidateOption) -> None:
        """Delete every key indexed under the resolved tags."""
        ...

    def clear(self) -> None:
        """Flush the whole backend namespace."""
        ...

    def get_type(self) -> str:
        """Fixed identifier of the backend kind."""
        ...


@runtime_checkable
class CacheInterface(Protocol):
    """Keyed facade: accepts any key value, derives the backend key itself."""

    def get(self, key: Any) -> Any: ...

    def set(self, key: Any, value: Any, *options: Option) -> None: ...

    def delete(self, key: Any) -> None: ...

    def invalidate(self, *options: InvalidateOption) -> None: ...

    def clear(self) -> None: ...

    def get_type(self) -> str: ...


@runtime_checkable
class SetterCacheInterface(CacheInterface, Protocol):
    """A cache that stores directly (as opposed to a chain or loader)."""

    def get_with_ttl(self, key: Any) -> tuple[Any, timedelta]: ...

    def get_codec(self) -> CodecInterface: ...


@runtime_checkable
class CodecInterface(Protocol):
    """Store wrapper that counts the outcome of every operation."""

    def get(self, key: str) -> Any: ...

    def get_with_ttl(self, key: str) -> tuple[Any, timedelta]: ...

    def set(self, key: str, value: Any, *options: Option) -> None: ...

    def delete(self, key: str) -> None: ...

    def invalidate(self, *options: InvalidateOption) -> None: ...

    def clear(self) -> None: ...

    def get_store(self) -> StoreInterface: ...

    def get_stats(self) -> Stats: ...


@runtime_checkable
class MetricsRecorder(Protocol):
    """
    Boundary for metrics exporters.

    Implementations read ``codec.get_stats()`` snapshots and publish them;
    polycache itself never pushes to an exporter.
    """

    def record_from_codec(self, codec: CodecInterface) -> None: ...


__all__ = [
    "StoreInterface",
    "CacheInterface",
    "SetterCacheInterface",
    "CodecInterface",
    "MetricsRecorder",
]
