"""Backend adapters implementing ``polycache.protocols.StoreInterface``.

In-process stores (``MemoryStore``, ``WeightedStore``) import eagerly.
Stores whose client library is an optional extra (``RedisStore``,
``MemcacheStore``, ``DiskStore``) resolve lazily, so ``import
polycache.store`` works without redis, pymemcache or diskcache installed.
"""

import importlib

from polycache.store.base import (
    TAG_KEY_PATTERN,
    TAG_TTL,
    BaseStore,
    EmulatedTagStore,
    tag_key,
)
from polycache.store.memory import MEMORY_TYPE, InMemoryCache, MemoryStore
from polycache.store.weighted import WEIGHTED_TYPE, WeightedCache, WeightedStore

_LAZY = {
    "RedisStore": ("polycache.store.redis", "redis"),
    "REDIS_TYPE": ("polycache.store.redis", "redis"),
    "MemcacheStore": ("polycache.store.memcache", "memcache"),
    "MEMCACHE_TYPE": ("polycache.store.memcache", "memcache"),
    "DiskStore": ("polycache.store.disk", "disk"),
    "DISK_TYPE": ("polycache.store.disk", "disk"),
}


def __getattr__(name):
    """Lazy import for stores with optional client libraries.

    A missing client library surfaces as ``AttributeError`` naming the
    extra to install.
    """
    if name not in _LAZY:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, extra = _LAZY[name]
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        raise AttributeError(
            f"module {__name__!r} has no attribute {name!r} "
            f"(requires the {extra!r} extra: pip install polycache[{extra}])"
        ) from None
    return getattr(module, name)


__all__ = [
    "TAG_KEY_PATTERN",
    "TAG_TTL",
    "BaseStore",
    "EmulatedTagStore",
    "tag_key",
    "MEMORY_TYPE",
    "InMemoryCache",
    "MemoryStore",
    "WEIGHTED_TYPE",
    "WeightedCache",
    "WeightedStore",
    "RedisStore",
    "REDIS_TYPE",
    "MemcacheStore",
    "MEMCACHE_TYPE",
    "DiskStore",
    "DISK_TYPE",
]
