"""
Factory functions that create stores and caches from settings.

Manifesto:
    Each factory uses lazy imports so that optional client libraries
    (``redis``, ``pymemcache``, ``diskcache``) are only loaded when the
    corresponding backend is actually selected.

Features:
    - ``default_options()``: store default option mutators from settings
    - ``create_store()``: Memory / Weighted / Redis / Memcache / Disk store
    - ``create_cache()``: ``Cache`` facade over ``create_store()``
    - ``configure_logging_from_settings()``: apply ``log_level`` / ``log_format``

Tags:
    polycache, configuration, factory-pattern, lazy-imports, redis, memcache

Doc-Types:
    api-reference
"""

from __future__ import annotations

from polycache.cache import Cache
from polycache.logging import configure_logging
from polycache.options import Option, cost, expiration, tags
from polycache.protocols import StoreInterface
from polycache.settings import CacheSettings, StoreBackend, get_settings


def default_options(settings: CacheSettings) -> list[Option]:
    """Option mutators making up a store's default ``Options`` record."""
    options: list[Option] = []
    if settings.default_expiration_seconds:
        options.append(expiration(settings.default_expiration_seconds))
    if settings.default_cost:
        options.append(cost(settings.default_cost))
    if settings.default_tags:
        options.append(tags(*settings.default_tags))
    return options


def create_store(settings: CacheSettings | None = None) -> StoreInterface:
    """Create a store based on *settings.store_backend*."""
    settings = settings or get_settings()
    options = default_options(settings)

    match settings.store_backend:
        case StoreBackend.MEMORY:
            from polycache.store.memory import InMemoryCache, MemoryStore

            return MemoryStore(InMemoryCache(max_size=settings.memory_max_size), *options)
        case StoreBackend.WEIGHTED:
            from polycache.store.weighted import WeightedCache, WeightedStore

            return WeightedStore(WeightedCache(max_cost=settings.weighted_max_cost), *options)
        case StoreBackend.REDIS:
            try:
                import redis

                from polycache.store.redis import RedisStore
            except ImportError as exc:
                raise ImportError(
                    "Redis store requires the 'redis' package. "
                    "Install with: pip install polycache[redis]"
                ) from exc
            return RedisStore(redis.from_url(settings.redis_url), *options)
        case StoreBackend.MEMCACHE:
            try:
                from pymemcache.client.base import Client

                from polycache.store.memcache import MemcacheStore
            except ImportError as exc:
                raise ImportError(
                    "Memcache store requires 'pymemcache'. "
                    "Install with: pip install polycache[memcache]"
                ) from exc
            host, _, port = settings.memcache_server.partition(":")
            return MemcacheStore(Client((host, int(port) if port else 11211)), *options)
        case StoreBackend.DISK:
            try:
                import diskcache

                from polycache.store.disk import DiskStore
            except ImportError as exc:
                raise ImportError(
                    "Disk store requires 'diskcache'. "
                    "Install with: pip install polycache[disk]"
                ) from exc
            return DiskStore(diskcache.Cache(settings.disk_directory), *options)


def create_cache(settings: CacheSettings | None = None) -> Cache:
    """Create a ``Cache`` facade over the store selected by *settings*."""
    return Cache(create_store(settings))


def configure_logging_from_settings(settings: CacheSettings | None = None) -> None:
    """Configure structlog from *settings.log_level* and *settings.log_format*."""
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")


__all__ = ["default_options", "create_store", "create_cache", "configure_logging_from_settings"]
