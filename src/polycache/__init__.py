"""polycache -- one cache contract over many backends, with tag invalidation.

Manifesto:
    Every service ends up caching against more than one backend: a dict in
    tests, Redis in production, memcached for the legacy fleet. Each has its
    own API, its own idea of expiration, and none of them agree on how to
    drop "everything about user 42" in one call. polycache puts one contract
    in front of all of them and adds what they lack natively:

    - **Uniform store contract:** get / get_with_ttl / set / delete / invalidate / clear
    - **Tag invalidation:** Native sets where available, emulated elsewhere
    - **Deterministic keys:** Any structured key hashes the same everywhere
    - **Operation stats:** Hits, misses, successes, errors per operation
    - **Pluggable values:** msgpack codec for byte-only backends

Architecture::

    Layer 1 -- Contracts & Errors
        errors.py          CacheError hierarchy (NotFound, Backend, Serialization)
        protocols.py       StoreInterface, CodecInterface, MetricsRecorder, ...
        options.py         Options record + mutators (expiration, cost, tags, ctx)

    Layer 2 -- Backend Adapters
        store/base.py      BaseStore template + emulated tag index
        store/memory.py    In-process LRU map
        store/weighted.py  Cost-aware cachetools store
        store/redis.py     Redis, native set tag index
        store/memcache.py  memcached, CAS tag index
        store/disk.py      diskcache directory

    Layer 3 -- Instrumented Call Chain
        hashing.py         Deterministic key derivation
        codec.py           Stats-counting store wrapper
        cache.py           Front facade (derive key → codec → store)
        marshaler.py       msgpack value codec

    Layer 4 -- Cross-Cutting Concerns
        logging.py         Structured logging (structlog)
        settings.py        CacheSettings (pydantic-settings)
        factory.py         create_store / create_cache from settings

Example::

    from polycache import Cache, expiration, invalidate_tags, tags
    from polycache.store import MemoryStore

    cache = Cache(MemoryStore(None, expiration(60)))
    cache.set("user:42", {"name": "Ada"}, tags("users"))
    cache.invalidate(invalidate_tags("users"))

Tags:
    polycache, cache, tags, invalidation, redis, memcached, stats

Doc-Types:
    package-overview, architecture-map, module-index
"""

from polycache.cache import CACHE_TYPE, Cache
from polycache.codec import Codec, Stats
from polycache.errors import (
    BackendError,
    CacheError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    NotFoundError,
    SerializationError,
)
from polycache.hashing import derive_key
from polycache.marshaler import Marshaler
from polycache.options import (
    InvalidateOptions,
    Options,
    cost,
    ctx,
    expiration,
    invalidate_tags,
    resolve_invalidate_options,
    resolve_options,
    tags,
)
from polycache.protocols import (
    CacheInterface,
    CodecInterface,
    MetricsRecorder,
    SetterCacheInterface,
    StoreInterface,
)

__version__ = "0.1.0"

__all__ = [
    "CACHE_TYPE",
    "Cache",
    "Codec",
    "Stats",
    "BackendError",
    "CacheError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidConfigError",
    "NotFoundError",
    "SerializationError",
    "derive_key",
    "Marshaler",
    "InvalidateOptions",
    "Options",
    "cost",
    "ctx",
    "expiration",
    "invalidate_tags",
    "resolve_invalidate_options",
    "resolve_options",
    "tags",
    "CacheInterface",
    "CodecInterface",
    "MetricsRecorder",
    "SetterCacheInterface",
    "StoreInterface",
]
