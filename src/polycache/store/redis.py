"""
Redis-backed store with native set tag indexes.

Wraps an injected redis-py client (``redis.Redis`` or ``redis.RedisCluster``;
both expose the same command surface). Tags use server-side sets, so adding
a member is a single atomic ``SADD`` and invalidation removes the tag set
itself once its members are gone.

Architecture:
    ::

        set(key, value, tags("t"))
            SET key value [EX ttl]
            SADD  gocache_tag_t key
            EXPIRE gocache_tag_t 720h

        invalidate(invalidate_tags("t"))
            SMEMBERS gocache_tag_t  →  DEL member (each)
            DEL gocache_tag_t

Examples:
    >>> import redis
    >>> store = RedisStore(redis.Redis(), expiration(600))   # doctest: +SKIP
    >>> store = RedisStore.from_url("redis://localhost:6379/0")   # doctest: +SKIP

Guardrails:
    ❌ DON'T: Point two unrelated applications at one DB and call ``clear()``
    ✅ DO: Give each cache its own database; ``clear()`` is FLUSHALL

Tags:
    cache, redis, distributed, tags, polycache

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Protocol

from redis.exceptions import DataError, RedisError

from polycache.errors import (
    BackendError,
    SerializationError,
    categorize_error,
    is_retryable,
)
from polycache.logging import get_logger
from polycache.options import Option, Options
from polycache.store.base import TAG_TTL, BaseStore

logger = get_logger(__name__)

REDIS_TYPE = "redis"


class RedisClientInterface(Protocol):
    """Subset of the redis-py command API used by ``RedisStore``."""

    def get(self, name: str) -> Any: ...

    def ttl(self, name: str) -> int: ...

    def expire(self, name: str, time: int | timedelta) -> Any: ...

    def set(self, name: str, value: Any, ex: int | timedelta | None = None) -> Any: ...

    def delete(self, *names: str) -> int: ...

    def flushall(self) -> Any: ...

    def sadd(self, name: str, *values: Any) -> int: ...

    def smembers(self, name: str) -> set[Any]: ...


def _as_str(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


class RedisStore(BaseStore):
    """Store backed by Redis, using server-side sets for tag indexes."""

    store_type = REDIS_TYPE
    client_errors = (RedisError,)

    @classmethod
    def from_url(cls, url: str = "redis://localhost:6379/0", *options: Option) -> RedisStore:
        """Build the client with ``redis.from_url`` and wrap it."""
        import redis

        return cls(redis.from_url(url, decode_responses=False), *options)

    def get(self, key: str) -> Any:
        with self._backend_call("get", key):
            value = self._client.get(key)
        if value is None:
            raise self._not_found(key)
        return value

    def get_with_ttl(self, key: str) -> tuple[Any, timedelta]:
        with self._backend_call("get_with_ttl", key):
            value = self._client.get(key)
            if value is None:
                raise self._not_found(key, "get_with_ttl")
            ttl = self._client.ttl(key)

        # -1 (no expiry) and -2 (gone since GET) both report zero
        seconds = ttl if isinstance(ttl, int) and ttl > 0 else 0
        return value, timedelta(seconds=seconds)

    def _write(self, key: str, value: Any, options: Options) -> None:
        ex = options.expiration if options.expiration > timedelta(0) else None
        with self._backend_call("set", key):
            try:
                self._client.set(key, value, ex=ex)
            except DataError as exc:
                raise SerializationError(
                    f"redis cannot store value of type {type(value).__name__}: {exc}", cause=exc
                ).with_context(operation="set", key=key, backend=self.store_type) from exc

    def delete(self, key: str) -> None:
        with self._backend_call("delete", key):
            self._client.delete(key)

    def clear(self) -> None:
        with self._backend_call("clear"):
            self._client.flushall()

    def _add_tag_member(self, index_key: str, key: str) -> None:
        with self._backend_call("set_tags", index_key):
            self._client.sadd(index_key, key)
            self._client.expire(index_key, TAG_TTL)

    def _tag_members(self, index_key: str) -> list[str]:
        with self._backend_call("invalidate", index_key):
            members = self._client.smembers(index_key)
        return sorted(_as_str(member) for member in members)

    def _after_invalidate(self, index_key: str) -> None:
        try:
            self.delete(index_key)
        except BackendError as exc:
            logger.warning(
                "tag_index_delete_failed",
                backend=self.store_type,
                key=index_key,
                error=str(exc),
                category=categorize_error(exc).value,
                retryable=is_retryable(exc),
            )


__all__ = ["REDIS_TYPE", "RedisClientInterface", "RedisStore"]
