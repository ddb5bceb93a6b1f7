"""
Memcached-backed store (pymemcache).

Memcached has no set type, so each tag index is a comma-delimited byte
string. The read-modify-write that appends a member uses memcached's own
compare-and-swap (``gets`` / ``cas``, ``add`` for a brand-new index), so
concurrent writers tagging different keys cannot drop each other's
additions. A write that keeps losing the race is retried a bounded number
of times and then logged as a failed index update.

Examples:
    >>> from pymemcache.client.base import Client
    >>> store = MemcacheStore(Client(("localhost", 11211)))   # doctest: +SKIP
    >>> store.set("page:/home", b"<html>...", expiration(30), tags("pages"))   # doctest: +SKIP

Guardrails:
    ❌ DON'T: Store Python objects directly (memcached holds bytes)
    ✅ DO: Wrap the cache in ``Marshaler`` for structured values

Tags:
    cache, memcached, pymemcache, distributed, cas, polycache

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import math
from datetime import timedelta
from typing import Any, Protocol

from pymemcache.exceptions import MemcacheError

from polycache.errors import BackendError
from polycache.options import Option, Options
from polycache.store.base import (
    TAG_TTL,
    EmulatedTagStore,
    decode_members,
    encode_members,
    to_bytes,
)

MEMCACHE_TYPE = "memcache"
DEFAULT_CAS_RETRIES = 5


class MemcacheClientInterface(Protocol):
    """Subset of ``pymemcache.client.base.Client`` used by ``MemcacheStore``."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def gets(self, key: str) -> tuple[Any, Any]: ...

    def set(self, key: str, value: Any, expire: int = 0, noreply: bool | None = None) -> bool: ...

    def add(self, key: str, value: Any, expire: int = 0, noreply: bool | None = None) -> bool: ...

    def cas(self, key: str, value: Any, cas: Any, expire: int = 0, noreply: bool = False) -> bool | None: ...

    def delete(self, key: str, noreply: bool | None = None) -> bool: ...

    def flush_all(self, delay: int = 0, noreply: bool | None = None) -> bool: ...


def _expire_seconds(ttl: timedelta) -> int:
    # memcached reads 0 as "never", so a sub-second TTL rounds up
    return math.ceil(ttl.total_seconds()) if ttl > timedelta(0) else 0


class MemcacheStore(EmulatedTagStore):
    """Store backed by memcached through pymemcache."""

    store_type = MEMCACHE_TYPE
    client_errors = (MemcacheError, OSError)

    def __init__(
        self,
        client: MemcacheClientInterface,
        *options: Option,
        cas_retries: int = DEFAULT_CAS_RETRIES,
    ):
        super().__init__(client, *options)
        self._cas_retries = cas_retries

    def get(self, key: str) -> Any:
        with self._backend_call("get", key):
            value = self._client.get(key)
        if value is None:
            raise self._not_found(key)
        return value

    def get_with_ttl(self, key: str) -> tuple[Any, timedelta]:
        # memcached does not report remaining lifetimes
        return self.get(key), timedelta(0)

    def _write(self, key: str, value: Any, options: Options) -> None:
        payload = to_bytes(value, key=key, backend=self.store_type)
        with self._backend_call("set", key):
            stored = self._client.set(
                key, payload, expire=_expire_seconds(options.expiration), noreply=False
            )
        if not stored:
            raise BackendError(f"memcache did not store key {key!r}").with_context(
                operation="set", key=key, backend=self.store_type
            )

    def delete(self, key: str) -> None:
        with self._backend_call("delete", key):
            self._client.delete(key, noreply=False)

    def clear(self) -> None:
        with self._backend_call("clear"):
            self._client.flush_all(noreply=False)

    def _add_tag_member(self, index_key: str, key: str) -> None:
        expire = _expire_seconds(TAG_TTL)

        with self._backend_call("set_tags", index_key):
            for _ in range(self._cas_retries):
                raw, token = self._client.gets(index_key)
                if raw is None:
                    if self._client.add(index_key, encode_members([key]), expire=expire, noreply=False):
                        return
                    continue

                members = decode_members(raw)
                if key in members:
                    return
                members.append(key)
                if self._client.cas(index_key, encode_members(members), token, expire=expire, noreply=False):
                    return

        raise BackendError(
            f"tag index {index_key!r} kept changing after {self._cas_retries} attempts"
        ).with_context(operation="set_tags", key=key, backend=self.store_type)


__all__ = ["MEMCACHE_TYPE", "MemcacheClientInterface", "MemcacheStore"]
