"""
Shared store machinery: option resolution, error wrapping, and the tag index.

Every backend adapter extends ``BaseStore`` and supplies the raw primitives
(``get``, ``get_with_ttl``, ``_write``, ``delete``, ``clear``) plus the two
tag index hooks (``_add_tag_member``, ``_tag_members``). ``BaseStore`` owns
the behavior that must be identical across backends: option precedence,
best-effort tag indexing after a successful write, and per-tag bulk
invalidation that never fails on a single bad member.

Manifesto:
    Tag invalidation is the one thing no backend gives us uniformly. Redis
    has server-side sets; memcache, cachetools and diskcache only have
    key/value. One template keeps the semantics the same everywhere:

    - **Write first:** The value write decides the outcome of ``set``
    - **Index second:** Tag index failures are logged, never raised
    - **Invalidate by tag:** Member delete failures are logged, loop continues
    - **Unreadable index:** Means "nothing to invalidate" for that tag

Architecture:
    ::

        BaseStore (ABC)
        ├── RedisStore                 native sets (SADD / SMEMBERS / EXPIRE)
        └── EmulatedTagStore           read-modify-write under a guard
            ├── MemoryStore            members as a Python set object
            ├── WeightedStore          members as b"k1,k2" (lock)
            ├── MemcacheStore          members as b"k1,k2" (gets / cas)
            └── DiskStore              members as b"k1,k2" (transact)

        Tag index entry:  gocache_tag_<tag>  →  members   (TTL 720h)

Examples:
    >>> tag_key("users")
    'gocache_tag_users'
    >>> decode_members(b"k1,k2")
    ['k1', 'k2']
    >>> encode_members(["k1", "k2"])
    b'k1,k2'

Guardrails:
    ❌ DON'T: Change TAG_KEY_PATTERN (other producers share the namespace)
    ✅ DO: Keep tag keys as ``gocache_tag_<tag>`` across every backend

Tags:
    store, tags, invalidation, template-method, polycache

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from datetime import timedelta
from typing import Any

from polycache.errors import (
    BackendError,
    CacheError,
    NotFoundError,
    SerializationError,
    categorize_error,
    is_retryable,
)
from polycache.logging import get_logger
from polycache.options import (
    InvalidateOption,
    Option,
    Options,
    resolve_invalidate_options,
    resolve_options,
)

logger = get_logger(__name__)

TAG_KEY_PATTERN = "gocache_tag_%s"
TAG_TTL = timedelta(hours=720)
TAG_SEPARATOR = ","


def tag_key(tag: str) -> str:
    """Backend key holding the member list of *tag*."""
    return TAG_KEY_PATTERN % tag


def decode_members(raw: Any) -> list[str]:
    """Parse a delimited member list; anything unparseable is empty."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError:
            return []
    if not isinstance(raw, str):
        return []
    return [member for member in raw.split(TAG_SEPARATOR) if member]


def encode_members(members: list[str]) -> bytes:
    return TAG_SEPARATOR.join(members).encode("utf-8")


def to_bytes(value: Any, *, key: str, backend: str) -> bytes:
    """Coerce a value for byte-oriented backends (``str`` is UTF-8 encoded)."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise SerializationError(
        f"{backend} store only accepts bytes or str values, got {type(value).__name__}"
    ).with_context(operation="set", key=key, backend=backend)


class BaseStore(ABC):
    """
    Template for backend adapters.

    Subclasses set ``store_type`` and ``client_errors`` (the client
    library's exception types, wrapped into ``BackendError`` by
    ``_backend_call``).
    """

    store_type: str = ""
    client_errors: tuple[type[BaseException], ...] = ()

    def __init__(self, client: Any, *options: Option):
        self._client = client
        self._options = resolve_options(options)

    @property
    def client(self) -> Any:
        return self._client

    @property
    def options(self) -> Options:
        """Default options, used when ``set`` is called without any."""
        return self._options

    def get_type(self) -> str:
        return self.store_type

    # -- primitives ---------------------------------------------------------

    @abstractmethod
    def get(self, key: str) -> Any: ...

    @abstractmethod
    def get_with_ttl(self, key: str) -> tuple[Any, timedelta]: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...

    @abstractmethod
    def _write(self, key: str, value: Any, options: Options) -> None:
        """Store *value* honouring ``options.expiration`` / ``options.cost``."""

    # -- tag index hooks ----------------------------------------------------

    @abstractmethod
    def _add_tag_member(self, index_key: str, key: str) -> None: ...

    @abstractmethod
    def _tag_members(self, index_key: str) -> list[str]:
        """Member keys of a tag index; raises ``CacheError`` if unreadable."""

    def _after_invalidate(self, index_key: str) -> None:
        """Hook run once a tag's members are deleted (default: keep the index)."""

    # -- uniform operations -------------------------------------------------

    def set(self, key: str, value: Any, *options: Option) -> None:
        resolved = resolve_options(options, self._options)
        self._write(key, value, resolved)

        if resolved.tags:
            self._set_tags(key, resolved.tags)

    def _set_tags(self, key: str, tags: list[str]) -> None:
        for tag in tags:
            try:
                self._add_tag_member(tag_key(tag), key)
            except CacheError as exc:
                logger.warning(
                    "tag_index_update_failed",
                    backend=self.store_type,
                    tag=tag,
                    key=key,
                    error=str(exc),
                    category=categorize_error(exc).value,
                    retryable=is_retryable(exc),
                )

    def invalidate(self, *options: InvalidateOption) -> None:
        resolved = resolve_invalidate_options(options)

        for tag in resolved.tags:
            index_key = tag_key(tag)
            try:
                members = self._tag_members(index_key)
            except CacheError as exc:
                logger.debug(
                    "tag_index_unreadable",
                    backend=self.store_type,
                    tag=tag,
                    error=str(exc),
                    category=categorize_error(exc).value,
                    retryable=is_retryable(exc),
                )
                continue

            for member in members:
                try:
                    self.delete(member)
                except CacheError as exc:
                    logger.warning(
                        "tag_member_delete_failed",
                        backend=self.store_type,
                        tag=tag,
                        key=member,
                        error=str(exc),
                        category=categorize_error(exc).value,
                        retryable=is_retryable(exc),
                    )

            self._after_invalidate(index_key)
            logger.debug(
                "tag_invalidated", backend=self.store_type, tag=tag, members=len(members)
            )

    # -- helpers ------------------------------------------------------------

    @contextmanager
    def _backend_call(self, operation: str, key: str | None = None) -> Iterator[None]:
        try:
            yield
        except self.client_errors as exc:
            raise BackendError(
                f"{self.store_type} {operation} failed: {exc}", cause=exc
            ).with_context(operation=operation, key=key, backend=self.store_type) from exc

    def _not_found(self, key: str, operation: str = "get") -> NotFoundError:
        return NotFoundError(f"Value not found in {self.store_type} store").with_context(
            operation=operation, key=key, backend=self.store_type
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(client={self._client!r})"


class EmulatedTagStore(BaseStore):
    """
    Tag index kept as an ordinary cache entry.

    Adding a member is read, check, append, write back. The sequence runs
    under ``_tag_guard()``: a per-store lock by default, overridden by
    backends that offer something stronger.
    """

    def __init__(self, client: Any, *options: Option):
        super().__init__(client, *options)
        self._tag_lock = threading.Lock()

    def _tag_guard(self) -> AbstractContextManager[Any]:
        return self._tag_lock

    def _encode_members(self, members: list[str]) -> Any:
        return encode_members(members)

    def _decode_members(self, raw: Any) -> list[str]:
        return decode_members(raw)

    def _read_members(self, index_key: str) -> list[str]:
        try:
            raw = self.get(index_key)
        except NotFoundError:
            return []
        return self._decode_members(raw)

    def _add_tag_member(self, index_key: str, key: str) -> None:
        with self._tag_guard():
            members = self._read_members(index_key)
            if key in members:
                return
            members.append(key)
            self._write(index_key, self._encode_members(members), Options(expiration=TAG_TTL))

    def _tag_members(self, index_key: str) -> list[str]:
        return self._decode_members(self.get(index_key))


__all__ = [
    "TAG_KEY_PATTERN",
    "TAG_TTL",
    "TAG_SEPARATOR",
    "tag_key",
    "decode_members",
    "encode_members",
    "to_bytes",
    "BaseStore",
    "EmulatedTagStore",
]
