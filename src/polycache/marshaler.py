"""
Value codec: msgpack serialization in front of any cache.

Byte-oriented stores (memcache, disk) hold ``bytes`` only, and even object
stores are easier to share across processes when values are encoded.
``Marshaler`` packs values with msgpack on ``set`` and unpacks them on
``get``. Payloads that come back as something other than ``bytes``/``str``
(a native object written straight into an in-process store) are returned
unchanged.

Examples:
    >>> from dataclasses import dataclass
    >>> from polycache.cache import Cache
    >>> from polycache.store import MemoryStore
    >>> @dataclass
    ... class Book:
    ...     title: str
    ...     year: int
    >>> marshaler = Marshaler(Cache(MemoryStore()))
    >>> marshaler.set("book:1", Book("Dune", 1965))
    >>> marshaler.get("book:1")
    {'title': 'Dune', 'year': 1965}
    >>> marshaler.with_return_type(Book).get("book:1")
    Book(title='Dune', year=1965)

Guardrails:
    ❌ DON'T: Expect tuples back (msgpack round-trips them as lists)
    ✅ DO: Bind a return type to rebuild dataclasses / pydantic models

Tags:
    serialization, msgpack, codec, polycache

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import dataclasses
from typing import Any

import msgpack
from pydantic import BaseModel

from polycache.errors import SerializationError
from polycache.options import InvalidateOption, Option
from polycache.protocols import CacheInterface


def _pack_default(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Cannot serialize object of type {type(obj).__name__}")


def pack(value: Any) -> bytes:
    try:
        return msgpack.packb(value, use_bin_type=True, default=_pack_default)
    except (TypeError, ValueError, OverflowError) as exc:
        raise SerializationError(f"Unable to marshal value: {exc}", cause=exc) from exc


def unpack(payload: bytes) -> Any:
    try:
        return msgpack.unpackb(payload, raw=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Unable to unmarshal value: {exc}", cause=exc) from exc


def _rebuild(data: Any, return_type: Any) -> Any:
    try:
        if isinstance(return_type, type) and issubclass(return_type, BaseModel):
            return return_type.model_validate(data)
        if dataclasses.is_dataclass(return_type) and isinstance(data, dict):
            return return_type(**data)
        return return_type(data)
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"Unable to build {getattr(return_type, '__name__', return_type)!s} from cached value",
            cause=exc,
        ) from exc


class Marshaler:
    """Packs values on ``set`` and unpacks them on ``get``."""

    def __init__(self, cache: CacheInterface, return_type: Any = None):
        self._cache = cache
        self._return_type = return_type

    @property
    def cache(self) -> CacheInterface:
        return self._cache

    def with_return_type(self, return_type: Any) -> Marshaler:
        """A marshaler over the same cache that rebuilds values as *return_type*."""
        return Marshaler(self._cache, return_type)

    def get(self, key: Any, return_type: Any = None) -> Any:
        result = self._cache.get(key)

        if isinstance(result, str):
            result = result.encode("utf-8")
        if not isinstance(result, (bytes, bytearray, memoryview)):
            return result

        try:
            data = unpack(bytes(result))
        except SerializationError as exc:
            raise exc.with_context(operation="get", key=str(key))

        target = return_type if return_type is not None else self._return_type
        if target is None:
            return data
        return _rebuild(data, target)

    def set(self, key: Any, value: Any, *options: Option) -> None:
        try:
            payload = pack(value)
        except SerializationError as exc:
            raise exc.with_context(operation="set", key=str(key))
        self._cache.set(key, payload, *options)

    def delete(self, key: Any) -> None:
        self._cache.delete(key)

    def invalidate(self, *options: InvalidateOption) -> None:
        self._cache.invalidate(*options)

    def clear(self) -> None:
        self._cache.clear()

    def get_type(self) -> str:
        return self._cache.get_type()


__all__ = ["pack", "unpack", "Marshaler"]
