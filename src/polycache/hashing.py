"""
Deterministic key derivation for non-string cache keys.

Callers may key the cache by anything structured: a tuple of query
parameters, a dataclass, a pydantic model, a dict. ``derive_key`` turns
such a value into a stable string key; strings are used verbatim so
human-readable keys stay readable in the backend.

Manifesto:
    Cache keys must survive process restarts and cross machine boundaries:
    - **Deterministic:** Same structure → same key, always
    - **Order-free:** Dict key order and set iteration order never matter
    - **Identity-free:** No ``id()``, no ``repr()`` with memory addresses
    - **Readable when possible:** String keys pass through unchanged

Architecture:
    ::

        derive_key(value)
        ├── str        → value (identity)
        └── otherwise  → canonicalize(value)
                           ↓
                         json.dumps(separators=(",", ":"))
                           ↓
                         sha256 → hexdigest[:32]

    ``canonicalize`` keeps JSON scalars as they are and turns everything
    else into a ``[type_tag, payload]`` pair::

        {1: "a"}          → ["dict", [[1, "a"]]]
        {"1": "a"}        → ["dict", [["1", "a"]]]
        ["x", 2]          → ["list", ["x", 2]]
        b"ab"             → ["bytes", "6162"]
        {3, 1}            → ["set", [1, 3]]

    The tag keeps values of different types apart even when their JSON
    text would otherwise match (an int key and a str key, bytes and their
    hex string, a list that happens to look like a tagged pair).

Type sensitivity:
    ``1``, ``1.0`` and ``True`` compare equal in Python but derive three
    different keys, because JSON renders them as ``1``, ``1.0`` and
    ``true``. The same holds for ``{1: x}`` and ``{True: x}``. Normalize
    numeric key parts yourself if they may arrive as mixed types.

    Tuples hash like lists, dataclasses and pydantic models hash like the
    dict of their fields, and enum members hash like their ``value``.

Examples:
    >>> derive_key("user:42")
    'user:42'
    >>> derive_key({"a": 1, "b": 2}) == derive_key({"b": 2, "a": 1})
    True
    >>> derive_key({1: "x"}) == derive_key({"1": "x"})
    False
    >>> len(derive_key(("search", "python", 2)))
    32

Tags:
    hashing, cache-key, determinism, polycache

Doc-Types:
    - API Reference
"""

import dataclasses
import hashlib
import json
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from polycache.errors import SerializationError

KEY_LENGTH = 32


def canonicalize(value: Any) -> Any:
    """
    Convert a key value into a JSON-ready structure with no ordering ambiguity.

    JSON scalars (``None``, bools, ints, floats, strings) are returned as
    is. Every other supported value becomes a ``[type_tag, payload]`` pair.
    Dict items and set members are sorted by the canonical JSON text of
    their canonical form, so insertion and iteration order never leak into
    the result.

    Raises:
        SerializationError: For values with no structural representation
            (functions, sockets, objects without ``__dict__``).
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        # -0.0 == 0.0, so both must hash alike
        return value + 0.0
    if isinstance(value, Enum):
        return canonicalize(value.value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ["bytes", bytes(value).hex()]
    if isinstance(value, datetime):
        return ["datetime", value.isoformat()]
    if isinstance(value, date):
        return ["date", value.isoformat()]
    if isinstance(value, time):
        return ["time", value.isoformat()]
    if isinstance(value, timedelta):
        return ["timedelta", value.total_seconds()]
    if isinstance(value, Decimal):
        return ["decimal", str(value)]
    if isinstance(value, UUID):
        return ["uuid", str(value)]
    if isinstance(value, BaseModel):
        return canonicalize(value.model_dump(mode="python"))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return canonicalize(
            {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        )
    if isinstance(value, dict):
        items = [[canonicalize(k), canonicalize(v)] for k, v in value.items()]
        return ["dict", sorted(items, key=_dumps)]
    if isinstance(value, (list, tuple)):
        return ["list", [canonicalize(v) for v in value]]
    if isinstance(value, (set, frozenset)):
        return ["set", sorted((canonicalize(v) for v in value), key=_dumps)]
    if hasattr(value, "__dict__") and not callable(value):
        return canonicalize(vars(value))
    raise SerializationError(
        f"Cannot derive a cache key from value of type {type(value).__name__}"
    ).with_context(operation="derive_key")


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def compute_hash(*values: Any, length: int = KEY_LENGTH) -> str:
    """
    Compute a deterministic hex digest from canonicalized values.

    Args:
        *values: Values to hash (canonicalized, then JSON encoded)
        length: Hex digest length (default 32 = 128 bits)

    Returns:
        Hex string of specified length
    """
    content = _dumps([canonicalize(v) for v in values])
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:length]


def derive_key(value: Any) -> str:
    """
    Derive the backend cache key for a caller-supplied key value.

    Strings are returned unchanged; everything else is hashed from its
    canonical structure.

    Examples:
        >>> derive_key("my-Key")
        'my-Key'
        >>> derive_key({"hello": "world"}) == derive_key({"hello": "world"})
        True
    """
    if isinstance(value, str):
        return value
    return compute_hash(value)


__all__ = ["KEY_LENGTH", "canonicalize", "compute_hash", "derive_key"]
