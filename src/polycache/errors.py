"""
Structured error types for polycache.

Every failure that leaves a store, the stats wrapper, or the value codec is
a ``CacheError`` subclass carrying a category, a retry hint, and an
``ErrorContext`` naming the operation, key, and backend involved. Backend
client exceptions are never re-raised bare: they are wrapped in
``BackendError`` with the original preserved as ``cause`` (and
``__cause__``) so callers can still reach it.

Manifesto:
    - **Typed hierarchy:** NotFound vs. backend failure vs. serialization
    - **Explicit retry semantics:** Backend errors are retryable, misses are not
    - **Rich context:** operation / key / backend on every error
    - **Error chaining:** The client's exception is never lost

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                        CacheError                            │
        │  (category, retryable, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │  NotFoundError      BackendError       SerializationError    │
        │  (NOT_FOUND)        (BACKEND,          (SERIALIZATION)       │
        │                      retryable)                              │
        │                                                              │
        │  ConfigError                                                 │
        │  (CONFIG)                                                    │
        │       │                                                      │
        │  InvalidConfigError                                          │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = NotFoundError("Value not found in memory store").with_context(
    ...     operation="get", key="user:1", backend="memory"
    ... )
    >>> error.context.key
    'user:1'
    >>> error.retryable
    False

    >>> try:
    ...     raise ConnectionError("connection refused")
    ... except ConnectionError as e:
    ...     error = BackendError("redis set failed", cause=e)
    >>> error.retryable
    True

Guardrails:
    ❌ DON'T: Let a redis/pymemcache exception escape a store unwrapped
    ✅ DO: ``raise BackendError(..., cause=exc) from exc``

    ❌ DON'T: Signal a cache miss by returning ``None``
    ✅ DO: Raise ``NotFoundError`` (``None`` is a legitimate cached value)

Tags:
    error-handling, exception-hierarchy, cache, polycache

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        NOT_FOUND: Key absent or expired
        BACKEND: Underlying client failure (network, protocol, rejection)
        SERIALIZATION: Value or key could not be encoded/decoded
        CONFIG: Missing or invalid settings
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    NOT_FOUND = "NOT_FOUND"
    BACKEND = "BACKEND"
    SERIALIZATION = "SERIALIZATION"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a cache error.

    Examples:
        >>> ctx = ErrorContext(operation="set", key="k1", backend="redis")
        >>> ctx.to_dict()
        {'operation': 'set', 'key': 'k1', 'backend': 'redis'}

    Attributes:
        operation: Store operation name (get, set, delete, invalidate, clear)
        key: Derived cache key, when the operation is keyed
        backend: Store type string (``get_type()``)
        tag: Tag name, for tag index operations
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    key: str | None = None
    backend: str | None = None
    tag: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "key", "backend", "tag"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CacheError(Exception):
    """
    Base exception for all polycache errors.

    Subclasses set ``default_category`` and ``default_retryable``; callers
    may override either per instance.

    Examples:
        >>> error = CacheError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["error_type"]
        'CacheError'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CacheError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotFoundError("missing").with_context(operation="get", key=key)
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class NotFoundError(CacheError):
    """Key absent from the backend or expired."""

    default_category = ErrorCategory.NOT_FOUND
    default_retryable = False


class BackendError(CacheError):
    """
    Failure reported by the wrapped backend client.

    Retryable by default: connection resets and timeouts are the common
    case. The client exception is available as ``cause``.
    """

    default_category = ErrorCategory.BACKEND
    default_retryable = True


class SerializationError(CacheError):
    """A key or value could not be encoded or decoded."""

    default_category = ErrorCategory.SERIALIZATION
    default_retryable = False


class ConfigError(CacheError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, CacheError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, CacheError):
        return error.category
    if isinstance(error, (ConnectionError, OSError)):
        return ErrorCategory.BACKEND
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.SERIALIZATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "CacheError",
    "NotFoundError",
    "BackendError",
    "SerializationError",
    "ConfigError",
    "InvalidConfigError",
    "is_retryable",
    "categorize_error",
]
