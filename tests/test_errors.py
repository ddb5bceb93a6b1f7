"""Tests for polycache.errors module."""

import pytest

from polycache.errors import (
    BackendError,
    CacheError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    NotFoundError,
    SerializationError,
    categorize_error,
    is_retryable,
)


class TestErrorContext:
    def test_empty_context(self):
        ctx = ErrorContext()
        assert ctx.operation is None
        assert ctx.to_dict() == {}

    def test_to_dict_skips_none_and_merges_metadata(self):
        ctx = ErrorContext(operation="set", key="k1", metadata={"attempt": 2})
        assert ctx.to_dict() == {"operation": "set", "key": "k1", "attempt": 2}


class TestHierarchy:
    @pytest.mark.parametrize(
        "error_cls,category,retryable",
        [
            (NotFoundError, ErrorCategory.NOT_FOUND, False),
            (BackendError, ErrorCategory.BACKEND, True),
            (SerializationError, ErrorCategory.SERIALIZATION, False),
            (ConfigError, ErrorCategory.CONFIG, False),
            (CacheError, ErrorCategory.INTERNAL, False),
        ],
    )
    def test_defaults(self, error_cls, category, retryable):
        error = error_cls("boom")
        assert isinstance(error, CacheError)
        assert error.category == category
        assert error.retryable is retryable

    def test_overrides(self):
        error = BackendError("boom", retryable=False, category=ErrorCategory.UNKNOWN)
        assert error.retryable is False
        assert error.category == ErrorCategory.UNKNOWN

    def test_invalid_config_error(self):
        error = InvalidConfigError("cost", -1)
        assert isinstance(error, ConfigError)
        assert error.key == "cost"
        assert error.value == -1
        assert "cost" in str(error)


class TestContextAndChaining:
    def test_with_context_is_fluent(self):
        error = NotFoundError("missing").with_context(
            operation="get", key="user:1", backend="memory", shard=3
        )
        assert error.context.operation == "get"
        assert error.context.key == "user:1"
        assert error.context.backend == "memory"
        assert error.context.metadata == {"shard": 3}

    def test_cause_is_chained(self):
        original = ConnectionError("refused")
        error = BackendError("redis get failed", cause=original)
        assert error.cause is original
        assert error.__cause__ is original

    def test_to_dict(self):
        error = BackendError("failed", cause=ValueError("bad")).with_context(
            operation="set", key="k"
        )
        data = error.to_dict()
        assert data["error_type"] == "BackendError"
        assert data["category"] == "BACKEND"
        assert data["retryable"] is True
        assert data["context"] == {"operation": "set", "key": "k"}
        assert data["cause"] == "bad"

    def test_repr(self):
        assert repr(NotFoundError("gone")) == "NotFoundError('gone', category=NOT_FOUND)"


class TestHelpers:
    def test_is_retryable(self):
        assert is_retryable(BackendError("x"))
        assert not is_retryable(NotFoundError("x"))
        assert is_retryable(ConnectionError())
        assert is_retryable(TimeoutError())
        assert not is_retryable(RuntimeError())

    def test_categorize_error(self):
        assert categorize_error(SerializationError("x")) == ErrorCategory.SERIALIZATION
        assert categorize_error(ConnectionError()) == ErrorCategory.BACKEND
        assert categorize_error(ValueError()) == ErrorCategory.SERIALIZATION
        assert categorize_error(RuntimeError()) == ErrorCategory.UNKNOWN
