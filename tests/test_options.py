"""Tests for polycache.options: mutators and resolution precedence."""

from datetime import timedelta

import pytest

from polycache.errors import InvalidConfigError
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


class TestMutators:
    """Each mutator writes exactly one field."""

    def test_expiration_from_seconds(self):
        opts = resolve_options([expiration(5)])
        assert opts.expiration == timedelta(seconds=5)

    def test_expiration_from_timedelta(self):
        opts = resolve_options([expiration(timedelta(minutes=2))])
        assert opts.expiration == timedelta(minutes=2)

    def test_negative_expiration_rejected(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            expiration(-1)
        assert exc_info.value.key == "expiration"

    def test_negative_cost_rejected(self):
        with pytest.raises(InvalidConfigError):
            cost(-4)

    def test_cost(self):
        assert resolve_options([cost(7)]).cost == 7

    def test_tags(self):
        assert resolve_options([tags("users", "admin")]).tags == ["users", "admin"]

    def test_ctx_token_is_forwarded_untouched(self):
        token = object()
        assert resolve_options([ctx(token)]).ctx is token

    def test_mutator_reuse_does_not_share_lists(self):
        mutator = tags("a")
        first = resolve_options([mutator])
        first.tags.append("z")

        second = resolve_options([mutator])
        assert second.tags == ["a"]


class TestResolveOptions:
    """Fold order and default record handling."""

    def test_zero_valued_without_anything(self):
        assert resolve_options([]) == Options()

    def test_last_write_wins(self):
        opts = resolve_options([expiration(1), expiration(9)])
        assert opts.expiration == timedelta(seconds=9)

    def test_tags_replaced_not_merged(self):
        opts = resolve_options([tags("a"), tags("b")])
        assert opts.tags == ["b"]

    def test_defaults_used_when_call_has_no_mutators(self):
        defaults = resolve_options([expiration(6), tags("x")])

        resolved = resolve_options([], defaults)

        assert resolved.expiration == timedelta(seconds=6)
        assert resolved.tags == ["x"]
        assert resolved is not defaults
        assert resolved.tags is not defaults.tags

    def test_defaults_ignored_once_any_mutator_is_given(self):
        defaults = resolve_options([expiration(6), tags("x")])

        resolved = resolve_options([cost(2)], defaults)

        assert resolved.expiration == timedelta(0)
        assert resolved.tags == []
        assert resolved.cost == 2


class TestInvalidateOptions:
    def test_empty(self):
        assert resolve_invalidate_options([]) == InvalidateOptions()

    def test_invalidate_tags(self):
        opts = resolve_invalidate_options([invalidate_tags("users", "posts")])
        assert opts.tags == ["users", "posts"]

    def test_last_write_wins(self):
        opts = resolve_invalidate_options([invalidate_tags("a"), invalidate_tags("b")])
        assert opts.tags == ["b"]
