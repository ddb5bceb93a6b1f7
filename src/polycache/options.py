"""
Per-call store options and their resolution.

Options are built by folding an ordered list of mutators over a zero-valued
``Options`` record. Each mutator overwrites exactly one field, so the last
mutator for a field wins; lists are replaced, never merged:

    store.set("k", "v", tags("a"), tags("b"))   # tags == ["b"]

A store keeps the ``Options`` built from its constructor mutators as its
default record. That record is used wholesale when a call passes no
mutators at all, and ignored entirely as soon as the call passes one.

Examples:
    >>> opts = resolve_options([expiration(5), tags("users", "admin")])
    >>> opts.expiration
    datetime.timedelta(seconds=5)
    >>> opts.tags
    ['users', 'admin']

    >>> defaults = resolve_options([expiration(6)])
    >>> resolve_options([], defaults).expiration
    datetime.timedelta(seconds=6)
    >>> resolve_options([cost(2)], defaults).expiration
    datetime.timedelta(0)

Tags:
    options, configuration, functional-options, polycache

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Any

from polycache.errors import InvalidConfigError


@dataclass
class Options:
    """Resolved configuration for a single ``set`` call.

    Attributes:
        expiration: Time-to-live; ``timedelta(0)`` means no expiry.
        cost: Weight hint, honoured by cost-aware stores only.
        tags: Tag names to index the key under.
        ctx: Cancellation/deadline token, forwarded untouched.
    """

    expiration: timedelta = timedelta(0)
    cost: int = 0
    tags: list[str] = field(default_factory=list)
    ctx: Any = None


@dataclass
class InvalidateOptions:
    """Resolved configuration for a single ``invalidate`` call."""

    tags: list[str] = field(default_factory=list)


Option = Callable[[Options], None]
InvalidateOption = Callable[[InvalidateOptions], None]


def _to_timedelta(value: float | timedelta) -> timedelta:
    if isinstance(value, timedelta):
        result = value
    else:
        result = timedelta(seconds=value)
    if result < timedelta(0):
        raise InvalidConfigError("expiration", value, "Expiration must not be negative")
    return result


def expiration(value: float | timedelta) -> Option:
    """Set the entry expiration (seconds or ``timedelta``)."""
    ttl = _to_timedelta(value)

    def apply(o: Options) -> None:
        o.expiration = ttl

    return apply


def cost(value: int) -> Option:
    """Set the cost weight used by cost-aware stores."""
    if value < 0:
        raise InvalidConfigError("cost", value, "Cost must not be negative")

    def apply(o: Options) -> None:
        o.cost = value

    return apply


def tags(*names: str) -> Option:
    """Index the key under the given tags (replaces any earlier tag list)."""
    tag_list = list(names)

    def apply(o: Options) -> None:
        o.tags = list(tag_list)

    return apply


def ctx(token: Any) -> Option:
    """Attach a cancellation/deadline token for network clients."""

    def apply(o: Options) -> None:
        o.ctx = token

    return apply


def invalidate_tags(*names: str) -> InvalidateOption:
    """Select the tags whose member keys ``invalidate`` should delete."""
    tag_list = list(names)

    def apply(o: InvalidateOptions) -> None:
        o.tags = list(tag_list)

    return apply


def resolve_options(
    mutators: Sequence[Option], defaults: Options | None = None
) -> Options:
    """Fold *mutators* over a fresh ``Options``.

    With no mutators, a copy of *defaults* is returned instead (or a
    zero-valued record when there are no defaults either).
    """
    if not mutators:
        if defaults is None:
            return Options()
        return replace(defaults, tags=list(defaults.tags))

    options = Options()
    for mutator in mutators:
        mutator(options)
    return options


def resolve_invalidate_options(mutators: Sequence[InvalidateOption]) -> InvalidateOptions:
    """Fold *mutators* over a fresh ``InvalidateOptions``."""
    options = InvalidateOptions()
    for mutator in mutators:
        mutator(options)
    return options


__all__ = [
    "Options",
    "InvalidateOptions",
    "Option",
    "InvalidateOption",
    "expiration",
    "cost",
    "tags",
    "ctx",
    "invalidate_tags",
    "resolve_options",
    "resolve_invalidate_options",
]
