from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeAlias


@dataclass(frozen=True, slots=True)
class Constant:
    """A resolver that always produces the same value."""

    value: Any

    def __call__(self, *_args: Any, **_kwargs: Any) -> Any:
        return self.value


@dataclass(frozen=True, slots=True)
class Deferred:
    """A resolver that computes its value by calling ``func``."""

    func: Callable[..., Any]

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.func(*args, **kwargs)


Resolver: TypeAlias = Constant | Deferred
"""Either a constant value or a deferred computation."""


def to_resolver(value: Any) -> Resolver:
    """Classify a user supplied value as a ``Constant`` or ``Deferred`` resolver.

    Args:
        value: A resolver, a callable, or any plain value.

    Returns:
        ``value`` itself when it already is a resolver, ``Deferred(value)`` for
        callables and ``Constant(value)`` for everything else.

    """
    if isinstance(value, Constant | Deferred):
        return value
    if callable(value):
        return Deferred(value)
    return Constant(value)

