from __future__ import annotations

from enum import IntFlag
from typing import TYPE_CHECKING, Any

from diforge.resolvers import Resolver, to_resolver

if TYPE_CHECKING:
    from diforge.container import Container

_UNSET: Any = object()


class BindingOptions(IntFlag):
    """Bit flags describing how a binding behaves."""

    NONE = 0
    SHARED = 1
    """Cache the produced value and reuse it for every resolution."""

    PROTECTED = 2
    """Refuse to replace the factory once the binding exists."""


class LifecycleEntry:
    """Holds one factory together with its sharing and protection flags.

    A shared entry memoizes the value produced by its factory. A protected
    entry keeps its factory for the rest of its life: later calls to
    ``set_callback`` are ignored and report ``False``.
    """

    __slots__ = ("_callback", "_instance", "_protected", "_shared")

    def __init__(
        self,
        callback: Any,
        *,
        shared: bool = False,
        protected: bool = False,
    ) -> None:
        self._callback: Resolver = to_resolver(callback)
        self._instance: Any = _UNSET
        self._shared = shared
        self._protected = protected

    def get(self, container: Container | None = None, *, force_new: bool = False) -> Any:
        """Produce the bound value.

        Args:
            container: Passed to the factory as its only argument.
            force_new: For shared entries, rebuild and replace the cached value.

        Returns:
            The cached value for shared entries, otherwise a freshly produced one.

        """
        if not self._shared:
            return self._callback(container)

        if self._instance is _UNSET or force_new:
            self._instance = self._callback(container)

        return self._instance

    @property
    def callback(self) -> Resolver:
        return self._callback

    def set_callback(self, callback: Any) -> bool:
        """Replace the factory unless the entry is protected.

        Returns:
            ``True`` when the factory was replaced, ``False`` when the entry is
            protected and the call was ignored.

        """
        if self._protected:
            return False

        self._callback = to_resolver(callback)
        return True

    def is_shared(self) -> bool:
        return self._shared

    def set_shared(self, shared: bool) -> bool:  # noqa: FBT001
        self._shared = shared
        return self._shared

    def is_protected(self) -> bool:
        return self._protected

    def set_protected(self, protected: bool) -> bool:  # noqa: FBT001
        self._protected = protected
        return self._protected

    @property
    def shared(self) -> bool:
        return self._shared

    @property
    def protected(self) -> bool:
        return self._protected

    @property
    def has_instance(self) -> bool:
        """Whether a shared value is currently memoized."""
        return self._instance is not _UNSET

    def reset(self) -> None:
        """Drop the memoized value so the next ``get`` rebuilds it."""
        self._instance = _UNSET

    def __repr__(self) -> str:
        return (
            f"LifecycleEntry(callback={self._callback!r}, "
            f"shared={self._shared}, protected={self._protected})"
        )
