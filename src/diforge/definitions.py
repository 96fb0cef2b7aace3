from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from diforge.lifecycle import BindingOptions

if TYPE_CHECKING:
    from typing_extensions import Self

    from diforge.container import Container


class Definition(ABC):
    """A value description that a container turns into a value on demand."""

    @abstractmethod
    def resolve(self, container: Container) -> Any: ...


class ObjectBuilderDefinition(Definition):
    """Build ``class_id`` with the given arguments when resolved.

    Positional arguments are bound to the constructor signature, so
    ``create(Widget, "gear")`` and ``create(Widget, name="gear")`` are the same.
    """

    def __init__(
        self,
        class_id: type[Any] | Callable[..., Any],
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
    ) -> None:
        self.class_id = class_id
        self.args = tuple(args)
        self.kwargs = dict(kwargs or {})

    def arguments(self) -> dict[str, Any]:
        if not self.args:
            return dict(self.kwargs)
        bound = inspect.signature(self.class_id).bind_partial(*self.args, **self.kwargs)
        return dict(bound.arguments)

    def resolve(self, container: Container) -> Any:
        return container.new_instance(self.class_id, self.arguments())

    def __repr__(self) -> str:
        return f"ObjectBuilderDefinition({self.class_id!r}, args={self.args!r}, kwargs={self.kwargs!r})"


class StoreDefinition(Definition):
    """Wrap a definition with binding options and post-processing callbacks."""

    def __init__(
        self,
        definition: Definition,
        options: BindingOptions | int = BindingOptions.NONE,
    ) -> None:
        self.definition = definition
        self.options = BindingOptions(options)
        self._extends: list[Callable[[Any, Container], Any]] = []

    def extend(self, callback: Callable[[Any, Container], Any] | None) -> Self:
        """Add ``callback(value, container)``; its return value replaces the value."""
        if callback is not None:
            self._extends.append(callback)
        return self

    def is_shared(self) -> bool:
        return bool(self.options & BindingOptions.SHARED)

    def is_protected(self) -> bool:
        return bool(self.options & BindingOptions.PROTECTED)

    def resolve(self, container: Container) -> Any:
        value = self.definition.resolve(container)
        for callback in self._extends:
            value = callback(value, container)
        return value

    def __repr__(self) -> str:
        return f"StoreDefinition({self.definition!r}, options={self.options!r})"


def create(class_id: type[Any] | Callable[..., Any], *args: Any, **kwargs: Any) -> ObjectBuilderDefinition:
    """Describe a new, unbound instance of ``class_id`` built with the given arguments."""
    return ObjectBuilderDefinition(class_id, args, kwargs)


def share(class_id: type[Any] | Callable[..., Any], *args: Any, **kwargs: Any) -> StoreDefinition:
    """Like ``create``, but the binding receiving it is shared."""
    return StoreDefinition(ObjectBuilderDefinition(class_id, args, kwargs), BindingOptions.SHARED)


def prepare(
    class_id: type[Any],
    extend: Callable[[Any, Container], Any] | None = None,
    options: BindingOptions | int = BindingOptions.NONE,
) -> StoreDefinition:
    """Describe a deferred build of ``class_id`` post-processed by ``extend``.

    Args:
        class_id: Class to build.
        extend: Optional ``callback(instance, container)`` returning the final value.
        options: ``BindingOptions`` bits; bit 0 (``SHARED``) shares the binding.

    """
    return StoreDefinition(ObjectBuilderDefinition(class_id), options).extend(extend)


def prepare_shared(
    class_id: type[Any],
    extend: Callable[[Any, Container], Any] | None = None,
    options: BindingOptions | int = BindingOptions.NONE,
) -> StoreDefinition:
    return prepare(class_id, extend, BindingOptions(options) | BindingOptions.SHARED)
