from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from diforge.attributes.reflection import ATTRIBUTES_ATTR

if TYPE_CHECKING:
    from diforge.attributes.handler import AttributeHandler

C = TypeVar("C", bound=type[Any])


class ContainerAttribute(ABC):
    """Base class for attributes that take part in object construction.

    An attribute receives the handler for the layer below it and returns the
    callable that replaces it. It decides whether and when to call the inner
    handler and what to return:

    .. code-block:: python

        @dataclass(frozen=True)
        class Upper(ContainerAttribute):
            def __call__(self, handler: AttributeHandler) -> Callable[[], Any]:
                return lambda: handler().upper()

    """

    @abstractmethod
    def __call__(self, handler: AttributeHandler) -> Callable[[], Any]: ...


def attribute(*attributes: Any) -> Callable[[C], C]:
    """Declare class attributes, keeping textual top-to-bottom order.

    Stacked decorators run bottom-up, so each call prepends its attributes to
    the ones already declared on the class.

    Examples:
        .. code-block:: python

            @attribute(Decorator(Cached))
            @attribute(Decorator(Logged))
            class Repository: ...

    """

    def decorator(cls: C) -> C:
        declared = tuple(cls.__dict__.get(ATTRIBUTES_ATTR, ()))
        setattr(cls, ATTRIBUTES_ATTR, (*attributes, *declared))
        return cls

    return decorator
