from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from diforge.attributes.markers import ContainerAttribute

if TYPE_CHECKING:
    from diforge.attributes.handler import ContainerAttributeHandler
    from diforge.container import Container


@dataclass(frozen=True)
class Inject(ContainerAttribute):
    """Inject a container value into a property or a parameter.

    The key is ``id`` when given, otherwise the annotated type. A value that
    is already present (constructor assignment, explicit argument or a non
    ``None`` default) is kept unless ``force_new`` is set.

    Examples:
        .. code-block:: python

            class Mailer:
                transport: Annotated[Transport, Inject()]

                def __init__(self, config: Annotated[dict, Inject("mail.config")]) -> None: ...

    """

    id: Any = None
    force_new: bool = False

    def __call__(self, handler: ContainerAttributeHandler) -> Callable[[], Any]:  # type: ignore[override]
        def inject() -> Any:
            current = handler()
            if current is not None and not self.force_new:
                return current
            return self.resolve_value(handler.container, handler.reflector.annotation)  # type: ignore[union-attr]

        return inject

    def resolve_value(self, container: Container, annotation: Any) -> Any:
        """Resolve the key of this marker against ``container``.

        Raises:
            DIForgeDependencyResolutionError: If the key cannot be resolved.

        """
        key = self.id if self.id is not None else annotation
        if self.force_new and not container.has(key) and isinstance(key, type):
            return container.new_instance(key)
        return container.get(key, force_new=self.force_new)


@dataclass(frozen=True)
class Decorator(ContainerAttribute):
    """Wrap the constructed object in ``wrapper``.

    The object is passed as ``wrapper``'s first constructor parameter; the
    remaining parameters come from ``kwargs`` or the container.
    """

    wrapper: type[Any]
    kwargs: dict[str, Any] = field(default_factory=dict)

    def __call__(self, handler: ContainerAttributeHandler) -> Callable[[], Any]:  # type: ignore[override]
        def decorate() -> Any:
            inner = handler()
            return handler.container.new_instance(
                self.wrapper,
                {**self.kwargs, _first_parameter_name(self.wrapper): inner},
            )

        return decorate


def _first_parameter_name(cls: type[Any]) -> str:
    parameters = list(inspect.signature(cls).parameters.values())
    if not parameters:
        msg = f"{cls.__qualname__} must accept the decorated object as its first parameter"
        raise TypeError(msg)
    return parameters[0].name
