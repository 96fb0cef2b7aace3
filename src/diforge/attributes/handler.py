from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from diforge.attributes.container_resolver import ContainerAttributesResolver
    from diforge.attributes.reflection import ClassInfo, ParameterInfo, PropertyInfo
    from diforge.attributes.resolver import AttributesResolver
    from diforge.container import Container


class AttributeHandler:
    """One layer of an attribute chain.

    Calling the handler calls the layer below it: either the handler returned
    by the next attribute or, at the innermost layer, the base getter.
    """

    __slots__ = ("attribute", "handler", "reflector", "resolver")

    def __init__(
        self,
        handler: Callable[..., Any],
        reflector: ClassInfo | PropertyInfo | ParameterInfo,
        resolver: AttributesResolver,
        attribute: Any | None = None,
    ) -> None:
        self.handler = handler
        self.reflector = reflector
        self.resolver = resolver
        self.attribute = attribute

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.handler(*args, **kwargs)

    def get_resolver(self) -> AttributesResolver:
        return self.resolver

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.reflector!r}, attribute={self.attribute!r})"


class ContainerAttributeHandler(AttributeHandler):
    """An ``AttributeHandler`` that also carries the container resolving the target."""

    __slots__ = ("container",)

    def __init__(
        self,
        handler: Callable[..., Any],
        reflector: ClassInfo | PropertyInfo | ParameterInfo,
        resolver: ContainerAttributesResolver,
        container: Container,
        attribute: Any | None = None,
    ) -> None:
        super().__init__(handler, reflector, resolver, attribute)
        self.container = container

    def get_container(self) -> Container:
        return self.container

    def get_resolver(self) -> ContainerAttributesResolver:
        return self.resolver  # type: ignore[return-value]
