from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from diforge.attributes.builtin import Inject
from diforge.attributes.handler import ContainerAttributeHandler
from diforge.attributes.reflection import read_type_hints, split_annotated
from diforge.attributes.resolver import AttributesResolver, Reflector

if TYPE_CHECKING:
    from diforge.container import Container

T = TypeVar("T")


class ContainerAttributesResolver(AttributesResolver):
    """An ``AttributesResolver`` whose handlers carry the owning container.

    Attributes may declare their own collaborators as dataclass fields
    annotated with ``Inject``; they are resolved before the attribute builds
    its layer:

    .. code-block:: python

        @dataclass(frozen=True)
        class Audited(ContainerAttribute):
            audit_log: Annotated[AuditLog | None, Inject(AuditLog)] = None

    """

    def __init__(self, container: Container, options: Mapping[str, Any] | None = None) -> None:
        self._container = container
        super().__init__(options)

    @property
    def container(self) -> Container:
        return self._container

    def prepare_attribute(self, attribute: T) -> T:
        """Return a copy of ``attribute`` with its ``Inject`` fields resolved.

        The declared attribute instance is left untouched. Fields that already
        hold a value are kept unless their marker sets ``force_new``.

        Raises:
            DIForgeDependencyResolutionError: If an injected field cannot be
                resolved.

        """
        if not dataclasses.is_dataclass(attribute) or isinstance(attribute, type):
            return attribute

        hints = read_type_hints(type(attribute))
        changes: dict[str, Any] = {}
        for attribute_field in dataclasses.fields(attribute):
            annotation, metadata = split_annotated(hints.get(attribute_field.name))
            markers = [item for item in metadata if isinstance(item, Inject)]
            if not markers:
                continue
            marker = markers[-1]
            if getattr(attribute, attribute_field.name) is not None and not marker.force_new:
                continue
            changes[attribute_field.name] = marker.resolve_value(self._container, annotation)

        if not changes:
            return attribute
        return dataclasses.replace(attribute, **changes)  # type: ignore[type-var]

    def create_handler(
        self,
        getter: Callable[..., Any],
        reflector: Reflector,
        attribute: Any | None = None,
    ) -> ContainerAttributeHandler:
        return ContainerAttributeHandler(getter, reflector, self, self._container, attribute)
