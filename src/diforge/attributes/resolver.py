from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from diforge.attributes.handler import AttributeHandler
from diforge.attributes.reflection import (
    AttributeTarget,
    ClassInfo,
    ParameterInfo,
    PropertyInfo,
    class_properties,
)

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")
Reflector = ClassInfo | PropertyInfo | ParameterInfo

logger = logging.getLogger(__name__)

_MISSING: Any = object()


class AttributesResolver:
    """Build handler chains from the attributes declared on a target.

    Only attribute classes registered with ``register_attribute`` for the
    target kind are applied; other metadata is ignored. For attributes
    declared as ``[A, B]`` the resolved callable is ``A(handler(B(handler(getter))))``:
    ``A`` runs first and sees the value after ``B`` and the getter ran.
    """

    def __init__(self, options: Mapping[str, Any] | None = None) -> None:
        self._options: dict[str, Any] = dict(options or {})
        self._attributes: dict[type[Any], AttributeTarget] = {}

    @property
    def options(self) -> Mapping[str, Any]:
        return self._options

    def get_option(self, name: str, default: Any = None) -> Any:
        return self._options.get(name, default)

    def set_option(self, name: str, value: Any) -> Self:
        self._options[name] = value
        return self

    def register_attribute(
        self,
        attribute_class: type[Any],
        targets: AttributeTarget = AttributeTarget.ALL,
    ) -> Self:
        """Recognize ``attribute_class`` (and subclasses) on ``targets``."""
        self._attributes[attribute_class] = targets
        return self

    def remove_attribute(self, attribute_class: type[Any]) -> Self:
        self._attributes.pop(attribute_class, None)
        return self

    def has_attribute(self, attribute: Any, target: AttributeTarget = AttributeTarget.ALL) -> bool:
        """Whether ``attribute`` (an instance or a class) is recognized on ``target``."""
        attribute_class = attribute if isinstance(attribute, type) else type(attribute)
        return any(
            issubclass(attribute_class, registered) and bool(targets & target)
            for registered, targets in self._attributes.items()
        )

    def recognized_attributes(self, reflector: Reflector) -> list[Any]:
        """Return the recognized attributes of ``reflector`` in declaration order."""
        return [
            attribute
            for attribute in reflector.attributes()
            if not isinstance(attribute, type) and self.has_attribute(attribute, reflector.target)
        ]

    def resolve(self, reflector: Reflector, getter: Callable[..., Any]) -> AttributeHandler:
        """Wrap ``getter`` with one handler layer per recognized attribute.

        Returns:
            The outermost handler. Without recognized attributes this is a
            single pass-through handler around ``getter``.

        """
        attributes = self.recognized_attributes(reflector)
        current: Callable[..., Any] = getter

        for declared in reversed(attributes):
            prepared = self.prepare_attribute(declared)
            current = prepared(self.create_handler(current, reflector, prepared))

        if attributes:
            logger.debug(
                "Resolved %d attribute(s) on %s %s",
                len(attributes),
                reflector.target.name,
                reflector.name,
            )

        return self.create_handler(current, reflector, None)

    def resolve_class(self, cls: type[T], builder: Callable[[], T]) -> AttributeHandler:
        """Return the chain that wraps ``builder`` with the attributes of ``cls``."""
        return self.resolve(ClassInfo(cls), builder)

    def create_object(self, cls: type[T], *args: Any, **kwargs: Any) -> T:
        """Construct ``cls`` and resolve its properties, wrapped by its class attributes."""
        return self.resolve_class(cls, lambda: self.resolve_properties(cls(*args, **kwargs)))()

    def resolve_property(self, instance: Any, info: PropertyInfo) -> Any:
        """Run the chain of one property and store the result on ``instance``."""
        current = getattr(instance, info.name, _MISSING)
        value = self.resolve(info, lambda: None if current is _MISSING else current)()
        if value is not current:
            setattr(instance, info.name, value)
        return value

    def resolve_properties(self, instance: T) -> T:
        """Resolve every annotated property of ``instance`` carrying recognized attributes."""
        for info in class_properties(type(instance)):
            if self.recognized_attributes(info):
                self.resolve_property(instance, info)
        return instance

    def resolve_parameter(self, info: ParameterInfo, getter: Callable[[], Any] | None = None) -> Any:
        """Return the value the attribute chain of ``info`` produces.

        The default getter returns the parameter default, or ``None``.
        """
        return self.resolve(info, getter or (lambda: info.default))()

    def prepare_attribute(self, attribute: T) -> T:
        """Hook to complete an attribute before it builds its layer."""
        return attribute

    def create_handler(
        self,
        getter: Callable[..., Any],
        reflector: Reflector,
        attribute: Any | None = None,
    ) -> AttributeHandler:
        return AttributeHandler(getter, reflector, self, attribute)
