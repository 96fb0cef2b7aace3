from diforge.attributes.builtin import Decorator, Inject
from diforge.attributes.container_resolver import ContainerAttributesResolver
from diforge.attributes.handler import AttributeHandler, ContainerAttributeHandler
from diforge.attributes.markers import ContainerAttribute, attribute
from diforge.attributes.reflection import (
    AttributeTarget,
    ClassInfo,
    ParameterInfo,
    PropertyInfo,
    callable_parameters,
    class_properties,
)
from diforge.attributes.resolver import AttributesResolver

__all__ = [
    "AttributeHandler",
    "AttributeTarget",
    "AttributesResolver",
    "ClassInfo",
    "ContainerAttribute",
    "ContainerAttributeHandler",
    "ContainerAttributesResolver",
    "Decorator",
    "Inject",
    "ParameterInfo",
    "PropertyInfo",
    "attribute",
    "callable_parameters",
    "class_properties",
]
