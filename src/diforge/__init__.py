from diforge.attributes import (
    AttributeHandler,
    AttributesResolver,
    AttributeTarget,
    ContainerAttribute,
    ContainerAttributeHandler,
    ContainerAttributesResolver,
    Decorator,
    Inject,
    attribute,
)
from diforge.build_plan import BuildPlan, Operation, get_class_name, is_same_class, lazy
from diforge.container import Container
from diforge.definitions import (
    ObjectBuilderDefinition,
    StoreDefinition,
    create,
    prepare,
    prepare_shared,
    share,
)
from diforge.exceptions import (
    DIForgeCyclicDependencyError,
    DIForgeDependencyResolutionError,
    DIForgeError,
    DIForgeInvalidReferenceError,
    DIForgeUnsupportedOperationError,
)
from diforge.lifecycle import BindingOptions, LifecycleEntry
from diforge.resolvers import Constant, Deferred

__all__ = [
    "AttributeHandler",
    "AttributeTarget",
    "AttributesResolver",
    "BindingOptions",
    "BuildPlan",
    "Constant",
    "Container",
    "ContainerAttribute",
    "ContainerAttributeHandler",
    "ContainerAttributesResolver",
    "DIForgeCyclicDependencyError",
    "DIForgeDependencyResolutionError",
    "DIForgeError",
    "DIForgeInvalidReferenceError",
    "DIForgeUnsupportedOperationError",
    "Decorator",
    "Deferred",
    "Inject",
    "LifecycleEntry",
    "ObjectBuilderDefinition",
    "Operation",
    "StoreDefinition",
    "attribute",
    "create",
    "get_class_name",
    "is_same_class",
    "lazy",
    "prepare",
    "prepare_shared",
    "share",
]
