"""Read declared attributes from classes, class properties and parameters.

Class attributes are stored on the class by the ``attribute`` decorator.
Property and parameter attributes are ``typing.Annotated`` metadata:

.. code-block:: python

    @attribute(Decorator(Audited))
    class Repository:
        logger: Annotated[Logger, Inject()]

        def __init__(self, db: Annotated[Database, Inject("db.primary")]) -> None: ...

"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from enum import IntFlag, auto
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

from diforge.exceptions import DIForgeDependencyResolutionError

ATTRIBUTES_ATTR = "__diforge_attributes__"
_ANNOTATED_MARKER_MIN_ARGS = 2
_IMPLICIT_FIRST_PARAMETER_NAMES = {"self", "cls"}


class AttributeTarget(IntFlag):
    """Kinds of declarations an attribute can be attached to."""

    CLASS = auto()
    PROPERTY = auto()
    PARAMETER = auto()
    ALL = CLASS | PROPERTY | PARAMETER


def split_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *metadata]`` into ``(T, metadata)``.

    Non-annotated hints come back as ``(annotation, ())``. ``Optional`` around
    ``Annotated`` (added by ``get_type_hints`` for ``None`` defaults before
    Python 3.11) is unwrapped as well.
    """
    if get_origin(annotation) is Union:
        members = get_args(annotation)
        wrapped = [member for member in members if get_origin(member) is Annotated]
        if wrapped:
            inner, metadata = split_annotated(wrapped[0])
            return Union[tuple(inner if m is wrapped[0] else m for m in members)], metadata  # noqa: UP007
    if get_origin(annotation) is not Annotated:
        return annotation, ()
    args = get_args(annotation)
    if len(args) < _ANNOTATED_MARKER_MIN_ARGS:
        return args[0], ()  # pragma: no cover - Annotated requires at least 2 args
    return args[0], tuple(args[1:])


def read_type_hints(obj: Any) -> dict[str, Any]:
    """Return ``get_type_hints(obj, include_extras=True)`` with diforge errors."""
    try:
        return get_type_hints(obj, include_extras=True)
    except (TypeError, NameError) as e:
        raise DIForgeDependencyResolutionError(obj, f"cannot read type hints: {e}") from e


@dataclass(frozen=True)
class ClassInfo:
    """A class whose construction can be wrapped by attributes."""

    cls: type[Any]

    target = AttributeTarget.CLASS

    @property
    def name(self) -> str:
        return self.cls.__qualname__

    def attributes(self) -> tuple[Any, ...]:
        """Attributes declared on this class itself, in declaration order."""
        return tuple(self.cls.__dict__.get(ATTRIBUTES_ATTR, ()))


@dataclass(frozen=True)
class PropertyInfo:
    """An annotated class-level property."""

    owner: type[Any]
    name: str
    annotation: Any
    metadata: tuple[Any, ...] = ()
    default: Any = None

    target = AttributeTarget.PROPERTY

    def attributes(self) -> tuple[Any, ...]:
        return self.metadata


@dataclass(frozen=True)
class ParameterInfo:
    """A parameter of a callable or of a class constructor."""

    function: Any
    parameter: inspect.Parameter
    annotation: Any
    metadata: tuple[Any, ...] = field(default=())

    target = AttributeTarget.PARAMETER

    @property
    def name(self) -> str:
        return self.parameter.name

    @property
    def has_default(self) -> bool:
        return self.parameter.default is not inspect.Parameter.empty

    @property
    def default(self) -> Any:
        return self.parameter.default if self.has_default else None

    def attributes(self) -> tuple[Any, ...]:
        return self.metadata


def class_properties(cls: type[Any]) -> list[PropertyInfo]:
    """Return every ``Annotated`` class property of ``cls``, base classes first."""
    properties: list[PropertyInfo] = []
    for name, hint in read_type_hints(cls).items():
        annotation, metadata = split_annotated(hint)
        if not metadata:
            continue
        properties.append(
            PropertyInfo(
                owner=cls,
                name=name,
                annotation=annotation,
                metadata=metadata,
                default=getattr(cls, name, None),
            ),
        )
    return properties


def callable_parameters(func: Any) -> list[ParameterInfo]:
    """Return the parameters of ``func`` (a callable or a class), skipping ``self``.

    Variadic parameters are left out; they can never be resolved by name.
    """
    if isinstance(func, type):
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            return []
        hints_source: Any = func.__init__
    else:
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            return []
        hints_source = func

    hints = read_type_hints(hints_source) if _has_annotations(hints_source) else {}

    parameters: list[ParameterInfo] = []
    for parameter in signature.parameters.values():
        if parameter.kind in {inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD}:
            continue
        if parameter.name in _IMPLICIT_FIRST_PARAMETER_NAMES and parameter.name not in hints:
            continue
        annotation, metadata = split_annotated(hints.get(parameter.name, parameter.annotation))
        parameters.append(
            ParameterInfo(
                function=func,
                parameter=parameter,
                annotation=annotation,
                metadata=metadata,
            ),
        )
    return parameters


def _has_annotations(obj: Any) -> bool:
    return bool(getattr(obj, "__annotations__", None))
