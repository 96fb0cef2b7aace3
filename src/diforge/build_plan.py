from __future__ import annotations

import inspect
import logging
import types
from enum import Enum
from typing import TYPE_CHECKING, Any

from diforge.exceptions import DIForgeInvalidReferenceError, DIForgeUnsupportedOperationError
from diforge.resolvers import Constant, Deferred, Resolver

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

    from typing_extensions import Self

    from diforge.container import Container

logger = logging.getLogger(__name__)

_NAMESPACE_SEPARATORS = "\\."
_REJECTED_REFERENCE_TYPES: tuple[type[Any], ...] = (
    type(None),
    bool,
    int,
    float,
    complex,
    bytes,
    list,
    tuple,
    dict,
    set,
    frozenset,
)


class Operation(Enum):
    """Container operations a build plan forwards with its class prepended."""

    BIND = "bind"
    BIND_SHARED = "bind_shared"
    NEW_INSTANCE = "new_instance"
    CREATE_OBJECT = "create_object"
    CREATE_SHARED_OBJECT = "create_shared_object"


_BINDING_OPERATIONS = frozenset({Operation.BIND, Operation.BIND_SHARED})


def is_closure(obj: Any) -> bool:
    """Return True for lambdas and functions defined inside another function."""
    if not isinstance(obj, types.FunctionType):
        return False
    return obj.__name__ == "<lambda>" or "<locals>" in obj.__qualname__


def _qualified_name(obj: Any) -> str:
    module = getattr(obj, "__module__", None) or "builtins"
    qualname = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None) or repr(obj)
    return f"{module}.{qualname}"


def get_class_name(obj: Any) -> str:
    """Return the identity string used to compare class references.

    Args:
        obj: A build plan, a class, an instance, a string, or a callable.

    Returns:
        The plan's class name for build plans, a ``closure:<id>`` token for
        closures (unique only while the closure is alive), the string itself
        for strings and the dotted qualified name for classes, callables and
        instances (of their class).

    Raises:
        DIForgeInvalidReferenceError: If ``obj`` is ``None``, a number, bytes
            or a builtin container.

    """
    if isinstance(obj, BuildPlan):
        return get_class_name(obj.class_id)

    if is_closure(obj):
        return f"closure:{id(obj):x}"

    if isinstance(obj, str):
        return obj

    if isinstance(obj, type) or inspect.isroutine(obj):
        return _qualified_name(obj)

    if isinstance(obj, _REJECTED_REFERENCE_TYPES):
        raise DIForgeInvalidReferenceError(obj)

    return _qualified_name(type(obj))


def normalize_class_name(obj: Any) -> str:
    """Return ``get_class_name(obj)`` lower-cased with separators unified and trimmed."""
    return get_class_name(obj).replace("\\", ".").strip(_NAMESPACE_SEPARATORS).lower()


def is_same_class(obj1: Any, obj2: Any) -> bool:
    """Check whether two references point at the same class.

    Names are compared case-insensitively, ignoring leading and trailing
    namespace separators; ``\\`` and ``.`` are treated as the same separator.
    Closures are compared by identity and only match themselves.
    """
    if isinstance(obj1, BuildPlan):
        obj1 = obj1.class_id
    if isinstance(obj2, BuildPlan):
        obj2 = obj2.class_id
    if is_closure(obj1) or is_closure(obj2):
        return obj1 is obj2
    return normalize_class_name(obj1) == normalize_class_name(obj2)


def lazy(func: Callable[..., Any]) -> Deferred:
    """Mark ``func`` as a deferred argument, resolved when the plan is read."""
    return Deferred(func)


class BuildPlan:
    """Named, lazily resolved constructor arguments for one class.

    Closures (and values wrapped with ``lazy``) are evaluated through
    ``Container.execute`` the first time they are read, with their own
    parameters injected. The result is cached until the argument is replaced
    or removed. Any other value is stored as a constant.

    The plan also forwards a fixed set of container operations with its class
    prepended, see ``Operation`` and ``dispatch``.
    """

    def __init__(self, class_id: Any, container: Container | None = None) -> None:
        self._class_id = class_id
        self._container = container
        self._arguments: dict[str, Resolver] = {}
        self._caches: dict[str, Any] = {}

    @property
    def class_id(self) -> Any:
        return self._class_id

    @property
    def container(self) -> Container | None:
        return self._container

    def set_container(self, container: Container) -> Self:
        self._container = container
        return self

    def get_argument(self, name: str, default: Any = None) -> Any:
        """Resolve the argument ``name``, or return ``default`` when it is not set.

        Raises:
            DIForgeDependencyResolutionError: If the resolver's own dependencies
                cannot be satisfied by the container.

        """
        if name not in self._arguments:
            return default

        if name in self._caches:
            return self._caches[name]

        value = self._require_container().execute(self._arguments[name])
        self._caches[name] = value
        return value

    def set_argument(self, name: str, value: Any) -> Self:
        if isinstance(value, Constant | Deferred):
            resolver: Resolver = value
        elif is_closure(value):
            resolver = Deferred(value)
        else:
            resolver = Constant(value)

        self._arguments[name] = resolver
        self._caches.pop(name, None)
        return self

    def has_argument(self, name: str) -> bool:
        return name in self._arguments

    def remove_argument(self, name: str) -> Self:
        self._arguments.pop(name, None)
        self._caches.pop(name, None)
        return self

    def get_arguments(self) -> dict[str, Any]:
        """Resolve every argument in the order they were first set."""
        return {name: self.get_argument(name) for name in self._arguments}

    def set_arguments(self, arguments: Mapping[str, Any]) -> Self:
        for name, value in arguments.items():
            self.set_argument(name, value)
        return self

    def reset(self) -> Self:
        self._arguments.clear()
        self._caches.clear()
        return self

    def __iter__(self) -> Iterator[str]:
        return iter(self._arguments)

    def __len__(self) -> int:
        return len(self._arguments)

    def dispatch(self, operation: Operation | str, *args: Any, **kwargs: Any) -> Any:
        """Forward ``operation`` to the container with this plan's class prepended.

        ``bind``/``bind_shared`` receive ``(class_id, *args, **kwargs)``.
        Creation operations receive ``(class_id, merged, *rest, **kwargs)``
        where ``merged`` is the resolved plan updated by the first positional
        mapping (its keys win on collision).

        Raises:
            DIForgeUnsupportedOperationError: If ``operation`` names no known
                operation.

        """
        operation = self._coerce_operation(operation)
        method: Callable[..., Any] = getattr(self._require_container(), operation.value)
        logger.debug("Forwarding %s for %r", operation.value, self._class_id)

        if operation in _BINDING_OPERATIONS:
            return method(self._class_id, *args, **kwargs)

        extra, *rest = args or ({},)
        arguments = {**self.get_arguments(), **(extra or {})}
        return method(self._class_id, arguments, *rest, **kwargs)

    def bind(self, value: Any, shared: bool = False, protected: bool = False) -> Container:  # noqa: FBT001,FBT002
        return self.dispatch(Operation.BIND, value, shared=shared, protected=protected)

    def bind_shared(self, value: Any, protected: bool = False) -> Container:  # noqa: FBT001,FBT002
        return self.dispatch(Operation.BIND_SHARED, value, protected=protected)

    def new_instance(self, args: Mapping[str, Any] | None = None) -> Any:
        return self.dispatch(Operation.NEW_INSTANCE, args)

    def create_object(
        self,
        args: Mapping[str, Any] | None = None,
        shared: bool = False,  # noqa: FBT001,FBT002
        protected: bool = False,  # noqa: FBT001,FBT002
    ) -> Any:
        return self.dispatch(Operation.CREATE_OBJECT, args, shared=shared, protected=protected)

    def create_shared_object(
        self,
        args: Mapping[str, Any] | None = None,
        protected: bool = False,  # noqa: FBT001,FBT002
    ) -> Any:
        return self.dispatch(Operation.CREATE_SHARED_OBJECT, args, protected=protected)

    def __getattr__(self, name: str) -> Any:
        # Only reached for names that are not real attributes.
        if name.startswith("__") and name.endswith("__"):
            raise AttributeError(name)
        raise DIForgeUnsupportedOperationError(name)

    def __repr__(self) -> str:
        return f"BuildPlan({self._class_id!r}, arguments={list(self._arguments)!r})"

    def _require_container(self) -> Container:
        if self._container is None:
            msg = f"BuildPlan for {self._class_id!r} is not attached to a container"
            raise RuntimeError(msg)
        return self._container

    @staticmethod
    def _coerce_operation(operation: Operation | str) -> Operation:
        if isinstance(operation, Operation):
            return operation
        try:
            return Operation(operation)
        except ValueError:
            raise DIForgeUnsupportedOperationError(operation) from None
