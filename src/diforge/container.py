from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar, overload

from diforge.attributes.builtin import Decorator, Inject
from diforge.attributes.container_resolver import ContainerAttributesResolver
from diforge.attributes.reflection import AttributeTarget, ParameterInfo, callable_parameters
from diforge.build_plan import BuildPlan, get_class_name, normalize_class_name
from diforge.definitions import Definition, ObjectBuilderDefinition, StoreDefinition
from diforge.exceptions import DIForgeDependencyResolutionError
from diforge.integrations.pydantic_settings import is_pydantic_settings_subclass, settings_factory
from diforge.lifecycle import BindingOptions, LifecycleEntry
from diforge.resolution_stack import resolving, resolving_binding
from diforge.resolvers import Constant, Deferred, Resolver

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")

logger = logging.getLogger(__name__)

DEFAULT_AUTOWIRE_IGNORES: frozenset[type[Any]] = frozenset(
    {
        int,
        str,
        float,
        bool,
        bytes,
        list,
        dict,
        set,
        tuple,
    },
)


class Container:
    """Bind, build and share objects, resolving their dependencies at runtime.

    Bindings map a key (usually a class, or any hashable id) to a factory.
    Shared bindings memoize the produced value; protected bindings ignore
    later attempts to rebind them. Unbound classes are autowired: their
    constructor parameters are resolved by annotation, through build plan
    arguments (``when_creating``) and through ``Inject`` attributes.

    Examples:
        .. code-block:: python

            container = Container()
            container.bind_shared(Database, lambda container: Database(url="sqlite://"))
            container.when_creating(Repository).set_argument("table", "users")
            repository = container.create_object(Repository)

    """

    SHARED = BindingOptions.SHARED
    PROTECTED = BindingOptions.PROTECTED

    def __init__(
        self,
        *,
        autowire: bool = True,
        autowire_ignores: set[type[Any]] | None = None,
        attribute_options: Mapping[str, Any] | None = None,
    ) -> None:
        """Create a container.

        Args:
            autowire: Build unbound classes on ``get`` and for constructor
                parameters. When disabled, every dependency must be bound.
            autowire_ignores: Classes never autowired; defaults to builtin
                scalar and collection types.
            attribute_options: Options passed to the attribute resolver.

        """
        self._autowire = autowire
        self._autowire_ignores = (
            frozenset(autowire_ignores) if autowire_ignores is not None else DEFAULT_AUTOWIRE_IGNORES
        )
        self._entries: dict[Any, LifecycleEntry] = {}
        self._aliases: dict[Any, Any] = {}
        self._build_plans: dict[str, BuildPlan] = {}

        self._attributes = ContainerAttributesResolver(self, attribute_options)
        self._attributes.register_attribute(
            Inject,
            AttributeTarget.PROPERTY | AttributeTarget.PARAMETER,
        )
        self._attributes.register_attribute(Decorator, AttributeTarget.CLASS)

        self.bind(Container, Constant(self), protected=True)
        if type(self) is not Container:
            self.bind(type(self), Constant(self), protected=True)

    @property
    def attributes(self) -> ContainerAttributesResolver:
        return self._attributes

    @staticmethod
    def define(class_id: type[Any] | Callable[..., Any], *args: Any, **kwargs: Any) -> ObjectBuilderDefinition:
        """Describe an instance of ``class_id`` to build later, see ``diforge.create``."""
        return ObjectBuilderDefinition(class_id, args, kwargs)

    def bind(
        self,
        id: Any,  # noqa: A002
        value: Any,
        shared: bool = False,  # noqa: FBT001,FBT002
        protected: bool = False,  # noqa: FBT001,FBT002
    ) -> Self:
        """Bind ``id`` to ``value``.

        ``value`` may be a class (built on demand), a callable factory taking
        the container (or nothing), a definition from ``create``/``share``/
        ``prepare``, a ``Constant``/``Deferred`` resolver, or any other value
        returned as is. Rebinding a protected key is ignored.

        Returns:
            The container, for chaining.

        """
        if isinstance(value, StoreDefinition):
            shared = shared or value.is_shared()
            protected = protected or value.is_protected()

        key = self._resolve_alias(id)
        factory = self._to_factory(value)
        entry = self._entries.get(key)

        if entry is None:
            self._entries[key] = LifecycleEntry(factory, shared=shared, protected=protected)
            logger.debug("Bound %r (shared=%s, protected=%s)", key, shared, protected)
            return self

        if not entry.set_callback(factory):
            logger.debug("Ignored rebinding of protected key %r", key)
            return self

        entry.set_shared(shared)
        entry.set_protected(protected)
        entry.reset()
        logger.debug("Rebound %r (shared=%s, protected=%s)", key, shared, protected)
        return self

    def bind_shared(self, id: Any, value: Any, protected: bool = False) -> Self:  # noqa: A002,FBT001,FBT002
        return self.bind(id, value, shared=True, protected=protected)

    def protect(self, id: Any, value: Any, shared: bool = False) -> Self:  # noqa: A002,FBT001,FBT002
        return self.bind(id, value, shared=shared, protected=True)

    def alias(self, alias: Any, id: Any) -> Self:  # noqa: A002
        """Make ``alias`` resolve to whatever ``id`` resolves to."""
        self._aliases[alias] = id
        return self

    def extend(self, id: Any, closure: Callable[[Any, Container], Any]) -> Self:  # noqa: A002
        """Post-process the value of an existing binding with ``closure(value, container)``.

        Raises:
            DIForgeDependencyResolutionError: If ``id`` is not bound.

        """
        entry = self.get_entry(id)
        if entry is None:
            raise DIForgeDependencyResolutionError(id, "the key does not exist to extend")

        original = entry.callback

        def extended(container: Container) -> Any:
            return closure(original(container), container)

        if entry.set_callback(Deferred(extended)):
            entry.reset()
        else:
            logger.debug("Ignored extending protected key %r", id)
        return self

    def get_entry(self, id: Any) -> LifecycleEntry | None:  # noqa: A002
        return self._entries.get(self._resolve_alias(id))

    def has(self, id: Any) -> bool:  # noqa: A002
        return self._resolve_alias(id) in self._entries

    __contains__ = has

    def remove(self, id: Any) -> Self:  # noqa: A002
        key = self._resolve_alias(id)
        self._entries.pop(key, None)
        self._aliases.pop(id, None)
        return self

    @overload
    def get(self, id: type[T], force_new: bool = False) -> T: ...  # noqa: A002,FBT001,FBT002

    @overload
    def get(self, id: Any, force_new: bool = False) -> Any: ...  # noqa: A002,FBT001,FBT002

    def get(self, id: Any, force_new: bool = False) -> Any:  # noqa: A002,FBT001,FBT002
        """Return the value bound to ``id``, autowiring unbound classes.

        Args:
            id: Bound key, alias, or class.
            force_new: Rebuild a shared value instead of returning the cached one.

        Raises:
            DIForgeDependencyResolutionError: If ``id`` is not bound and cannot
                be autowired.
            DIForgeCyclicDependencyError: If the factory of ``id`` needs ``id``
                again while it runs.

        """
        key = self._resolve_alias(id)
        entry = self._entries.get(key)

        if entry is None:
            if not self._can_autowire(key):
                raise DIForgeDependencyResolutionError(key, "the key is not bound")
            if not is_pydantic_settings_subclass(key):
                logger.debug("Autowiring %r", key)
                return self.new_instance(key)
            logger.debug("Binding settings class %r as shared", key)
            self.bind_shared(key, settings_factory(key))
            entry = self._entries[key]

        with resolving_binding(key):
            return entry.get(self, force_new=force_new)

    def resolve(self, value: Any) -> Any:
        """Evaluate definitions from ``create``/``share``/``prepare``; return other values as is."""
        if isinstance(value, Definition):
            return value.resolve(self)
        return value

    def execute(self, callable_: Callable[..., T] | Resolver, args: Mapping[str, Any] | None = None) -> T:
        """Call ``callable_``, resolving every parameter missing from ``args``.

        Parameters are resolved, in order, from ``args`` (by name), from their
        attributes, from the binding or autowirable class named by their
        annotation, and finally from their default value. A first positional
        parameter without annotation or default receives the container, like
        the factories passed to ``bind``.

        Raises:
            DIForgeDependencyResolutionError: If a required parameter cannot be
                resolved.
            DIForgeCyclicDependencyError: If a binding factory needs its own
                binding while it runs.

        """
        if isinstance(callable_, Constant):
            return callable_.value
        if isinstance(callable_, Deferred):
            callable_ = callable_.func

        positional, keywords = self._resolve_parameters(callable_, args or {})
        return callable_(*positional, **keywords)

    def new_instance(self, id: type[T] | Callable[..., T], args: Mapping[str, Any] | None = None) -> T:  # noqa: A002
        """Build a new ``id`` without binding it.

        Build plan arguments registered with ``when_creating`` are used for
        parameters missing from ``args``. Property attributes run on the new
        object, and class attributes wrap the whole construction.

        Raises:
            DIForgeDependencyResolutionError: If a constructor parameter cannot
                be resolved.
            DIForgeCyclicDependencyError: If building ``id`` requires ``id``.

        """
        if not callable(id):
            raise DIForgeDependencyResolutionError(id, "the key is not a class or a callable")

        with resolving(id):
            plan = self._build_plans.get(normalize_class_name(id))
            arguments = {**(plan.get_arguments() if plan is not None else {}), **(args or {})}

            if not isinstance(id, type):
                return self.execute(id, arguments)

            positional, keywords = self._resolve_parameters(id, arguments)

            def build() -> T:
                return self._attributes.resolve_properties(id(*positional, **keywords))

            return self._attributes.resolve_class(id, build)()

    def create_object(
        self,
        id: type[T] | Callable[..., T],  # noqa: A002
        args: Mapping[str, Any] | None = None,
        shared: bool = False,  # noqa: FBT001,FBT002
        protected: bool = False,  # noqa: FBT001,FBT002
    ) -> T:
        """Bind ``id`` to a factory building it with ``args``, then return its value.

        A shared binding of ``id`` that already holds a value is returned as is.
        """
        entry = self.get_entry(id)
        if shared and entry is not None and entry.is_shared() and entry.has_instance:
            return entry.get(self)

        arguments = dict(args or {})
        self.bind(
            id,
            Deferred(lambda container: container.new_instance(id, arguments)),
            shared=shared,
            protected=protected,
        )
        return self.get(id)

    def create_shared_object(
        self,
        id: type[T] | Callable[..., T],  # noqa: A002
        args: Mapping[str, Any] | None = None,
        protected: bool = False,  # noqa: FBT001,FBT002
    ) -> T:
        return self.create_object(id, args, shared=True, protected=protected)

    def prepare_object(
        self,
        id: type[Any],  # noqa: A002
        extend: Callable[[Any, Container], Any] | None = None,
        shared: bool = False,  # noqa: FBT001,FBT002
        protected: bool = False,  # noqa: FBT001,FBT002
    ) -> Self:
        """Bind ``id`` to a deferred build, optionally post-processed by ``extend``.

        Nothing is instantiated until ``id`` is requested.
        """

        def factory(container: Container) -> Any:
            instance = container.new_instance(id)
            if extend is None:
                return instance
            return extend(instance, container)

        return self.bind(id, Deferred(factory), shared=shared, protected=protected)

    def prepare_shared_object(
        self,
        id: type[Any],  # noqa: A002
        extend: Callable[[Any, Container], Any] | None = None,
        protected: bool = False,  # noqa: FBT001,FBT002
    ) -> Self:
        return self.prepare_object(id, extend, shared=True, protected=protected)

    def when_creating(self, id: Any) -> BuildPlan:  # noqa: A002
        """Return the build plan of ``id``, creating it on first access.

        Plans are keyed by class identity, so ``Widget`` and its dotted name
        share one plan.
        """
        key = normalize_class_name(id)
        plan = self._build_plans.get(key)
        if plan is None:
            plan = BuildPlan(id, self)
            self._build_plans[key] = plan
        return plan

    def _resolve_alias(self, id: Any) -> Any:  # noqa: A002
        seen = set()
        while id in self._aliases and id not in seen:
            seen.add(id)
            id = self._aliases[id]  # noqa: A001
        return id

    def _can_autowire(self, key: Any) -> bool:
        return (
            self._autowire
            and isinstance(key, type)
            and key not in self._autowire_ignores
            and not inspect.isabstract(key)
        )

    def _to_factory(self, value: Any) -> Resolver:
        if isinstance(value, Constant | Deferred):
            return value
        if isinstance(value, Definition):
            return Deferred(value.resolve)
        if isinstance(value, type):
            return Deferred(lambda container: container.new_instance(value))
        if callable(value):
            if _accepts_argument(value):
                return Deferred(value)
            return Deferred(lambda _container: value())
        return Constant(value)

    def _resolve_parameters(
        self,
        func: Callable[..., Any],
        args: Mapping[str, Any],
    ) -> tuple[list[Any], dict[str, Any]]:
        positional: list[Any] = []
        keywords: dict[str, Any] = {}

        for index, info in enumerate(callable_parameters(func)):
            if info.name in args:
                value = args[info.name]
            elif index == 0 and not isinstance(func, type) and _takes_container(info):
                value = self
            else:
                value = self._resolve_parameter(info)
            if info.parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
                positional.append(value)
            else:
                keywords[info.name] = value

        return positional, keywords

    def _resolve_parameter(self, info: ParameterInfo) -> Any:
        if self._attributes.recognized_attributes(info):
            return self._attributes.resolve_parameter(info)

        annotation = info.annotation
        if annotation is not inspect.Parameter.empty:
            if self._is_hashable(annotation) and self.has(annotation):
                return self.get(annotation)
            if not info.has_default and self._can_autowire(annotation):
                return self.get(annotation)

        if info.has_default:
            return info.parameter.default

        raise DIForgeDependencyResolutionError(
            f"{get_class_name(info.function)}({info.name})",
            "the parameter has no binding, autowirable type or default value",
        )

    @staticmethod
    def _is_hashable(value: Any) -> bool:
        try:
            hash(value)
        except TypeError:
            return False
        return True

    def __repr__(self) -> str:
        return f"Container(bindings={len(self._entries)}, build_plans={len(self._build_plans)})"


def _accepts_argument(func: Callable[..., Any]) -> bool:
    """Whether ``func`` can be called with the container as its only positional argument."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return True
    for parameter in signature.parameters.values():
        if parameter.kind in {
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
            inspect.Parameter.VAR_POSITIONAL,
        }:
            return True
    return False


def _takes_container(info: ParameterInfo) -> bool:
    """Whether ``info`` is a bare positional parameter, as in ``lambda c: c.get(...)``."""
    return (
        info.annotation is inspect.Parameter.empty
        and not info.has_default
        and not info.metadata
        and info.parameter.kind
        in {inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD}
    )
