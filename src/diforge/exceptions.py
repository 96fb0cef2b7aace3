from __future__ import annotations

from typing import Any


class DIForgeError(Exception):
    """Represent a base class for all diforge-specific failures.

    Catch this type when you want to handle any diforge error path without
    matching each concrete exception class individually.
    """


class DIForgeInvalidReferenceError(DIForgeError, TypeError):
    """Signal a value that cannot be turned into a class identity.

    Raised by ``get_class_name`` and ``is_same_class`` when the input is
    neither an object instance, a string, nor a callable (for example ``None``
    or a number).
    """

    def __init__(self, reference: Any) -> None:
        self.reference = reference
        super().__init__(
            f"Invalid object type {type(reference).__name__!r}, should be object or class name.",
        )


class DIForgeUnsupportedOperationError(DIForgeError, AttributeError):
    """Signal a build plan operation outside of the forwarding allow-list.

    Raised by ``BuildPlan.dispatch`` and by attribute access on a
    ``BuildPlan`` for names that are not forwarded to the container.
    """

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"BuildPlan::{method}() not found.")


class DIForgeDependencyResolutionError(DIForgeError):
    """Signal that a dependency cannot be satisfied.

    Raised by ``Container.get``, ``Container.execute`` and
    ``Container.new_instance`` when a key is not bound and cannot be autowired,
    or when a required parameter has neither a resolvable annotation nor a
    default value. Build plans and the attribute pipeline propagate it
    unchanged.

    Typical fixes include binding the key explicitly, providing the argument
    through ``Container.when_creating(...).set_argument(...)``, or giving the
    parameter a default.
    """

    def __init__(self, key: Any, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Unable to resolve {key!r}: {reason}")


class DIForgeCyclicDependencyError(DIForgeDependencyResolutionError):
    """Signal that resolving a class re-entered itself before completing.

    The ``chain`` attribute lists the class identities currently being
    resolved, outermost first, followed by the key that closed the cycle.

    Typical fixes include breaking the cycle with a lazy argument on a build
    plan or binding one side of the cycle to a factory.
    """

    def __init__(self, key: Any, chain: list[str]) -> None:
        self.chain = [*chain, str(key)]
        super().__init__(key, f"cyclic dependency {' -> '.join(self.chain)}")
