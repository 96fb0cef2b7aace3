"""Errors raised while resolving dependencies.

Demonstrates:
- DIForgeDependencyResolutionError for parameters nothing can provide
- DIForgeCyclicDependencyError for classes that need themselves
- DIForgeUnsupportedOperationError for build plan calls outside the forwarded set
"""

from diforge import (
    Container,
    DIForgeCyclicDependencyError,
    DIForgeDependencyResolutionError,
    DIForgeUnsupportedOperationError,
)


class Connection:
    def __init__(self, port: int) -> None:
        self.port = port


class Parent:
    def __init__(self, child: "Child") -> None:
        self.child = child


class Child:
    def __init__(self, parent: Parent) -> None:
        self.parent = parent


def main() -> None:
    container = Container()

    try:
        container.get(Connection)
    except DIForgeDependencyResolutionError as e:
        print(f"DIForgeDependencyResolutionError caught!\n  key: {e.key}\n  reason: {e.reason}")

    try:
        container.get(Parent)
    except DIForgeCyclicDependencyError as e:
        print(f"DIForgeCyclicDependencyError caught!\n  chain: {' -> '.join(e.chain)}")

    try:
        container.when_creating(Connection).prepare_object()
    except DIForgeUnsupportedOperationError as e:
        print(f"DIForgeUnsupportedOperationError caught!\n  {e}")

    print("\nProviding the missing argument through a build plan:")
    connection = container.when_creating(Connection).set_argument("port", 5432).new_instance()
    print(f"  port={connection.port}")


if __name__ == "__main__":
    main()
