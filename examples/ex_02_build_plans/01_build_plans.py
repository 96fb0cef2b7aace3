"""Build plans: named constructor arguments for one class.

Demonstrates:
1. Plain argument values stored as constants
2. Closures evaluated lazily, once, with their own parameters injected
3. Forwarding creation operations with the plan's class prepended
"""

from diforge import Container


class Settings:
    def __init__(self) -> None:
        self.prefix = "prod"


class Widget:
    def __init__(self, name: str, size: int = 1) -> None:
        self.name = name
        self.size = size


def main() -> None:
    container = Container()

    def widget_name(settings: Settings) -> str:
        print("  computing widget name...")
        return f"{settings.prefix}-gear"

    plan = container.when_creating(Widget)
    plan.set_argument("name", widget_name).set_argument("size", 3)

    print("Creating two widgets:")
    first = plan.create_object()
    second = plan.new_instance({"size": 5})
    print(f"  first: name={first.name} size={first.size}")
    print(f"  second: name={second.name} size={second.size}")

    shared = plan.create_shared_object()
    print(f"Shared widget is reused: {shared is container.create_shared_object(Widget)}")


if __name__ == "__main__":
    main()
