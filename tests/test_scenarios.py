"""End-to-end wiring of a small application through the public API."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any

from diforge import (
    AttributeHandler,
    AttributeTarget,
    Container,
    ContainerAttribute,
    Decorator,
    Inject,
    attribute,
    share,
)


class Widget:
    def __init__(self, name: str) -> None:
        self.name = name


class Engine:
    def __init__(self, dsn: str) -> None:
        self.dsn = dsn


class AuditLog:
    def __init__(self) -> None:
        self.entries: list[str] = []


@dataclass(frozen=True)
class Audited(ContainerAttribute):
    audit_log: Annotated[AuditLog | None, Inject(AuditLog)] = None

    def __call__(self, handler: AttributeHandler) -> Callable[[], Any]:
        def run() -> Any:
            instance = handler()
            self.audit_log.entries.append(type(instance).__name__)  # type: ignore[union-attr]
            return instance

        return run


class CachedRepository:
    def __init__(self, inner: "UserRepository") -> None:
        self.inner = inner

    def find(self, user_id: int) -> str:
        return f"cached {self.inner.find(user_id)}"


@attribute(Audited(), Decorator(CachedRepository))
class UserRepository:
    mailer_config: Annotated[dict[str, str], Inject("mail.config")]

    def __init__(self, engine: Engine, table: str = "users") -> None:
        self.engine = engine
        self.table = table

    def find(self, user_id: int) -> str:
        return f"{self.table}#{user_id}@{self.engine.dsn}"


def test_widget_plan_builds_and_shares() -> None:
    container = Container()
    plan = container.when_creating(Widget).set_argument("name", "gear")

    widget = plan.create_object({})

    assert isinstance(widget, Widget)
    assert widget.name == "gear"

    first = container.create_shared_object(Widget, {})
    second = container.create_shared_object(Widget, {})

    assert first is second


def test_application_wiring() -> None:
    container = Container()
    container.attributes.register_attribute(Audited, AttributeTarget.CLASS)
    container.bind_shared(AuditLog, AuditLog)
    container.bind("engine", share(Engine, "sqlite://app.db"))
    container.alias(Engine, "engine")
    container.bind("mail.config", {"host": "smtp.local"})
    container.when_creating(UserRepository).set_argument("table", lambda: "accounts")

    repository = container.create_shared_object(UserRepository)

    assert isinstance(repository, CachedRepository)
    assert repository.find(7) == "cached accounts#7@sqlite://app.db"
    assert repository.inner.engine is container.get("engine")
    assert repository.inner.mailer_config == {"host": "smtp.local"}
    assert container.get(AuditLog).entries == ["CachedRepository"]
    assert container.get(UserRepository) is repository
