"""Attributes: declarative layers around construction.

Demonstrates:
1. Inject on class properties and constructor parameters
2. Decorator wrapping the constructed object
3. A custom class attribute with injected collaborators
"""

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
)


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


class Transport:
    def send(self, to: str, body: str) -> str:
        return f"to={to} body={body}"


class RetryingMailer:
    def __init__(self, inner: "Mailer", retries: int = 1) -> None:
        self.inner = inner
        self.retries = retries

    def send(self, to: str, body: str) -> str:
        return f"{self.inner.send(to, body)} (retries={self.retries})"


@attribute(Audited(), Decorator(RetryingMailer, {"retries": 3}))
class Mailer:
    transport: Annotated[Transport, Inject()]

    def __init__(self, sender: Annotated[str, Inject("mail.sender")]) -> None:
        self.sender = sender

    def send(self, to: str, body: str) -> str:
        return f"{self.sender} -> {self.transport.send(to, body)}"


def main() -> None:
    container = Container()
    container.attributes.register_attribute(Audited, AttributeTarget.CLASS)
    container.bind_shared(AuditLog, AuditLog)
    container.bind("mail.sender", "noreply@example.com")

    mailer = container.get(Mailer)
    print(mailer.send("ada@example.com", "hello"))
    print(f"Audit log: {container.get(AuditLog).entries}")


if __name__ == "__main__":
    main()
