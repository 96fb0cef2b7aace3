"""Quickstart: bindings, sharing and autowiring.

Demonstrates:
1. Autowiring unbound classes from constructor annotations
2. Shared bindings returning the same object every time
3. Protected bindings ignoring later rebinding
"""

from diforge import Container


class Database:
    def __init__(self, url: str = "sqlite://") -> None:
        self.url = url


class UserRepository:
    def __init__(self, db: Database) -> None:
        self.db = db


def main() -> None:
    container = Container()

    repository = container.get(UserRepository)
    print(f"Autowired repository uses {repository.db.url}")

    container.bind_shared(Database, lambda: Database("postgres://"))
    first = container.get(UserRepository)
    second = container.get(UserRepository)
    print(f"Repositories share one database: {first.db is second.db}")

    container.protect("mode", "production")
    container.bind("mode", "testing")
    print(f"Protected mode is still {container.get('mode')!r}")


if __name__ == "__main__":
    main()
