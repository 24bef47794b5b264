"""Quickstart: automatic dependency wiring from type hints.

Start with plain classes, resolve only the top-level service, and let the
scope bind every concrete class in the chain to itself.
"""

from __future__ import annotations

from scopewire import Scope


class Database:
    def __init__(self) -> None:
        self.host = "localhost"


class UserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database


class UserService:
    def __init__(self, repository: UserRepository) -> None:
        self.repository = repository


def main() -> None:
    with Scope(name="app") as scope:
        service = scope.get(UserService)

        print(f"db_host={service.repository.database.host}")  # => db_host=localhost

        chain = (
            f"{type(service).__name__}"
            f">{type(service.repository).__name__}"
            f">{type(service.repository.database).__name__}"
        )
        print(f"chain={chain}")  # => chain=UserService>UserRepository>Database

        implicit = scope.get_bindings(UserService)[0].is_implicit
        print(f"implicit_binding={implicit}")  # => implicit_binding=True


if __name__ == "__main__":
    main()
