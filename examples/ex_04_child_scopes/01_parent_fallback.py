"""Child scopes and parent fallback.

A child scope first uses its own explicit bindings, then explicit bindings of
its ancestors, then its own implicit self-bindings. Instances built through a
parent's binding are built by the parent, with the parent's bindings.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from scopewire import ChildScope, Lifetime, Scope, ScopeWireNoViableBindingError


class Database(ABC):
    @abstractmethod
    def name(self) -> str: ...


class PostgresDatabase(Database):
    def name(self) -> str:
        return "postgres"


class InMemoryDatabase(Database):
    def name(self) -> str:
        return "memory"


class Mailer(ABC):
    @abstractmethod
    def send(self) -> str: ...


class RequestHandler:
    def __init__(self, database: Database) -> None:
        self.database = database


def main() -> None:
    with Scope(name="app") as app:
        app.add_concrete(PostgresDatabase, provides=Database, lifetime=Lifetime.SINGLETON)

        with ChildScope(app, name="request") as request_scope:
            handler = request_scope.get(RequestHandler)
            print(f"database={handler.database.name()}")  # => database=postgres

            shared = handler.database is app.get(Database)
            print(f"shared_with_parent={shared}")  # => shared_with_parent=True

            local_bindings = len(request_scope.get_bindings(Database))
            print(f"local_database_bindings={local_bindings}")  # => local_database_bindings=0

        with ChildScope(app, name="test") as test_scope:
            test_scope.add_concrete(InMemoryDatabase, provides=Database)
            handler = test_scope.get(RequestHandler)
            print(f"overridden={handler.database.name()}")  # => overridden=memory
            print(f"parent_unchanged={app.get(Database).name()}")  # => parent_unchanged=postgres

        leaf = ChildScope(app, name="leaf")
        try:
            leaf.get(Mailer)
        except ScopeWireNoViableBindingError as error:
            tried = " -> ".join(error.attempts)
        print(f"tried={tried}")  # => tried=ChildScope('leaf') -> Scope('app')
        leaf.dispose()


if __name__ == "__main__":
    main()
