"""Lifetimes and release.

Transient bindings build a new instance per resolution. Singleton bindings are
cached by the scope that owns the binding and deactivated when that scope
releases them or is disposed.
"""

from __future__ import annotations

from scopewire import Disposable, Lifetime, Scope, ScopeSettings


class RequestId:
    pass


class ConnectionPool(Disposable):
    def __init__(self) -> None:
        self.closed = False

    def dispose(self) -> None:
        self.closed = True


def main() -> None:
    scope = Scope(name="app")
    scope.add_concrete(RequestId)
    scope.add_concrete(ConnectionPool, lifetime=Lifetime.SINGLETON)

    transient_same = scope.get(RequestId) is scope.get(RequestId)
    print(f"transient_same={transient_same}")  # => transient_same=False

    pool = scope.get(ConnectionPool)
    print(f"singleton_same={pool is scope.get(ConnectionPool)}")  # => singleton_same=True

    released = scope.release(pool)
    print(f"released={released} closed={pool.closed}")  # => released=True closed=True

    fresh = scope.get(ConnectionPool)
    scope.dispose()
    print(f"closed_on_dispose={fresh.closed}")  # => closed_on_dispose=True

    shared = Scope(ScopeSettings(default_lifetime=Lifetime.SINGLETON))
    shared.add_concrete(RequestId)
    from_scope_same = shared.get(RequestId) is shared.get(RequestId)
    print(f"from_scope_same={from_scope_same}")  # => from_scope_same=True
    shared.dispose()


if __name__ == "__main__":
    main()
