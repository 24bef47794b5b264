"""Constructor selection and method injection.

Classes may declare alternative constructors with ``@constructor``. The scope
picks the candidate with the most parameters it can satisfy from explicit
bindings, arguments or defaults; ``@inject`` forces a candidate. ``@inject``
on a regular method calls it with resolved arguments after construction.
"""

from __future__ import annotations

from scopewire import ChildScope, Initializable, Scope, constructor, inject


class Cache:
    pass


class Metrics:
    pass


class Repository(Initializable):
    def __init__(self) -> None:
        self.cache: Cache | None = None
        self.metrics: Metrics | None = None
        self.ready = False

    @constructor
    def with_cache(cls, cache: Cache) -> Repository:
        repository = cls()
        repository.cache = cache
        return repository

    @inject
    def attach_metrics(self, metrics: Metrics) -> None:
        self.metrics = metrics

    def initialize(self) -> None:
        self.ready = True


def main() -> None:
    with Scope(name="app") as app:
        plain = app.get(Repository)
        print(f"plain_cache={plain.cache}")  # => plain_cache=None
        print(f"metrics_injected={plain.metrics is not None}")  # => metrics_injected=True
        print(f"ready={plain.ready}")  # => ready=True

        app.add_concrete(Cache)
        with ChildScope(app, name="request") as request_scope:
            cached = request_scope.get(Repository)
            uses_cache = cached.cache is not None
            print(f"child_uses_parent_cache={uses_cache}")  # => child_uses_parent_cache=True


if __name__ == "__main__":
    main()
