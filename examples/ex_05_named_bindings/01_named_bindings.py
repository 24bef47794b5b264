"""Named bindings and sequences.

Register several bindings of one service under different names and pick one
with ``Annotated[..., Named(...)]``. A ``list[...]`` parameter receives every
binding of its element type.
"""

from __future__ import annotations

from typing import Annotated

from scopewire import Named, Scope


class Database:
    def __init__(self, dsn: str) -> None:
        self.dsn = dsn


class ReportService:
    def __init__(
        self,
        primary: Annotated[Database, Named("primary")],
        replica: Annotated[Database, Named("replica")],
    ) -> None:
        self.primary = primary
        self.replica = replica


class Plugin:
    def __init__(self, label: str) -> None:
        self.label = label


class PluginHost:
    def __init__(self, plugins: list[Plugin]) -> None:
        self.plugins = plugins


def main() -> None:
    with Scope(name="app") as scope:
        scope.add_instance(Database("postgres://primary"), name="primary")
        scope.add_instance(Database("postgres://replica"), name="replica")

        service = scope.get(ReportService)
        print(f"primary={service.primary.dsn}")  # => primary=postgres://primary
        print(f"replica={service.replica.dsn}")  # => replica=postgres://replica

        named = scope.get(Database, name="replica").dsn
        print(f"by_name={named}")  # => by_name=postgres://replica

        scope.add_instance(Plugin("auth"))
        scope.add_instance(Plugin("metrics"))
        labels = ",".join(plugin.label for plugin in scope.get(PluginHost).plugins)
        print(f"plugins={labels}")  # => plugins=auth,metrics


if __name__ == "__main__":
    main()
