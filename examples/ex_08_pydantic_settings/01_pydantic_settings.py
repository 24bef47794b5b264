"""Pydantic settings self-binding.

``BaseSettings`` subclasses are bound to themselves as singletons built with
no arguments, so the environment is read once per owning scope.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings

from scopewire import Scope


class AppSettings(BaseSettings):
    value: str = "settings"


class Service:
    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings


def main() -> None:
    with Scope(name="app") as scope:
        first = scope.get(Service).settings
        second = scope.get(Service).settings

        print(f"settings_singleton={first is second}")  # => settings_singleton=True
        print(f"settings_value={first.value}")  # => settings_value=settings


if __name__ == "__main__":
    main()
