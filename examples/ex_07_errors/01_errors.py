"""Common error classes for troubleshooting.

This module triggers representative error paths and prints exception type
names so you can recognize each error category quickly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from scopewire import (
    ChildScope,
    Scope,
    ScopeSettings,
    ScopeWireAmbiguousBindingError,
    ScopeWireCircularDependencyError,
    ScopeWireImmutableComponentError,
    ScopeWireNoViableBindingError,
    ScopeWireScopeDisposedError,
)
from scopewire.components import Selector


class Notifier(ABC):
    @abstractmethod
    def notify(self) -> None: ...


class EmailNotifier(Notifier):
    def notify(self) -> None:
        pass


class SmsNotifier(Notifier):
    def notify(self) -> None:
        pass


class Unregistered:
    pass


class Left:
    def __init__(self, right: Right) -> None:
        self.right = right


class Right:
    def __init__(self, left: Left) -> None:
        self.left = left


def main() -> None:
    strict = Scope(ScopeSettings(autobind_concrete_types=False), name="strict")
    try:
        strict.get(Unregistered)
    except ScopeWireNoViableBindingError as error:
        missing = type(error).__name__
    print(f"missing={missing}")  # => missing=ScopeWireNoViableBindingError

    ambiguous_scope = Scope()
    ambiguous_scope.add_concrete(EmailNotifier, provides=Notifier)
    ambiguous_scope.add_concrete(SmsNotifier, provides=Notifier)
    try:
        ambiguous_scope.get(Notifier)
    except ScopeWireAmbiguousBindingError as error:
        ambiguous = type(error).__name__
    print(f"ambiguous={ambiguous}")  # => ambiguous=ScopeWireAmbiguousBindingError

    try:
        Scope().get(Left)
    except ScopeWireCircularDependencyError as error:
        circular = type(error).__name__
    print(f"circular={circular}")  # => circular=ScopeWireCircularDependencyError

    child = ChildScope(strict)
    try:
        child.components.add(Selector, Selector)
    except ScopeWireImmutableComponentError as error:
        immutable = type(error).__name__
    print(f"immutable={immutable}")  # => immutable=ScopeWireImmutableComponentError

    strict.dispose()
    try:
        strict.get(Unregistered)
    except ScopeWireScopeDisposedError as error:
        disposed = type(error).__name__
    print(f"disposed={disposed}")  # => disposed=ScopeWireScopeDisposedError


if __name__ == "__main__":
    main()
