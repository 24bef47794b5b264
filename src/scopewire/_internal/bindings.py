from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from scopewire._internal.lifetime import Lifetime
from scopewire._internal.request import ConstructorArgument, Request

if TYPE_CHECKING:
    from scopewire._internal.activation import Context
    from scopewire._internal.providers import Provider

ActivationAction = Callable[["Context", Any], None]
"""Callback run with the activation context and the instance."""


@dataclass(kw_only=True, eq=False, slots=True)
class Binding:
    """Map a service key to the provider that produces it.

    Bindings compare by identity; the singleton instance cache and cycle
    detection rely on that. ``is_implicit`` marks bindings synthesized by the
    scope (self-bindings, default values) as opposed to registrations a user
    declared.
    """

    service: Any
    provider: Provider
    lifetime: Lifetime = Lifetime.TRANSIENT
    is_implicit: bool = False
    name: str | None = None
    condition: Callable[[Request], bool] | None = None
    arguments: tuple[ConstructorArgument, ...] = ()
    on_activation: tuple[ActivationAction, ...] = ()
    on_deactivation: tuple[ActivationAction, ...] = ()

    @property
    def is_conditional(self) -> bool:
        return self.condition is not None

    @property
    def reuses_instance(self) -> bool:
        """Whether repeated resolutions of this binding hand out the same object."""
        return self.lifetime is Lifetime.SINGLETON or self.provider.returns_same_instance

    def matches(self, request: Request) -> bool:
        """Return whether this binding may satisfy ``request``.

        Unique requests without a name only match unnamed bindings; requests
        for every instance (``is_unique=False``) without a name match all
        bindings of the service.

        Args:
            request: Request being resolved.

        """
        if request.name is not None:
            if self.name != request.name:
                return False
        elif request.is_unique and self.name is not None:
            return False
        return self.condition is None or bool(self.condition(request))

    def __repr__(self) -> str:
        kind = "implicit" if self.is_implicit else "explicit"
        return (
            f"Binding({getattr(self.service, '__qualname__', self.service)!r}, "
            f"{self.provider!r}, {self.lifetime.value}, {kind})"
        )


class BindingStore:
    """Per-scope table of service key -> bindings.

    Reads take a snapshot under the lock and evaluate binding conditions
    outside it, so user callbacks never run while the table is locked.
    """

    def __init__(self) -> None:
        self._bindings: dict[Any, list[Binding]] = {}
        self._lock = threading.Lock()

    def add(self, binding: Binding) -> None:
        """Append ``binding`` to the bindings of its service.

        Args:
            binding: Binding to store.

        """
        with self._lock:
            self._bindings.setdefault(binding.service, []).append(binding)

    def add_implicit(self, request: Request, bindings: list[Binding]) -> list[Binding]:
        """Store synthesized bindings unless a concurrent caller already did.

        Args:
            request: Request the bindings were synthesized for.
            bindings: Implicit bindings to store.

        Returns:
            The implicit bindings matching ``request`` after the update.

        """
        # Implicit bindings only carry scope-owned conditions, safe to evaluate under the lock.
        with self._lock:
            current = list(self._bindings.get(request.service, ()))
            if not any(binding.is_implicit and binding.matches(request) for binding in current):
                for binding in bindings:
                    self._bindings.setdefault(binding.service, []).append(binding)
                current = list(self._bindings.get(request.service, ()))
        return [binding for binding in current if binding.is_implicit and binding.matches(request)]

    def remove(self, service: Any) -> list[Binding]:
        """Remove every binding of ``service``.

        Args:
            service: Service key.

        Returns:
            The removed bindings.

        """
        with self._lock:
            return self._bindings.pop(service, [])

    def get_bindings(self, service: Any) -> list[Binding]:
        """Return a snapshot of the bindings registered for ``service``."""
        with self._lock:
            return list(self._bindings.get(service, ()))

    def has_explicit_binding(self, service: Any) -> bool:
        """Return whether ``service`` has at least one user-declared binding."""
        return any(not binding.is_implicit for binding in self.get_bindings(service))

    def select(self, request: Request, *, ignore_implicit_bindings: bool) -> list[Binding]:
        """Return the stored bindings that satisfy ``request``.

        Args:
            request: Request being resolved.
            ignore_implicit_bindings: Skip bindings synthesized by the scope.

        """
        return [
            binding
            for binding in self.get_bindings(request.service)
            if not (ignore_implicit_bindings and binding.is_implicit) and binding.matches(request)
        ]

    def can_resolve_locally(
        self,
        request: Request,
        ignore_implicit_bindings: bool | None = None,
    ) -> bool:
        """Return whether a stored binding satisfies ``request``; never builds anything.

        Args:
            request: Request being resolved.
            ignore_implicit_bindings: Skip implicit bindings. ``None`` uses the
                request's own flag.

        """
        if ignore_implicit_bindings is None:
            ignore_implicit_bindings = request.ignore_implicit_bindings
        return bool(self.select(request, ignore_implicit_bindings=ignore_implicit_bindings))

    def clear(self) -> None:
        with self._lock:
            self._bindings.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(bindings) for bindings in self._bindings.values())


__all__ = ["ActivationAction", "Binding", "BindingStore"]
