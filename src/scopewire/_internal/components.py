from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar, cast

from scopewire.exceptions import (
    ScopeWireInvalidRegistrationError,
    ScopeWireNoComponentRegisteredError,
    ScopeWireScopeDisposedError,
    describe_service,
)

if TYPE_CHECKING:
    from scopewire._internal.scope import ScopeBase
    from scopewire._internal.settings import ScopeSettings

T = TypeVar("T", bound="ScopeComponent")

ComponentFactory = Callable[["ScopeBase"], Any]
"""Callable building a component for the scope that owns the container (usually the class)."""

logger = logging.getLogger(__name__)


class ScopeComponent:
    """Base class for pluggable scope components.

    Components are built lazily by the ``ComponentContainer`` that holds their
    registration, with the scope owning that container as the only argument.
    They must not keep state that belongs to a particular resolution; the
    current ``Context`` is passed to every call instead.
    """

    def __init__(self, scope: ScopeBase) -> None:
        self.settings: ScopeSettings = scope.settings

    def dispose(self) -> None:
        """Release resources held by the component."""


@dataclass(slots=True, eq=False)
class _ComponentRegistration:
    implementation: ComponentFactory
    transient: bool
    instance: Any = None
    lock: threading.Lock = field(default_factory=threading.Lock)


class ComponentContainer:
    """Hold the component registrations of a scope.

    Each capability kind maps to an ordered list of implementations. ``add``
    registrations are built once and reused, ``add_transient`` registrations
    are built on every lookup. This container has no notion of a parent and
    accepts writes for every kind; it is the registry of root scopes.
    """

    def __init__(self) -> None:
        self._registrations: dict[type[Any], list[_ComponentRegistration]] = {}
        self._lock = threading.RLock()
        self._scope_ref: weakref.ReferenceType[ScopeBase] | None = None
        self._disposed = False

    def attach(self, scope: ScopeBase) -> None:
        """Bind the container to the scope its components are built for.

        Only a weak reference is kept so the container never keeps its scope
        alive.

        Args:
            scope: Scope that owns this container.

        """
        self._scope_ref = weakref.ref(scope)

    def add(self, kind: type[Any], implementation: ComponentFactory) -> None:
        """Register a component built once and reused for every ``get``.

        Args:
            kind: Capability kind (an abstract component class).
            implementation: Component class or factory called with the owning scope.

        Raises:
            ScopeWireInvalidRegistrationError: If ``implementation`` is a class
                that does not subclass ``kind``.

        """
        self._add(kind, implementation, transient=False)

    def add_transient(self, kind: type[Any], implementation: ComponentFactory) -> None:
        """Register a component built anew on every lookup.

        Args:
            kind: Capability kind (an abstract component class).
            implementation: Component class or factory called with the owning scope.

        """
        self._add(kind, implementation, transient=True)

    def remove(self, kind: type[Any], implementation: ComponentFactory) -> None:
        """Remove the registration of ``implementation`` for ``kind`` and dispose its instance.

        Args:
            kind: Capability kind.
            implementation: Implementation previously passed to ``add``.

        """
        with self._lock:
            registrations = self._registrations.get(kind, [])
            removed = [item for item in registrations if item.implementation is implementation]
            remaining = [item for item in registrations if item not in removed]
            if remaining:
                self._registrations[kind] = remaining
            else:
                self._registrations.pop(kind, None)
        self._dispose_registrations(removed)

    def remove_all(self, kind: type[Any]) -> None:
        """Remove every registration for ``kind`` and dispose the built instances.

        Args:
            kind: Capability kind.

        """
        with self._lock:
            removed = self._registrations.pop(kind, [])
        self._dispose_registrations(removed)

    def has(self, kind: type[Any]) -> bool:
        """Return whether this container itself holds a registration for ``kind``."""
        with self._lock:
            return bool(self._registrations.get(kind))

    def get(self, kind: type[T]) -> T:
        """Return the first registered component of ``kind``.

        Args:
            kind: Capability kind.

        Raises:
            ScopeWireNoComponentRegisteredError: If no implementation is registered.

        """
        with self._lock:
            registrations = list(self._registrations.get(kind, ()))
        if not registrations:
            raise ScopeWireNoComponentRegisteredError(kind)
        return cast("T", self._instance_for(registrations[0]))

    def get_all(self, kind: type[T]) -> list[T]:
        """Return every registered component of ``kind`` in registration order.

        Args:
            kind: Capability kind.

        """
        with self._lock:
            registrations = list(self._registrations.get(kind, ()))
        return [cast("T", self._instance_for(registration)) for registration in registrations]

    def dispose(self) -> None:
        """Dispose every component instance built by this container."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            registrations = [
                registration
                for kind_registrations in self._registrations.values()
                for registration in kind_registrations
            ]
            self._registrations.clear()
        self._dispose_registrations(registrations)

    def _add(self, kind: type[Any], implementation: ComponentFactory, *, transient: bool) -> None:
        if not callable(implementation):
            msg = f"Component implementation for {describe_service(kind)} must be callable."
            raise ScopeWireInvalidRegistrationError(msg)
        if isinstance(implementation, type) and not issubclass(implementation, kind):
            msg = (
                f"Component implementation {describe_service(implementation)} does not "
                f"subclass {describe_service(kind)}."
            )
            raise ScopeWireInvalidRegistrationError(msg)
        with self._lock:
            self._registrations.setdefault(kind, []).append(
                _ComponentRegistration(implementation=implementation, transient=transient),
            )
        logger.debug(
            "Registered component %s -> %s (transient=%s)",
            describe_service(kind),
            describe_service(implementation),
            transient,
        )

    def _instance_for(self, registration: _ComponentRegistration) -> Any:
        if registration.transient:
            return registration.implementation(self._owner())
        if registration.instance is not None:
            return registration.instance
        # Built outside the container lock: building may resolve through a parent scope.
        instance = registration.implementation(self._owner())
        with registration.lock:
            if registration.instance is None:
                registration.instance = instance
            return registration.instance

    def _owner(self) -> ScopeBase:
        scope = self._scope_ref() if self._scope_ref is not None else None
        if scope is None:
            msg = "Component container is not attached to a live scope."
            raise ScopeWireScopeDisposedError(msg)
        return scope

    def _dispose_registrations(self, registrations: list[_ComponentRegistration]) -> None:
        for registration in registrations:
            instance = registration.instance
            registration.instance = None
            if isinstance(instance, ScopeComponent):
                instance.dispose()


__all__ = ["ComponentContainer", "ComponentFactory", "ScopeComponent"]
