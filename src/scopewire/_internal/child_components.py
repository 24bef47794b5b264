from __future__ import annotations

from typing import Any, TypeVar

from scopewire._internal.activation_cache import ActivationCache, ChildActivationCache
from scopewire._internal.components import ComponentContainer, ComponentFactory, ScopeComponent
from scopewire._internal.selection import ChildScopeConstructorScorer, ConstructorScorer, Selector
from scopewire.exceptions import (
    ScopeWireImmutableComponentError,
    ScopeWireNoComponentRegisteredError,
)

T = TypeVar("T", bound=ScopeComponent)

IMMUTABLE_COMPONENT_KINDS: frozenset[type[Any]] = frozenset(
    {ActivationCache, ConstructorScorer, Selector},
)
"""Component kinds a child scope can neither add, remove nor replace."""


class ChildComponentContainer(ComponentContainer):
    """Component container of a child scope, layered over a parent container.

    Local registrations are looked up first; a miss falls back to the parent
    container. Writes only ever touch the local registrations, and writes for
    the kinds in ``IMMUTABLE_COMPONENT_KINDS`` are rejected so the activation
    cache, constructor scorer and selector stay consistent across the tree.
    The child variants of those three components are installed locally when
    the container is created.

    Args:
        parent: Container of the parent scope, or a fresh ``ComponentContainer``
            when the parent is a bare resolution root.

    """

    def __init__(self, parent: ComponentContainer) -> None:
        super().__init__()
        self._parent = parent
        self._add(ActivationCache, ChildActivationCache, transient=False)
        self._add(ConstructorScorer, ChildScopeConstructorScorer, transient=False)
        self._add(Selector, Selector, transient=False)

    @property
    def parent(self) -> ComponentContainer:
        return self._parent

    def add(self, kind: type[Any], implementation: ComponentFactory) -> None:
        """Register a local component.

        Raises:
            ScopeWireImmutableComponentError: If ``kind`` is immutable in child scopes.

        """
        self._ensure_mutable(kind)
        super().add(kind, implementation)

    def remove(self, kind: type[Any], implementation: ComponentFactory) -> None:
        """Remove a local component registration.

        Raises:
            ScopeWireImmutableComponentError: If ``kind`` is immutable in child scopes.

        """
        self._ensure_mutable(kind)
        super().remove(kind, implementation)

    def remove_all(self, kind: type[Any]) -> None:
        """Remove every local registration of ``kind``; parent registrations stay.

        Raises:
            ScopeWireImmutableComponentError: If ``kind`` is immutable in child scopes.

        """
        self._ensure_mutable(kind)
        super().remove_all(kind)

    def get(self, kind: type[T]) -> T:
        try:
            return super().get(kind)
        except ScopeWireNoComponentRegisteredError:
            return self._parent.get(kind)

    def get_all(self, kind: type[T]) -> list[T]:
        return [*super().get_all(kind), *self._parent.get_all(kind)]

    def _ensure_mutable(self, kind: type[Any]) -> None:
        if kind in IMMUTABLE_COMPONENT_KINDS:
            raise ScopeWireImmutableComponentError(kind)


__all__ = ["IMMUTABLE_COMPONENT_KINDS", "ChildComponentContainer"]
