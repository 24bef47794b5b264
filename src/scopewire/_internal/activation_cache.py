from __future__ import annotations

import logging
import threading
import weakref
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from scopewire._internal.components import ScopeComponent

if TYPE_CHECKING:
    from scopewire._internal.scope import ChildScope, ScopeBase

logger = logging.getLogger(__name__)


class ActivationCache(ScopeComponent, ABC):
    """Remember which instances already went through activation or deactivation.

    The pipeline consults the cache before running activation strategies, so
    an instance produced by one scope and observed again through another
    scope's pipeline is initialized only once.
    """

    @abstractmethod
    def clear(self) -> None:
        """Forget every recorded instance."""

    @abstractmethod
    def add_activated_instance(self, instance: Any, *, retain: bool = False) -> None:
        """Record ``instance`` as activated."""

    @abstractmethod
    def add_deactivated_instance(self, instance: Any) -> None:
        """Record ``instance`` as deactivated."""

    @abstractmethod
    def is_activated(self, instance: Any) -> bool:
        """Return whether ``instance`` was recorded as activated."""

    @abstractmethod
    def is_deactivated(self, instance: Any) -> bool:
        """Return whether ``instance`` was recorded as deactivated."""

    @abstractmethod
    def try_mark_activated(self, instance: Any, *, retain: bool = False) -> bool:
        """Record ``instance`` as activated unless it already was.

        The check and the write happen atomically, so exactly one caller wins.

        Args:
            instance: Instance about to be activated.
            retain: Keep a strong reference when ``instance`` cannot be weakly
                referenced. Only instances reused by their binding (singletons
                and constants) should be retained.

        Returns:
            Whether this call recorded the instance.

        """

    @abstractmethod
    def try_mark_deactivated(self, instance: Any) -> bool:
        """Record ``instance`` as deactivated unless it already was."""


class _StrongReference:
    __slots__ = ("_instance",)

    def __init__(self, instance: Any) -> None:
        self._instance = instance

    def __call__(self) -> Any:
        return self._instance


class StandardActivationCache(ActivationCache):
    """Own the activation records of a scope tree.

    Records are keyed by object identity, never by ``__eq__``/``__hash__``.
    Instances that support weak references are forgotten once collected.
    Instances that do not (``dict``, ``int``, ``__slots__`` classes) are only
    recorded when the caller asks to retain them, and are then kept until they
    are deactivated or the cache is cleared. All reads and writes go through
    one lock per cache instance.
    """

    def __init__(self, scope: ScopeBase) -> None:
        super().__init__(scope)
        self._lock = threading.RLock()
        self._activated: dict[int, Callable[[], Any]] = {}
        self._deactivated: dict[int, Callable[[], Any]] = {}

    def clear(self) -> None:
        with self._lock:
            self._activated.clear()
            self._deactivated.clear()

    def add_activated_instance(self, instance: Any, *, retain: bool = False) -> None:
        with self._lock:
            self._remember(self._activated, instance, retain=retain)

    def add_deactivated_instance(self, instance: Any) -> None:
        with self._lock:
            self._remember(self._deactivated, instance, retain=False)
            self._drop_retained(self._activated, instance)

    def is_activated(self, instance: Any) -> bool:
        with self._lock:
            return self._contains(self._activated, instance)

    def is_deactivated(self, instance: Any) -> bool:
        with self._lock:
            return self._contains(self._deactivated, instance)

    def try_mark_activated(self, instance: Any, *, retain: bool = False) -> bool:
        with self._lock:
            if self._contains(self._activated, instance):
                return False
            self._remember(self._activated, instance, retain=retain)
            return True

    def try_mark_deactivated(self, instance: Any) -> bool:
        with self._lock:
            if self._contains(self._deactivated, instance):
                return False
            self.add_deactivated_instance(instance)
            return True

    def dispose(self) -> None:
        self.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._activated) + len(self._deactivated)

    def _remember(
        self,
        records: dict[int, Callable[[], Any]],
        instance: Any,
        *,
        retain: bool,
    ) -> None:
        key = id(instance)
        try:
            reference: Callable[[], Any] = weakref.ref(
                instance,
                lambda dead, key=key, records=records: self._forget(records, key, dead),
            )
        except TypeError:
            if not retain:
                return
            reference = _StrongReference(instance)
        records[key] = reference

    def _drop_retained(self, records: dict[int, Callable[[], Any]], instance: Any) -> None:
        reference = records.get(id(instance))
        if isinstance(reference, _StrongReference) and reference() is instance:
            del records[id(instance)]

    def _forget(
        self,
        records: dict[int, Callable[[], Any]],
        key: int,
        reference: weakref.ReferenceType[Any],
    ) -> None:
        with self._lock:
            if records.get(key) is reference:
                del records[key]

    def _contains(self, records: dict[int, Callable[[], Any]], instance: Any) -> bool:
        reference = records.get(id(instance))
        return reference is not None and reference() is instance


class ChildActivationCache(ActivationCache):
    """Forward every record to the activation cache of the parent scope.

    The parent scope is obtained through the child's parent resolution root;
    when the parent is itself a child scope its cache forwards again, so all
    records end up in the root-most cache. ``clear`` does nothing: a child
    scope must not wipe records its ancestors and siblings rely on.

    When the parent root cannot produce a scope (a bare resolution root), the
    child is the root-most scope reachable and keeps the records itself.
    """

    def __init__(self, scope: ChildScope) -> None:
        super().__init__(scope)
        parent_scope = scope.find_parent_scope()
        if parent_scope is None:
            logger.debug("No parent scope reachable; activation records stay in %r", scope)
            self._parent_cache: ActivationCache = StandardActivationCache(scope)
        else:
            self._parent_cache = parent_scope.components.get(ActivationCache)

    def clear(self) -> None:
        pass

    def add_activated_instance(self, instance: Any, *, retain: bool = False) -> None:
        self._parent_cache.add_activated_instance(instance, retain=retain)

    def add_deactivated_instance(self, instance: Any) -> None:
        self._parent_cache.add_deactivated_instance(instance)

    def is_activated(self, instance: Any) -> bool:
        return self._parent_cache.is_activated(instance)

    def is_deactivated(self, instance: Any) -> bool:
        return self._parent_cache.is_deactivated(instance)

    def try_mark_activated(self, instance: Any, *, retain: bool = False) -> bool:
        return self._parent_cache.try_mark_activated(instance, retain=retain)

    def try_mark_deactivated(self, instance: Any) -> bool:
        return self._parent_cache.try_mark_deactivated(instance)


__all__ = ["ActivationCache", "ChildActivationCache", "StandardActivationCache"]
