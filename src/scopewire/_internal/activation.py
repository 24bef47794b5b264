from __future__ import annotations

import collections.abc
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from scopewire._internal.activation_cache import ActivationCache
from scopewire._internal.components import ComponentContainer, ScopeComponent
from scopewire._internal.lifecycle import Disposable, Initializable
from scopewire._internal.lifetime import Lifetime
from scopewire._internal.providers import invoke_with_targets
from scopewire._internal.selection import Selector
from scopewire._internal.targets import MISSING, Target
from scopewire.exceptions import (
    ScopeWireActivationError,
    ScopeWireCircularDependencyError,
    describe_service,
)

if TYPE_CHECKING:
    from scopewire._internal.bindings import Binding
    from scopewire._internal.request import ConstructorArgument, Request
    from scopewire._internal.scope import ScopeBase

logger = logging.getLogger(__name__)

_SEQUENCE_FACTORIES: dict[Any, Any] = {
    list: list,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    collections.abc.Set: frozenset,
    collections.abc.Sequence: tuple,
}


class Context:
    """Everything known while building one instance for one binding.

    A context is created by the scope that owns ``binding`` and lives for the
    duration of a single activation. Nested dependencies are resolved through
    ``scope``, so an instance built by a parent scope only ever sees the
    parent's bindings.
    """

    __slots__ = ("binding", "parameters", "request", "scope")

    def __init__(self, scope: ScopeBase, request: Request, binding: Binding) -> None:
        self.scope = scope
        self.request = request
        self.binding = binding
        self.parameters: tuple[ConstructorArgument, ...] = (
            *request.parameters,
            *binding.arguments,
        )

    @property
    def components(self) -> ComponentContainer:
        return self.scope.components

    def find_argument(self, name: str) -> Any:
        """Return the value of the constructor argument ``name`` or ``MISSING``.

        Request arguments take precedence over binding arguments.
        """
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter.value
        return MISSING

    def can_supply(self, target: Target) -> bool:
        """Return whether ``target`` is satisfied without resolving anything."""
        if target.service is Context:
            return True
        return any(parameter.name == target.name for parameter in self.parameters)

    def resolve_targets(self, targets: Iterable[Target]) -> list[Any]:
        return [self.resolve_target(target) for target in targets]

    def resolve_target(self, target: Target) -> Any:
        """Return the value injected into ``target``.

        Args:
            target: Parameter of the constructor, factory or method being called.

        Raises:
            ScopeWireNoViableBindingError: If a required dependency cannot be resolved.
            ScopeWireActivationError: If the parameter has neither an annotation
                nor a default value.

        """
        value = self.find_argument(target.name)
        if value is not MISSING:
            return value
        if target.service is Context:
            return self
        if not target.has_service:
            if target.has_default:
                return target.default
            msg = (
                f"Cannot infer the dependency for parameter {target.name!r} while building "
                f"{describe_service(self.request.service)}; annotate it or pass an argument."
            )
            raise ScopeWireActivationError(msg)

        if target.is_sequence:
            request = self.request.create_child(target.element_service, self, target)
            instances = list(self.scope.resolve(request))
            factory = _SEQUENCE_FACTORIES.get(target.sequence_origin, list)
            return factory(instances)

        request = self.request.create_child(target.service, self, target)
        for instance in self.scope.resolve(request):
            return instance
        return target.default if target.has_default else None

    def resolve(self) -> Any:
        """Produce the instance for this context and run it through the pipeline.

        Singletons are handed out only after their pipeline finished; a
        concurrent caller waits for the building thread instead.

        Raises:
            ScopeWireCircularDependencyError: If ``binding`` is already being
                built further up the request chain.
            ScopeWireActivationError: If the provider returned ``None`` and the
                scope does not allow ``None`` injection.

        """
        if self.binding in self.request.active_bindings:
            services = self.request.service_chain()
            chain = " -> ".join(describe_service(service) for service in services)
            msg = f"Circular dependency detected: {chain}."
            raise ScopeWireCircularDependencyError(msg)

        if self.binding.lifetime is Lifetime.SINGLETON:
            return self._resolve_singleton()

        instance = self._create()
        self.components.get(Pipeline).activate(self, instance)
        return instance

    def _resolve_singleton(self) -> Any:
        cache = self.components.get(InstanceCache)
        instance = cache.acquire(self.binding)
        if instance is not MISSING:
            return instance
        try:
            instance = self._create()
            self.components.get(Pipeline).activate(self, instance)
        except BaseException:
            cache.abandon(self.binding)
            raise
        cache.publish(self, instance)
        logger.debug(
            "Cached singleton %s in %r",
            describe_service(self.binding.service),
            self.scope,
        )
        return instance

    def _create(self) -> Any:
        provider = self.binding.provider
        instance = provider.create(self)
        none_allowed = provider.allows_none or self.scope.settings.allow_none_injection
        if instance is None and not none_allowed:
            msg = (
                f"{provider!r} returned None for {describe_service(self.request.service)}; "
                "enable allow_none_injection to permit it."
            )
            raise ScopeWireActivationError(msg)
        return instance

    def __repr__(self) -> str:
        return f"Context({describe_service(self.request.service)}, {self.binding!r})"


class ActivationStrategy(ScopeComponent, ABC):
    """Step run by the pipeline on every newly produced instance."""

    def claim_activation(self, context: Context, instance: Any) -> bool:
        """Return whether the pipeline should activate ``instance`` at all."""
        return True

    def claim_deactivation(self, context: Context, instance: Any) -> bool:
        """Return whether the pipeline should deactivate ``instance`` at all."""
        return True

    @abstractmethod
    def activate(self, context: Context, instance: Any) -> None:
        """Run after ``instance`` was produced for ``context``."""

    def deactivate(self, context: Context, instance: Any) -> None:
        """Run when a cached ``instance`` is released."""


class Pipeline(ScopeComponent):
    """Run activation strategies over produced instances.

    Every strategy may veto the run first; the activation cache strategy does
    so for instances it already recorded, so an object shared between scopes
    is initialized once.
    """

    def activate(self, context: Context, instance: Any) -> None:
        if instance is None:
            return
        strategies = context.components.get_all(ActivationStrategy)
        if not all(strategy.claim_activation(context, instance) for strategy in strategies):
            return
        for strategy in strategies:
            strategy.activate(context, instance)

    def deactivate(self, context: Context, instance: Any) -> None:
        if instance is None:
            return
        strategies = context.components.get_all(ActivationStrategy)
        if not all(strategy.claim_deactivation(context, instance) for strategy in strategies):
            return
        for strategy in strategies:
            strategy.deactivate(context, instance)


class ActivationCacheStrategy(ActivationStrategy):
    """Let only the first pipeline that sees an instance activate it."""

    def claim_activation(self, context: Context, instance: Any) -> bool:
        cache = context.components.get(ActivationCache)
        return cache.try_mark_activated(instance, retain=context.binding.reuses_instance)

    def claim_deactivation(self, context: Context, instance: Any) -> bool:
        return context.components.get(ActivationCache).try_mark_deactivated(instance)

    def activate(self, context: Context, instance: Any) -> None:
        pass


class MethodInjectionStrategy(ActivationStrategy):
    """Call ``@inject`` methods with resolved arguments."""

    def activate(self, context: Context, instance: Any) -> None:
        selector = context.components.get(Selector)
        for method in selector.select_injection_methods(type(instance)):
            values = context.resolve_targets(method.targets)
            invoke_with_targets(getattr(instance, method.name), method.targets, values)


class InitializableStrategy(ActivationStrategy):
    def activate(self, context: Context, instance: Any) -> None:
        if isinstance(instance, Initializable):
            instance.initialize()


class BindingActionStrategy(ActivationStrategy):
    """Run the ``on_activation``/``on_deactivation`` callbacks of the binding."""

    def activate(self, context: Context, instance: Any) -> None:
        for action in context.binding.on_activation:
            action(context, instance)

    def deactivate(self, context: Context, instance: Any) -> None:
        for action in context.binding.on_deactivation:
            action(context, instance)


class DisposableStrategy(ActivationStrategy):
    def activate(self, context: Context, instance: Any) -> None:
        pass

    def deactivate(self, context: Context, instance: Any) -> None:
        if isinstance(instance, Disposable):
            instance.dispose()


@dataclass(slots=True, eq=False)
class _CachedInstance:
    context: Context
    instance: Any


@dataclass(slots=True, eq=False)
class _PendingInstance:
    owner: int
    """``threading.get_ident()`` of the thread building the instance."""
    ready: threading.Event = field(default_factory=threading.Event)


class InstanceCache(ScopeComponent):
    """Hold the singleton instances built by one scope, keyed by binding.

    Each scope owns its own cache, so a singleton lives in the scope whose
    binding produced it. An instance is published only once its activation
    pipeline has finished; callers on other threads wait for it instead of
    seeing a half-built object. No lock is held while the instance is built,
    so nested resolutions on the building thread proceed freely.

    Releasing or clearing deactivates the instances through the pipeline of
    the context that built them.
    """

    def __init__(self, scope: ScopeBase) -> None:
        super().__init__(scope)
        self._lock = threading.Lock()
        self._entries: dict[Binding, _CachedInstance] = {}
        self._pending: dict[Binding, _PendingInstance] = {}

    def acquire(self, binding: Binding) -> Any:
        """Return the published instance for ``binding`` or claim the right to build it.

        Returns ``MISSING`` when the caller must build the instance; it must
        then call ``publish`` or ``abandon``. While another thread builds the
        instance, this waits until it is published or abandoned.

        Raises:
            ScopeWireCircularDependencyError: If the calling thread is already
                building the instance for ``binding``.

        """
        while True:
            with self._lock:
                entry = self._entries.get(binding)
                if entry is not None:
                    return entry.instance
                pending = self._pending.get(binding)
                if pending is None:
                    self._pending[binding] = _PendingInstance(owner=threading.get_ident())
                    return MISSING
            if pending.owner == threading.get_ident():
                msg = (
                    f"Singleton {describe_service(binding.service)} was requested again "
                    "before its activation finished."
                )
                raise ScopeWireCircularDependencyError(msg)
            pending.ready.wait()

    def publish(self, context: Context, instance: Any) -> None:
        """Store the fully activated ``instance`` and wake up waiting callers."""
        with self._lock:
            self._entries[context.binding] = _CachedInstance(context=context, instance=instance)
            pending = self._pending.pop(context.binding, None)
        if pending is not None:
            pending.ready.set()

    def abandon(self, binding: Binding) -> None:
        """Give up building ``binding``; a waiting caller takes over."""
        with self._lock:
            pending = self._pending.pop(binding, None)
        if pending is not None:
            pending.ready.set()

    def release(self, instance: Any) -> bool:
        """Drop ``instance`` from the cache and deactivate it.

        Returns:
            Whether the instance was cached here.

        """
        with self._lock:
            binding = next(
                (key for key, entry in self._entries.items() if entry.instance is instance),
                None,
            )
            entry = self._entries.pop(binding) if binding is not None else None
        if entry is None:
            return False
        self._deactivate(entry)
        return True

    def clear(self) -> None:
        """Deactivate and drop every cached instance, newest first."""
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
        for entry in reversed(entries):
            self._deactivate(entry)

    def dispose(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _deactivate(self, entry: _CachedInstance) -> None:
        entry.context.components.get(Pipeline).deactivate(entry.context, entry.instance)


__all__ = [
    "ActivationCacheStrategy",
    "ActivationStrategy",
    "BindingActionStrategy",
    "Context",
    "DisposableStrategy",
    "InitializableStrategy",
    "InstanceCache",
    "MethodInjectionStrategy",
    "Pipeline",
]
