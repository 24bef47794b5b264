from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Mapping
from types import TracebackType
from typing import TYPE_CHECKING, Any, Literal, Protocol, TypeVar, cast, get_type_hints

from scopewire._internal.activation import (
    ActivationCacheStrategy,
    ActivationStrategy,
    BindingActionStrategy,
    Context,
    DisposableStrategy,
    InitializableStrategy,
    InstanceCache,
    MethodInjectionStrategy,
    Pipeline,
)
from scopewire._internal.activation_cache import ActivationCache, StandardActivationCache
from scopewire._internal.bindings import ActivationAction, Binding, BindingStore
from scopewire._internal.child_components import ChildComponentContainer
from scopewire._internal.components import ComponentContainer
from scopewire._internal.lifetime import Lifetime
from scopewire._internal.missing_bindings import (
    DefaultValueBindingResolver,
    MissingBindingResolver,
    SelfBindingResolver,
)
from scopewire._internal.providers import (
    ConstantProvider,
    FactoryProvider,
    MethodProvider,
    Provider,
    StandardProvider,
)
from scopewire._internal.request import ConstructorArgument, Request, build_arguments
from scopewire._internal.selection import ConstructorScorer, Selector, StandardConstructorScorer
from scopewire._internal.settings import ScopeSettings
from scopewire._internal.targets import TargetExtractor
from scopewire._internal.type_checks import is_runtime_class
from scopewire.exceptions import (
    ScopeWireAmbiguousBindingError,
    ScopeWireInvalidRegistrationError,
    ScopeWireNoViableBindingError,
    ScopeWireScopeDisposedError,
    describe_service,
)

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ResolutionRoot(Protocol):
    """The only surface a child scope uses to reach its parent.

    Any object implementing these two methods can act as a parent, so a child
    scope never depends on the internals of the scope above it.
    """

    def can_resolve(self, request: Request, ignore_implicit_bindings: bool | None = None) -> bool:
        """Return whether ``request`` can be satisfied; never builds anything."""
        ...

    def resolve(self, request: Request) -> Iterator[Any]:
        """Return a lazy iterator over the instances satisfying ``request``."""
        ...


def add_standard_components(
    components: ComponentContainer,
    settings: ScopeSettings,
    *,
    include_immutable: bool = True,
) -> None:
    """Register the components every scope needs to build instances.

    Args:
        components: Container to populate.
        settings: Settings of the scope that owns ``components``.
        include_immutable: Also register the activation cache, constructor
            scorer and selector. Child containers install their own variants
            of these and must skip them.

    """
    if include_immutable:
        components.add(ActivationCache, StandardActivationCache)
        components.add(ConstructorScorer, StandardConstructorScorer)
        components.add(Selector, Selector)
    components.add(Pipeline, Pipeline)
    if not settings.activation_cache_disabled:
        components.add(ActivationStrategy, ActivationCacheStrategy)
    components.add(ActivationStrategy, MethodInjectionStrategy)
    components.add(ActivationStrategy, InitializableStrategy)
    components.add(ActivationStrategy, BindingActionStrategy)
    components.add(ActivationStrategy, DisposableStrategy)
    components.add(MissingBindingResolver, DefaultValueBindingResolver)
    components.add(MissingBindingResolver, SelfBindingResolver)
    components.add(InstanceCache, InstanceCache)


def _current_scope(context: Context) -> Any:
    return context.scope


def _binding_rank(binding: Binding) -> tuple[bool, bool]:
    return (not binding.is_implicit, binding.is_conditional)


class ScopeBase:
    """Shared behavior of root and child scopes.

    A scope owns a binding store and a component container. Every scope binds
    itself under ``ScopeBase``, ``ResolutionRoot`` and its own class, so
    instances can ask for the scope that built them.
    """

    def __init__(
        self,
        *,
        settings: ScopeSettings,
        components: ComponentContainer,
        name: str | None = None,
    ) -> None:
        self._settings = settings
        self._components = components
        self._name = name
        self._bindings = BindingStore()
        self._lock = threading.Lock()
        self._disposed = False
        self._extractor = TargetExtractor()
        components.attach(self)
        for service in dict.fromkeys((ScopeBase, ResolutionRoot, type(self))):
            self._bindings.add(Binding(service=service, provider=MethodProvider(_current_scope)))

    @property
    def settings(self) -> ScopeSettings:
        return self._settings

    @property
    def components(self) -> ComponentContainer:
        return self._components

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def parent_scope(self) -> ScopeBase | None:
        """Return the scope this scope falls back to, if it has one."""
        return None

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    # Resolution

    def can_resolve(self, request: Request, ignore_implicit_bindings: bool | None = None) -> bool:
        """Return whether a stored binding of this scope satisfies ``request``.

        Missing-binding resolvers are not consulted, so nothing is created or
        stored by this call.

        Args:
            request: Request to check.
            ignore_implicit_bindings: Skip implicit bindings. ``None`` uses the
                request's own flag.

        """
        return self.can_resolve_locally(request, ignore_implicit_bindings)

    def can_resolve_locally(
        self,
        request: Request,
        ignore_implicit_bindings: bool | None = None,
    ) -> bool:
        self._ensure_active()
        return self._bindings.can_resolve_locally(request, ignore_implicit_bindings)

    def resolve(self, request: Request) -> Iterator[Any]:
        """Return a lazy iterator over the instances satisfying ``request``.

        Nothing is selected or built until the first element is pulled.
        Optional requests without a matching binding produce an empty
        iterator.

        Raises:
            ScopeWireNoViableBindingError: While iterating, when no binding
                matches a required request.

        """
        return self.resolve_locally(request, allow_empty=request.is_optional)

    def has_explicit_binding(self, service: Any) -> bool:
        return self._bindings.has_explicit_binding(service)

    def get_bindings(self, service: Any) -> list[Binding]:
        return self._bindings.get_bindings(service)

    def resolve_locally(self, request: Request, *, allow_empty: bool = False) -> Iterator[Any]:
        """Lazily resolve ``request`` from this scope's own bindings only.

        Missing-binding resolvers run on the first pull when no stored
        binding matches. Parents are never consulted.
        """
        self._ensure_active()
        try:
            bindings = self._select_bindings(request)
        except ScopeWireNoViableBindingError:
            if allow_empty:
                return
            raise
        for binding in bindings:
            yield Context(self, request, binding).resolve()

    def _select_bindings(self, request: Request) -> list[Binding]:
        bindings = self._bindings.select(
            request,
            ignore_implicit_bindings=request.ignore_implicit_bindings,
        )
        if not bindings and not request.ignore_implicit_bindings:
            bindings = self._handle_missing_binding(request)
        if not bindings:
            raise ScopeWireNoViableBindingError(request, attempted_in=repr(self))
        if request.is_unique:
            return [self._select_unique(request, bindings)]
        if any(not binding.is_implicit for binding in bindings):
            return [binding for binding in bindings if not binding.is_implicit]
        return bindings

    def _select_unique(self, request: Request, bindings: list[Binding]) -> Binding:
        best_rank = max(_binding_rank(binding) for binding in bindings)
        best = [binding for binding in bindings if _binding_rank(binding) == best_rank]
        if len(best) > 1:
            msg = (
                f"{len(best)} bindings of {describe_service(request.service)} in {self!r} match "
                "a request for a single instance; name them or remove the duplicates."
            )
            raise ScopeWireAmbiguousBindingError(msg)
        return best[0]

    def _handle_missing_binding(self, request: Request) -> list[Binding]:
        for resolver in self._components.get_all(MissingBindingResolver):
            synthesized = resolver.resolve(self, request)
            if synthesized:
                logger.debug(
                    "%s synthesized %d implicit binding(s) for %s in %r",
                    type(resolver).__name__,
                    len(synthesized),
                    describe_service(request.service),
                    self,
                )
                return self._bindings.add_implicit(request, synthesized)
        return []

    # Convenience API

    def create_request(
        self,
        service: Any,
        *,
        name: str | None = None,
        arguments: Mapping[str, Any] | None = None,
        is_optional: bool = False,
        is_unique: bool = True,
        ignore_implicit_bindings: bool = False,
    ) -> Request:
        """Build a top-level request for ``service``.

        Args:
            service: Service key to resolve.
            name: Only match bindings registered under this name.
            arguments: Constructor arguments overriding injected values by
                parameter name. Pass ``ConstructorArgument(..., inherited=True)``
                values to also apply them to nested dependencies.
            is_optional: Produce nothing instead of failing when unresolvable.
            is_unique: Request a single instance (``False`` for all of them).
            ignore_implicit_bindings: Only use explicit bindings.

        """
        return Request(
            service=service,
            name=name,
            parameters=build_arguments(arguments),
            is_optional=is_optional,
            is_unique=is_unique,
            ignore_implicit_bindings=ignore_implicit_bindings,
        )

    def get(
        self,
        service: type[T],
        *,
        name: str | None = None,
        arguments: Mapping[str, Any] | None = None,
    ) -> T:
        """Resolve one instance of ``service``.

        Args:
            service: Service key to resolve.
            name: Only match bindings registered under this name.
            arguments: Constructor arguments overriding injected values by name.

        Raises:
            ScopeWireNoViableBindingError: If no scope in the chain can
                produce ``service``.
            ScopeWireAmbiguousBindingError: If several bindings match equally.

        Examples:
            .. code-block:: python

                scope = Scope()
                scope.add_concrete(SqlRepository, provides=Repository)
                repository = scope.get(Repository)

        """
        request = self.create_request(service, name=name, arguments=arguments)
        for instance in self.resolve(request):
            return cast("T", instance)
        raise ScopeWireNoViableBindingError(request, attempted_in=repr(self))

    def try_get(
        self,
        service: type[T],
        *,
        name: str | None = None,
        arguments: Mapping[str, Any] | None = None,
    ) -> T | None:
        """Resolve one instance of ``service`` or return ``None`` when nothing can produce it."""
        request = self.create_request(service, name=name, arguments=arguments, is_optional=True)
        try:
            return next(iter(self.resolve(request)), None)
        except ScopeWireNoViableBindingError:
            logger.debug(
                "try_get(%s) found no viable binding in %r",
                describe_service(service),
                self,
            )
            return None

    def get_all(
        self,
        service: type[T],
        *,
        name: str | None = None,
        arguments: Mapping[str, Any] | None = None,
    ) -> list[T]:
        """Resolve every instance of ``service``; an unresolvable service gives an empty list."""
        request = self.create_request(
            service,
            name=name,
            arguments=arguments,
            is_optional=True,
            is_unique=False,
        )
        return list(self.resolve(request))

    def can_resolve_service(self, service: Any, *, name: str | None = None) -> bool:
        """Return whether ``service`` has a stored binding here or up the chain."""
        return self.can_resolve(self.create_request(service, name=name))

    def release(self, instance: Any) -> bool:
        """Deactivate a singleton cached by this scope and forget it.

        Returns:
            Whether ``instance`` was cached by this scope.

        """
        self._ensure_active()
        if not self._components.has(InstanceCache):
            return False
        return self._components.get(InstanceCache).release(instance)

    # Registration

    def add_instance(
        self,
        instance: Any,
        *,
        provides: Any | Literal["infer"] = "infer",
        name: str | None = None,
    ) -> Binding:
        """Bind a pre-built instance.

        Args:
            instance: Value returned on every resolution.
            provides: Service key to bind. ``"infer"`` uses ``type(instance)``.
            name: Register the binding under a name.

        Raises:
            ScopeWireInvalidRegistrationError: If ``provides`` is ``None``.

        Examples:
            .. code-block:: python

                scope.add_instance(Settings(api_url="https://api.example.com"))

        """
        service = self._resolve_provides(
            provides,
            inferred=type(instance),
            method_name="add_instance",
        )
        return self._add_binding(
            Binding(service=service, provider=ConstantProvider(instance), name=name),
        )

    def add_concrete(
        self,
        concrete_type: type[Any],
        *,
        provides: Any | Literal["infer"] = "infer",
        lifetime: Lifetime | Literal["from_scope"] = "from_scope",
        name: str | None = None,
        condition: Callable[[Request], bool] | None = None,
        arguments: Mapping[str, Any] | None = None,
        on_activation: ActivationAction | None = None,
        on_deactivation: ActivationAction | None = None,
    ) -> Binding:
        """Bind a service to a class built through constructor selection.

        Args:
            concrete_type: Class to instantiate.
            provides: Service key to bind. ``"infer"`` uses ``concrete_type``.
            lifetime: Binding lifetime, or ``"from_scope"`` for the scope's
                ``default_lifetime``.
            name: Register the binding under a name.
            condition: Predicate over the request; the binding only matches
                requests it accepts.
            arguments: Constructor arguments applied to every activation.
            on_activation: Called with the context and instance after activation.
            on_deactivation: Called with the context and instance on release.

        Raises:
            ScopeWireInvalidRegistrationError: If ``concrete_type`` is not a class.

        """
        if not is_runtime_class(concrete_type):
            msg = f"add_concrete() expects a class, got {concrete_type!r}."
            raise ScopeWireInvalidRegistrationError(msg)
        service = self._resolve_provides(
            provides,
            inferred=concrete_type,
            method_name="add_concrete",
        )
        return self._add_binding(
            self._build_binding(
                service,
                StandardProvider(concrete_type),
                lifetime=lifetime,
                name=name,
                condition=condition,
                arguments=arguments,
                on_activation=on_activation,
                on_deactivation=on_deactivation,
            ),
        )

    def add_factory(
        self,
        factory: Callable[..., Any],
        *,
        provides: Any | Literal["infer"] = "infer",
        lifetime: Lifetime | Literal["from_scope"] = "from_scope",
        name: str | None = None,
        condition: Callable[[Request], bool] | None = None,
        arguments: Mapping[str, Any] | None = None,
        on_activation: ActivationAction | None = None,
        on_deactivation: ActivationAction | None = None,
    ) -> Binding:
        """Bind a service to a factory whose parameters are injected.

        Parameters are resolved like constructor parameters; annotate them
        with ``Context`` to receive the activation context.

        Args:
            factory: Callable returning the instance.
            provides: Service key to bind. ``"infer"`` reads the factory's
                return annotation.
            lifetime: Binding lifetime, or ``"from_scope"``.
            name: Register the binding under a name.
            condition: Predicate over the request.
            arguments: Arguments applied to every call, by parameter name.
            on_activation: Called with the context and instance after activation.
            on_deactivation: Called with the context and instance on release.

        Raises:
            ScopeWireInvalidRegistrationError: If ``factory`` is not callable or
                its return type cannot be inferred.

        Examples:
            .. code-block:: python

                def build_engine(settings: Settings) -> Engine:
                    return Engine(settings.database_url)

                scope.add_factory(build_engine, lifetime=Lifetime.SINGLETON)

        """
        if not callable(factory):
            msg = f"add_factory() expects a callable, got {factory!r}."
            raise ScopeWireInvalidRegistrationError(msg)
        service = self._resolve_provides(
            provides,
            inferred=self._infer_return_type(factory),
            method_name="add_factory",
        )
        provider = FactoryProvider(factory=factory, targets=self._extractor.extract(factory))
        return self._add_binding(
            self._build_binding(
                service,
                provider,
                lifetime=lifetime,
                name=name,
                condition=condition,
                arguments=arguments,
                on_activation=on_activation,
                on_deactivation=on_deactivation,
            ),
        )

    def add_method(
        self,
        method: Callable[[Context], Any],
        *,
        provides: Any | Literal["infer"] = "infer",
        lifetime: Lifetime | Literal["from_scope"] = "from_scope",
        name: str | None = None,
        condition: Callable[[Request], bool] | None = None,
        on_activation: ActivationAction | None = None,
        on_deactivation: ActivationAction | None = None,
    ) -> Binding:
        """Bind a service to a callback receiving the activation context.

        The callback can resolve further services through ``context.scope``.

        Args:
            method: Callable taking the ``Context`` and returning the instance.
            provides: Service key to bind. ``"infer"`` reads the return annotation.
            lifetime: Binding lifetime, or ``"from_scope"``.
            name: Register the binding under a name.
            condition: Predicate over the request.
            on_activation: Called with the context and instance after activation.
            on_deactivation: Called with the context and instance on release.

        Raises:
            ScopeWireInvalidRegistrationError: If ``method`` is not callable or
                its return type cannot be inferred.

        """
        if not callable(method):
            msg = f"add_method() expects a callable, got {method!r}."
            raise ScopeWireInvalidRegistrationError(msg)
        service = self._resolve_provides(
            provides,
            inferred=self._infer_return_type(method),
            method_name="add_method",
        )
        return self._add_binding(
            self._build_binding(
                service,
                MethodProvider(method),
                lifetime=lifetime,
                name=name,
                condition=condition,
                arguments=None,
                on_activation=on_activation,
                on_deactivation=on_deactivation,
            ),
        )

    def remove(self, service: Any) -> list[Binding]:
        """Remove every binding of ``service`` from this scope.

        Parent scopes are never touched.

        Returns:
            The removed bindings.

        """
        self._ensure_active()
        removed = self._bindings.remove(service)
        logger.debug(
            "Removed %d binding(s) of %s from %r",
            len(removed),
            describe_service(service),
            self,
        )
        return removed

    # Lifecycle

    def dispose(self) -> None:
        """Deactivate this scope's singletons and release its own components.

        Parent scopes, their components and their cached instances are left
        untouched. Calling ``dispose`` again does nothing.
        """
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
        if self._components.has(InstanceCache):
            self._components.get(InstanceCache).clear()
        self._components.dispose()
        self._bindings.clear()
        logger.debug("Disposed %r", self)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.dispose()

    def __repr__(self) -> str:
        if self._name is None:
            return f"{type(self).__name__}()"
        return f"{type(self).__name__}({self._name!r})"

    # Helpers

    def _ensure_active(self) -> None:
        if self._disposed:
            msg = f"{self!r} is disposed."
            raise ScopeWireScopeDisposedError(msg)

    def _add_binding(self, binding: Binding) -> Binding:
        self._ensure_active()
        self._bindings.add(binding)
        logger.debug(
            "Bound %s -> %r in %r",
            describe_service(binding.service),
            binding.provider,
            self,
        )
        return binding

    def _build_binding(
        self,
        service: Any,
        provider: Provider,
        *,
        lifetime: Lifetime | Literal["from_scope"],
        name: str | None,
        condition: Callable[[Request], bool] | None,
        arguments: Mapping[str, Any] | None,
        on_activation: ActivationAction | None,
        on_deactivation: ActivationAction | None,
    ) -> Binding:
        if lifetime == "from_scope":
            resolved_lifetime = self._settings.default_lifetime
        elif isinstance(lifetime, Lifetime):
            resolved_lifetime = lifetime
        else:
            msg = f"Unsupported lifetime {lifetime!r}; use a Lifetime member or 'from_scope'."
            raise ScopeWireInvalidRegistrationError(msg)
        binding_arguments: tuple[ConstructorArgument, ...] = build_arguments(arguments)
        return Binding(
            service=service,
            provider=provider,
            lifetime=resolved_lifetime,
            name=name,
            condition=condition,
            arguments=binding_arguments,
            on_activation=(on_activation,) if on_activation is not None else (),
            on_deactivation=(on_deactivation,) if on_deactivation is not None else (),
        )

    def _resolve_provides(self, provides: Any, *, inferred: Any, method_name: str) -> Any:
        if provides is None:
            msg = f"{method_name}() parameter 'provides' must not be None; use 'infer'."
            raise ScopeWireInvalidRegistrationError(msg)
        if not (isinstance(provides, str) and provides == "infer"):
            return provides
        if inferred is None:
            msg = (
                f"{method_name}() cannot infer the provided service; annotate the return type "
                "or pass 'provides'."
            )
            raise ScopeWireInvalidRegistrationError(msg)
        return inferred

    def _infer_return_type(self, factory: Callable[..., Any]) -> Any:
        if is_runtime_class(factory):
            return factory
        try:
            return_type = get_type_hints(factory, include_extras=True).get("return")
        except (AttributeError, NameError, TypeError):
            return None
        if return_type is type(None):
            return None
        return return_type


class Scope(ScopeBase):
    """Root scope of a scope tree.

    A root scope has no parent; its component container accepts writes for
    every kind, including the activation cache, constructor scorer and
    selector that its descendants inherit.

    Args:
        settings: Scope settings. Defaults to ``ScopeSettings()``.
        name: Name used in diagnostics.

    Examples:
        .. code-block:: python

            with Scope(name="app") as app:
                app.add_concrete(PostgresDatabase, provides=Database, lifetime=Lifetime.SINGLETON)
                database = app.get(Database)

    """

    def __init__(self, settings: ScopeSettings | None = None, *, name: str | None = None) -> None:
        settings = settings if settings is not None else ScopeSettings()
        components = ComponentContainer()
        super().__init__(settings=settings, components=components, name=name)
        add_standard_components(components, settings)


class ChildScope(ScopeBase):
    """Scope that falls back to a parent resolution root.

    Resolution prefers, in order: explicit bindings of this scope, explicit
    bindings up the chain, implicit bindings of this scope, and finally
    anything the parent can produce. When every step fails, the error raised
    describes this scope; the parent's failure is chained as its cause.

    A child created from a full ``ScopeBase`` layers its component container
    over the parent's and inherits its settings. A child created from any
    other ``ResolutionRoot`` gets a standard component set of its own.
    Disposing a child never touches its parent.

    Args:
        parent: Parent scope or resolution root.
        settings: Scope settings. Defaults to the parent's settings, or
            ``ScopeSettings()`` for a bare resolution root.
        components: Component container to layer over instead of the parent's.
        name: Name used in diagnostics.

    Raises:
        TypeError: If ``parent`` is ``None``.

    Examples:
        .. code-block:: python

            app = Scope(name="app")
            app.add_concrete(PostgresDatabase, provides=Database, lifetime=Lifetime.SINGLETON)

            with ChildScope(app, name="request") as request_scope:
                request_scope.add_concrete(RequestHandler)
                handler = request_scope.get(RequestHandler)  # uses app's Database

    """

    def __init__(
        self,
        parent: ResolutionRoot,
        *,
        settings: ScopeSettings | None = None,
        components: ComponentContainer | None = None,
        name: str | None = None,
    ) -> None:
        if parent is None:
            msg = "ChildScope() requires a parent resolution root."
            raise TypeError(msg)
        self._parent_root = parent
        self._parent_scope_lookup_done = False
        self._found_parent_scope: ScopeBase | None = None

        if settings is None:
            settings = parent.settings if isinstance(parent, ScopeBase) else ScopeSettings()
        if components is not None:
            container = ChildComponentContainer(components)
            container.add(InstanceCache, InstanceCache)
        elif isinstance(parent, ScopeBase):
            container = ChildComponentContainer(parent.components)
            container.add(InstanceCache, InstanceCache)
        else:
            container = ChildComponentContainer(ComponentContainer())
            add_standard_components(container, settings, include_immutable=False)
        super().__init__(settings=settings, components=container, name=name)

    @property
    def parent_root(self) -> ResolutionRoot:
        return self._parent_root

    @property
    def parent_scope(self) -> ScopeBase | None:
        return self.find_parent_scope()

    def find_parent_scope(self) -> ScopeBase | None:
        """Return the parent as a full scope, resolving ``ScopeBase`` through a bare root.

        Returns:
            The parent scope, or ``None`` when the parent root cannot provide one.

        """
        if self._parent_scope_lookup_done:
            return self._found_parent_scope
        parent = self._parent_root
        found: ScopeBase | None = None
        if isinstance(parent, ScopeBase):
            found = parent
        else:
            request = Request(service=ScopeBase, is_optional=True, ignore_implicit_bindings=True)
            if parent.can_resolve(request, ignore_implicit_bindings=True):
                candidate = next(iter(parent.resolve(request)), None)
                if isinstance(candidate, ScopeBase) and candidate is not self:
                    found = candidate
        self._found_parent_scope = found
        self._parent_scope_lookup_done = True
        return found

    def can_resolve(self, request: Request, ignore_implicit_bindings: bool | None = None) -> bool:
        """Return whether this scope or its parent (explicit bindings only) can resolve ``request``.

        Args:
            request: Request to check.
            ignore_implicit_bindings: Applies to this scope's own bindings; the
                parent is always asked with implicit bindings suppressed.

        """
        if self.can_resolve_locally(request, ignore_implicit_bindings):
            return True
        return self._parent_root.can_resolve(
            request.suppressing_implicit_bindings(),
            ignore_implicit_bindings=True,
        )

    def resolve(self, request: Request) -> Iterator[Any]:
        """Return a lazy iterator over instances, falling back to the parent.

        The choice between this scope and the parent is made when the first
        element is pulled.

        Raises:
            ScopeWireNoViableBindingError: While iterating, when neither this
                scope nor the parent can produce a required instance. The
                error describes this scope and chains the parent's failure.

        """
        return self._resolve_with_fallback(request)

    def _resolve_with_fallback(self, request: Request) -> Iterator[Any]:
        self._ensure_active()
        if self.can_resolve_locally(request, ignore_implicit_bindings=True):
            logger.debug(
                "%r resolves %s with its own explicit binding",
                self,
                describe_service(request.service),
            )
            yield from self.resolve_locally(request)
            return

        parent_request = request.suppressing_implicit_bindings()
        if self._parent_root.can_resolve(parent_request, ignore_implicit_bindings=True):
            logger.debug("%r delegates %s to its parent", self, describe_service(request.service))
            yield from self._parent_root.resolve(parent_request)
            return

        local_results = self.resolve_locally(request)
        try:
            first = next(local_results)
        except StopIteration:
            return
        except ScopeWireNoViableBindingError as local_error:
            logger.debug(
                "%r cannot resolve %s; retrying in its parent",
                self,
                describe_service(request.service),
            )
            yield from self._resolve_in_parent(request, local_error)
            return
        yield first
        yield from local_results

    def _resolve_in_parent(
        self,
        request: Request,
        local_error: ScopeWireNoViableBindingError,
    ) -> Iterator[Any]:
        try:
            parent_results = iter(self._parent_root.resolve(request))
            first = next(parent_results)
        except StopIteration:
            if request.is_optional:
                return
            raise local_error from None
        except ScopeWireNoViableBindingError as parent_error:
            local_error.add_attempts(parent_error.attempts)
            raise local_error from parent_error
        yield first
        yield from parent_results


__all__ = [
    "ChildScope",
    "ResolutionRoot",
    "Scope",
    "ScopeBase",
    "add_standard_components",
]
