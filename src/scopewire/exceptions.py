from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from scopewire._internal.request import Request


def describe_service(service: Any) -> str:
    """Return a short human-readable name for a service key."""
    return getattr(service, "__qualname__", None) or repr(service)


class ScopeWireError(Exception):
    """Represent a base class for all scopewire-specific failures.

    Catch this type when you want to handle any scopewire error path without
    matching each concrete exception class individually.
    """


class ScopeWireNoViableBindingError(ScopeWireError):
    """Signal that no scope in the chain could produce the requested service.

    Raised while iterating the result of ``resolve`` (and by ``get``) when
    neither explicit nor implicit bindings can satisfy a request. When a child
    scope falls back to its parent and the parent fails too, the error raised
    is the one describing the child scope that was actually asked; the
    parent's failure is attached as ``__cause__`` and listed in ``attempts``.

    Typical fixes include adding an explicit binding on the scope that owns
    the dependency, or enabling ``autobind_concrete_types`` for concrete
    classes.
    """

    def __init__(self, request: Request, *, attempted_in: str) -> None:
        self.request = request
        self.service = request.service
        self.attempts: list[str] = [attempted_in]
        super().__init__()

    def add_attempts(self, attempts: list[str]) -> None:
        """Record scopes that were tried after the first one.

        Args:
            attempts: Scope descriptions to append, in the order they were tried.

        """
        self.attempts.extend(attempt for attempt in attempts if attempt not in self.attempts)

    def __str__(self) -> str:
        service_name = describe_service(self.service)
        if self.request.name is not None:
            service_name = f"{service_name} (named {self.request.name!r})"
        tried = " -> ".join(self.attempts)
        return f"No viable binding for {service_name}; tried: {tried}."


class ScopeWireNoComponentRegisteredError(ScopeWireError):
    """Signal that no registry in the chain has a provider for a component kind.

    Raised by ``ComponentContainer.get``. The error is never retried or
    swallowed by the resolution engine.
    """

    def __init__(self, kind: type[Any]) -> None:
        self.kind = kind
        msg = f"No component of kind {describe_service(kind)} is registered."
        super().__init__(msg)


class ScopeWireImmutableComponentError(ScopeWireError):
    """Signal a write to a component kind that child scopes may not change.

    Raised by ``add``, ``remove`` and ``remove_all`` on a child scope's
    component container when the kind is the activation cache, the
    constructor scorer or the selector. Configure these kinds on the root
    scope instead.
    """

    def __init__(self, kind: type[Any]) -> None:
        self.kind = kind
        msg = f"Component {describe_service(kind)} is immutable in child scopes."
        super().__init__(msg)


class ScopeWireAmbiguousBindingError(ScopeWireError):
    """Signal that a unique request matched several equally ranked bindings.

    Typical fixes include naming the bindings and requesting one by name, or
    removing the duplicate registration.
    """


class ScopeWireCircularDependencyError(ScopeWireError):
    """Signal that a binding was re-entered while it was still being built.

    The message lists the service chain that closed the cycle.
    """


class ScopeWireInvalidRegistrationError(ScopeWireError):
    """Signal invalid registration arguments.

    Raised by ``add_instance``, ``add_concrete``, ``add_factory``,
    ``add_method`` and ``ComponentContainer.add`` when arguments cannot
    describe a usable provider.
    """


class ScopeWireActivationError(ScopeWireError):
    """Signal that a selected binding could not produce an instance.

    Common triggers are classes without a usable constructor, parameters
    without annotations or arguments, and providers returning ``None`` while
    ``allow_none_injection`` is disabled.
    """


class ScopeWireScopeDisposedError(ScopeWireError):
    """Signal use of a scope after ``dispose`` was called."""
