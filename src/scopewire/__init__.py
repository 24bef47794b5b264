from scopewire.bindings import Binding, ConstructorArgument, Context, Request
from scopewire.components import ComponentContainer, ScopeComponent
from scopewire.exceptions import (
    ScopeWireActivationError,
    ScopeWireAmbiguousBindingError,
    ScopeWireCircularDependencyError,
    ScopeWireError,
    ScopeWireImmutableComponentError,
    ScopeWireInvalidRegistrationError,
    ScopeWireNoComponentRegisteredError,
    ScopeWireNoViableBindingError,
    ScopeWireScopeDisposedError,
)
from scopewire.lifecycle import Disposable, Initializable
from scopewire.markers import Named, constructor, inject
from scopewire.scope import ChildScope, ResolutionRoot, Scope, ScopeBase
from scopewire.settings import Lifetime, ScopeSettings

__all__ = [
    "Binding",
    "ChildScope",
    "ComponentContainer",
    "ConstructorArgument",
    "Context",
    "Disposable",
    "Initializable",
    "Lifetime",
    "Named",
    "Request",
    "ResolutionRoot",
    "Scope",
    "ScopeBase",
    "ScopeComponent",
    "ScopeSettings",
    "ScopeWireActivationError",
    "ScopeWireAmbiguousBindingError",
    "ScopeWireCircularDependencyError",
    "ScopeWireError",
    "ScopeWireImmutableComponentError",
    "ScopeWireInvalidRegistrationError",
    "ScopeWireNoComponentRegisteredError",
    "ScopeWireNoViableBindingError",
    "ScopeWireScopeDisposedError",
    "constructor",
    "inject",
]
