from scopewire._internal.activation import (
    ActivationCacheStrategy,
    ActivationStrategy,
    BindingActionStrategy,
    DisposableStrategy,
    InitializableStrategy,
    InstanceCache,
    MethodInjectionStrategy,
    Pipeline,
)
from scopewire._internal.activation_cache import (
    ActivationCache,
    ChildActivationCache,
    StandardActivationCache,
)
from scopewire._internal.child_components import IMMUTABLE_COMPONENT_KINDS, ChildComponentContainer
from scopewire._internal.components import ComponentContainer, ComponentFactory, ScopeComponent
from scopewire._internal.missing_bindings import (
    DefaultValueBindingResolver,
    MissingBindingResolver,
    SelfBindingResolver,
)
from scopewire._internal.selection import (
    ChildScopeConstructorScorer,
    ConstructorCandidate,
    ConstructorScorer,
    InjectionMethod,
    Selector,
    StandardConstructorScorer,
)

__all__ = [
    "IMMUTABLE_COMPONENT_KINDS",
    "ActivationCache",
    "ActivationCacheStrategy",
    "ActivationStrategy",
    "BindingActionStrategy",
    "ChildActivationCache",
    "ChildComponentContainer",
    "ChildScopeConstructorScorer",
    "ComponentContainer",
    "ComponentFactory",
    "ConstructorCandidate",
    "ConstructorScorer",
    "DefaultValueBindingResolver",
    "DisposableStrategy",
    "InitializableStrategy",
    "InjectionMethod",
    "InstanceCache",
    "MethodInjectionStrategy",
    "MissingBindingResolver",
    "Pipeline",
    "ScopeComponent",
    "SelfBindingResolver",
    "Selector",
    "StandardActivationCache",
    "StandardConstructorScorer",
]
