from scopewire._internal.activation import Context
from scopewire._internal.bindings import ActivationAction, Binding
from scopewire._internal.providers import (
    ConstantProvider,
    DefaultValueProvider,
    FactoryProvider,
    MethodProvider,
    Provider,
    StandardProvider,
)
from scopewire._internal.request import ConstructorArgument, Request

__all__ = [
    "ActivationAction",
    "Binding",
    "ConstantProvider",
    "ConstructorArgument",
    "Context",
    "DefaultValueProvider",
    "FactoryProvider",
    "MethodProvider",
    "Provider",
    "Request",
    "StandardProvider",
]
