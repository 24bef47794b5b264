from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from inspect import Parameter
from typing import TYPE_CHECKING, Any, ClassVar

from scopewire._internal.selection import ConstructorScorer, Selector, select_constructor
from scopewire._internal.targets import Target
from scopewire.exceptions import ScopeWireActivationError, describe_service

if TYPE_CHECKING:
    from scopewire._internal.activation import Context


def invoke_with_targets(
    func: Callable[..., Any],
    targets: Sequence[Target],
    values: Sequence[Any],
) -> Any:
    """Call ``func`` passing positional-only targets by position and the rest by name."""
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for target, value in zip(targets, values, strict=True):
        if target.kind is Parameter.POSITIONAL_ONLY:
            args.append(value)
        else:
            kwargs[target.name] = value
    return func(*args, **kwargs)


class Provider(ABC):
    """Produce instances for a binding within an activation context."""

    allows_none: ClassVar[bool] = False
    """Whether ``None`` is a legitimate result regardless of ``allow_none_injection``."""

    returns_same_instance: ClassVar[bool] = False
    """Whether every activation yields the same object."""

    @abstractmethod
    def create(self, context: Context) -> Any:
        """Build an instance for ``context``.

        Args:
            context: Activation context carrying the scope, request and binding.

        """


@dataclass(frozen=True, slots=True)
class ConstantProvider(Provider):
    """Return the same pre-built value on every activation."""

    allows_none: ClassVar[bool] = True
    returns_same_instance: ClassVar[bool] = True

    value: Any

    def create(self, context: Context) -> Any:
        return self.value

    def __repr__(self) -> str:
        return f"ConstantProvider({type(self.value).__qualname__})"


@dataclass(frozen=True, slots=True)
class MethodProvider(Provider):
    """Call a user callback with the activation context."""

    callback: Callable[[Context], Any]

    def create(self, context: Context) -> Any:
        return self.callback(context)

    def __repr__(self) -> str:
        return f"MethodProvider({describe_service(self.callback)})"


@dataclass(frozen=True, slots=True)
class FactoryProvider(Provider):
    """Call a factory whose parameters are resolved like constructor parameters."""

    factory: Callable[..., Any]
    targets: tuple[Target, ...]

    def create(self, context: Context) -> Any:
        values = context.resolve_targets(self.targets)
        return invoke_with_targets(self.factory, self.targets, values)

    def __repr__(self) -> str:
        return f"FactoryProvider({describe_service(self.factory)})"


@dataclass(frozen=True, slots=True)
class StandardProvider(Provider):
    """Build a class through the best scoring constructor candidate.

    Candidates come from the ``Selector`` component and are ranked by the
    ``ConstructorScorer`` component of the scope resolving the binding.
    """

    implementation: type[Any]

    def create(self, context: Context) -> Any:
        candidates = context.components.get(Selector).select_constructors(self.implementation)
        if not candidates:
            msg = f"{describe_service(self.implementation)} has no usable constructor."
            raise ScopeWireActivationError(msg)
        scorer = context.components.get(ConstructorScorer)
        candidate = select_constructor(context, candidates, scorer)
        values = context.resolve_targets(candidate.targets)
        return invoke_with_targets(candidate.factory, candidate.targets, values)

    def __repr__(self) -> str:
        return f"StandardProvider({describe_service(self.implementation)})"


class DefaultValueProvider(Provider):
    """Return the default value of the parameter being injected."""

    allows_none: ClassVar[bool] = True

    def create(self, context: Context) -> Any:
        target = context.request.target
        if target is None or not target.has_default:
            msg = f"Request for {describe_service(context.request.service)} has no default value."
            raise ScopeWireActivationError(msg)
        return target.default

    def __repr__(self) -> str:
        return "DefaultValueProvider()"


__all__ = [
    "ConstantProvider",
    "DefaultValueProvider",
    "FactoryProvider",
    "MethodProvider",
    "Provider",
    "StandardProvider",
    "invoke_with_targets",
]
