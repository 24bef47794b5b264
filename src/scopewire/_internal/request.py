from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from scopewire._internal.targets import Target

if TYPE_CHECKING:
    from scopewire._internal.activation import Context
    from scopewire._internal.bindings import Binding


@dataclass(frozen=True, slots=True)
class ConstructorArgument:
    """Override the value injected into a constructor parameter by name.

    Attach arguments to a request (``get(..., arguments={...})``) or to a
    binding (``add_concrete(..., arguments={...})``). Inherited arguments are
    also visible to the nested requests created for the instance's own
    dependencies.
    """

    name: str
    value: Any
    inherited: bool = False


def build_arguments(arguments: Mapping[str, Any] | None) -> tuple[ConstructorArgument, ...]:
    """Normalize a ``{name: value}`` mapping into constructor arguments."""
    if not arguments:
        return ()
    return tuple(
        value if isinstance(value, ConstructorArgument) else ConstructorArgument(name, value)
        for name, value in arguments.items()
    )


@dataclass(frozen=True, kw_only=True, slots=True)
class Request:
    """Describe a single resolution attempt.

    A request is immutable once issued. Nested dependencies are resolved with
    child requests created by ``create_child``; ``active_bindings`` records
    the bindings already being built above, which is how cycles are detected.
    """

    service: Any
    name: str | None = None
    target: Target | None = None
    parameters: tuple[ConstructorArgument, ...] = ()
    ignore_implicit_bindings: bool = False
    is_optional: bool = False
    is_unique: bool = True
    parent: Request | None = None
    active_bindings: tuple[Binding, ...] = ()
    depth: int = 0

    def create_child(self, service: Any, context: Context, target: Target) -> Request:
        """Create the request used to satisfy ``target`` while building ``context``.

        Args:
            service: Dependency key to resolve.
            context: Activation context of the instance being built.
            target: Parameter the resolved value is injected into.

        """
        return Request(
            service=service,
            name=target.binding_name,
            target=target,
            parameters=tuple(
                parameter for parameter in context.parameters if parameter.inherited
            ),
            is_optional=target.has_default or target.is_sequence or target.is_optional,
            is_unique=not target.is_sequence,
            parent=self,
            active_bindings=(*self.active_bindings, context.binding),
            depth=self.depth + 1,
        )

    def suppressing_implicit_bindings(self) -> Request:
        """Return a copy of this request that only accepts explicit bindings."""
        if self.ignore_implicit_bindings:
            return self
        return replace(self, ignore_implicit_bindings=True)

    def service_chain(self) -> list[Any]:
        """Return requested services from the root request down to this one."""
        chain: list[Any] = []
        request: Request | None = self
        while request is not None:
            chain.append(request.service)
            request = request.parent
        chain.reverse()
        return chain


__all__ = ["ConstructorArgument", "Request", "build_arguments"]
