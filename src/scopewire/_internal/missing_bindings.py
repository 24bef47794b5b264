from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from scopewire._internal.autoregistration import SelfBindingPolicy
from scopewire._internal.bindings import Binding
from scopewire._internal.components import ScopeComponent
from scopewire._internal.integrations.pydantic_settings import is_settings_model
from scopewire._internal.providers import DefaultValueProvider, MethodProvider, StandardProvider
from scopewire.defaults import SETTINGS_MODEL_LIFETIME

if TYPE_CHECKING:
    from scopewire._internal.activation import Context
    from scopewire._internal.request import Request
    from scopewire._internal.scope import ScopeBase


class MissingBindingResolver(ScopeComponent, ABC):
    """Synthesize implicit bindings for requests no stored binding satisfies.

    Resolvers are consulted in registration order and the first one returning
    bindings wins. Returned bindings must have ``is_implicit=True``; the scope
    stores them so later requests find them directly.
    """

    @abstractmethod
    def resolve(self, scope: ScopeBase, request: Request) -> list[Binding]:
        """Return implicit bindings able to satisfy ``request`` in ``scope``.

        Args:
            scope: Scope that is resolving the request.
            request: Request without a matching binding.

        """


class DefaultValueBindingResolver(MissingBindingResolver):
    """Inject the declared default of a parameter nothing else can satisfy."""

    def resolve(self, scope: ScopeBase, request: Request) -> list[Binding]:
        if not _injects_default_value(request):
            return []
        return [
            Binding(
                service=request.service,
                provider=DefaultValueProvider(),
                is_implicit=True,
                name=request.name,
                condition=_injects_default_value,
            ),
        ]


class SelfBindingResolver(MissingBindingResolver):
    """Bind unregistered concrete classes to themselves.

    Pydantic settings models are bound as singletons built without
    arguments; other classes get the scope's default lifetime and go through
    constructor selection. Named requests are never self-bound.
    """

    def __init__(self, scope: ScopeBase) -> None:
        super().__init__(scope)
        self._policy = SelfBindingPolicy()

    def resolve(self, scope: ScopeBase, request: Request) -> list[Binding]:
        service = request.service
        if request.name is not None or not scope.settings.autobind_concrete_types:
            return []
        if is_settings_model(service):
            return [
                Binding(
                    service=service,
                    provider=MethodProvider(_settings_factory(service)),
                    lifetime=SETTINGS_MODEL_LIFETIME,
                    is_implicit=True,
                ),
            ]
        if not self._policy.is_self_bindable(service):
            return []
        return [
            Binding(
                service=service,
                provider=StandardProvider(service),
                lifetime=scope.settings.default_lifetime,
                is_implicit=True,
            ),
        ]


def _injects_default_value(request: Request) -> bool:
    target = request.target
    return target is not None and target.has_default and not target.is_sequence


def _settings_factory(model: type[Any]) -> Any:
    def build(context: Context) -> Any:
        return model()

    return build


__all__ = ["DefaultValueBindingResolver", "MissingBindingResolver", "SelfBindingResolver"]
