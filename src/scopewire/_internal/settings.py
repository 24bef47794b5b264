from __future__ import annotations

from dataclasses import dataclass

from scopewire._internal.lifetime import Lifetime
from scopewire.defaults import (
    DEFAULT_ACTIVATION_CACHE_DISABLED,
    DEFAULT_ALLOW_NONE_INJECTION,
    DEFAULT_AUTOBIND_CONCRETE_TYPES,
    DEFAULT_LIFETIME,
)


@dataclass(frozen=True, kw_only=True, slots=True)
class ScopeSettings:
    """Configure a scope tree.

    Pass settings to a root ``Scope``; a ``ChildScope`` created from a full
    scope inherits its parent's settings unless it is given its own.

    Examples:
        .. code-block:: python

            strict_scope = Scope(settings=ScopeSettings(autobind_concrete_types=False))

            shared_scope = Scope(settings=ScopeSettings(default_lifetime=Lifetime.SINGLETON))

    """

    default_lifetime: Lifetime = DEFAULT_LIFETIME
    """Lifetime used by registrations that omit ``lifetime`` and by self-bindings."""

    activation_cache_disabled: bool = DEFAULT_ACTIVATION_CACHE_DISABLED
    """Run activation strategies every time an instance passes a pipeline."""

    autobind_concrete_types: bool = DEFAULT_AUTOBIND_CONCRETE_TYPES
    """Let scopes synthesize implicit self-bindings for eligible concrete classes."""

    allow_none_injection: bool = DEFAULT_ALLOW_NONE_INJECTION
    """Accept ``None`` returned by factories and methods instead of failing activation."""


__all__ = ["ScopeSettings"]
