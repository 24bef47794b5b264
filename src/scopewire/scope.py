from scopewire._internal.scope import (
    ChildScope,
    ResolutionRoot,
    Scope,
    ScopeBase,
    add_standard_components,
)

__all__ = ["ChildScope", "ResolutionRoot", "Scope", "ScopeBase", "add_standard_components"]
