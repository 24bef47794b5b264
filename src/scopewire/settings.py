from scopewire._internal.lifetime import Lifetime
from scopewire._internal.settings import ScopeSettings

__all__ = ["Lifetime", "ScopeSettings"]
