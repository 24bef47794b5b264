from scopewire._internal.lifetime import Lifetime

DEFAULT_LIFETIME = Lifetime.TRANSIENT

DEFAULT_ACTIVATION_CACHE_DISABLED = False

DEFAULT_AUTOBIND_CONCRETE_TYPES = True

DEFAULT_ALLOW_NONE_INJECTION = False

SETTINGS_MODEL_LIFETIME = Lifetime.SINGLETON
"""Lifetime of implicit bindings synthesized for pydantic-settings models."""
