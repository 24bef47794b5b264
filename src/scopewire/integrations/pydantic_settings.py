from scopewire._internal.integrations.pydantic_settings import SETTINGS_BASES, is_settings_model

__all__ = ["SETTINGS_BASES", "is_settings_model"]
