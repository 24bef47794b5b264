from __future__ import annotations

import importlib
import warnings
from typing import Any

from scopewire._internal.type_checks import is_runtime_class

_PYDANTIC_V1_WARNING_PATTERN = (
    r"Core Pydantic V1 functionality isn't compatible with Python 3\.14 or greater\."
)


def _load_base_settings(module_name: str) -> type[Any] | None:
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    base_settings = getattr(module, "BaseSettings", None)
    return base_settings if isinstance(base_settings, type) else None


def _load_legacy_base_settings() -> type[Any] | None:
    with warnings.catch_warnings():
        warnings.filterwarnings(
            "ignore",
            message=_PYDANTIC_V1_WARNING_PATTERN,
            category=UserWarning,
        )
        return _load_base_settings("pydantic.v1")


def _discover_settings_bases() -> tuple[type[Any], ...]:
    bases: list[type[Any]] = []
    for candidate in (_load_base_settings("pydantic_settings"), _load_legacy_base_settings()):
        if candidate is not None and candidate not in bases:
            bases.append(candidate)
    return tuple(bases)


SETTINGS_BASES: tuple[type[Any], ...] = _discover_settings_bases()


def is_settings_model(candidate: object) -> bool:
    """Return whether ``candidate`` is a Pydantic settings model class.

    Both ``pydantic_settings.BaseSettings`` and the legacy
    ``pydantic.v1.BaseSettings`` are recognized when importable. Without
    Pydantic installed every candidate is rejected.

    Scopes self-bind settings models as singletons built with no arguments,
    so the environment is read once per owning scope.

    Args:
        candidate: Requested service key.

    """
    if not is_runtime_class(candidate):
        return False
    try:
        return any(issubclass(candidate, base) for base in SETTINGS_BASES)
    except TypeError:
        return False


__all__ = ["SETTINGS_BASES", "is_settings_model"]
