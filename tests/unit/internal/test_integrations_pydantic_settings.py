from __future__ import annotations

import importlib
from types import ModuleType
from typing import Any

import pytest

import scopewire._internal.integrations.pydantic_settings as pydantic_settings_integration
from scopewire import ChildScope, Lifetime, Scope


class _FakeBaseSettings:
    pass


class _AppSettings(_FakeBaseSettings):
    instances = 0

    def __init__(self) -> None:
        type(self).instances += 1
        self.api_url = "https://api.example.com"


class _ApiClient:
    def __init__(self, settings: _AppSettings) -> None:
        self.settings = settings


def test_load_base_settings_returns_none_for_missing_module(monkeypatch: Any) -> None:
    def _raise_import_error(_module_name: str) -> ModuleType:
        raise ImportError

    monkeypatch.setattr(importlib, "import_module", _raise_import_error)

    assert pydantic_settings_integration._load_base_settings("missing.module") is None


def test_load_base_settings_returns_none_when_base_settings_is_not_a_type(
    monkeypatch: Any,
) -> None:
    module = ModuleType("test_module")
    module.BaseSettings = "not-a-type"  # type: ignore[attr-defined]

    def _import_module(_module_name: str) -> ModuleType:
        return module

    monkeypatch.setattr(importlib, "import_module", _import_module)

    assert pydantic_settings_integration._load_base_settings("fake.module") is None


def test_load_legacy_base_settings_reads_pydantic_v1(monkeypatch: Any) -> None:
    seen_module_names: list[str] = []

    def _load_base_settings(module_name: str) -> type[Any] | None:
        seen_module_names.append(module_name)
        return _FakeBaseSettings

    monkeypatch.setattr(
        pydantic_settings_integration,
        "_load_base_settings",
        _load_base_settings,
    )

    assert pydantic_settings_integration._load_legacy_base_settings() is _FakeBaseSettings
    assert seen_module_names == ["pydantic.v1"]


def test_discover_settings_bases_drops_duplicates_and_missing(monkeypatch: Any) -> None:
    loaded = {"pydantic_settings": _FakeBaseSettings, "pydantic.v1": _FakeBaseSettings}

    monkeypatch.setattr(
        pydantic_settings_integration,
        "_load_base_settings",
        loaded.get,
    )

    assert pydantic_settings_integration._discover_settings_bases() == (_FakeBaseSettings,)


def test_is_settings_model_returns_false_for_non_type() -> None:
    assert pydantic_settings_integration.is_settings_model("not-a-class") is False


def test_is_settings_model_returns_false_on_issubclass_type_error(monkeypatch: Any) -> None:
    monkeypatch.setattr(
        pydantic_settings_integration,
        "SETTINGS_BASES",
        ("not-a-class",),
    )

    assert pydantic_settings_integration.is_settings_model(_AppSettings) is False


def test_settings_models_are_self_bound_as_singletons(monkeypatch: Any) -> None:
    monkeypatch.setattr(
        pydantic_settings_integration,
        "SETTINGS_BASES",
        (_FakeBaseSettings,),
    )
    _AppSettings.instances = 0

    with Scope() as scope:
        first = scope.get(_ApiClient)
        second = scope.get(_ApiClient)

        assert first.settings is second.settings
        assert _AppSettings.instances == 1
        assert scope.get_bindings(_AppSettings)[0].lifetime is Lifetime.SINGLETON


def test_child_scope_builds_its_own_settings_model(monkeypatch: Any) -> None:
    monkeypatch.setattr(
        pydantic_settings_integration,
        "SETTINGS_BASES",
        (_FakeBaseSettings,),
    )

    with Scope() as scope:
        settings = scope.get(_AppSettings)
        with ChildScope(scope) as child:
            assert child.get(_AppSettings) is not settings
            assert scope.get(_AppSettings) is settings


def test_real_pydantic_settings_model_is_read_from_environment(monkeypatch: Any) -> None:
    pydantic_settings = pytest.importorskip("pydantic_settings")

    class ServiceSettings(pydantic_settings.BaseSettings):
        service_name: str = "default"

    monkeypatch.setenv("SERVICE_NAME", "from-env")

    with Scope() as scope:
        settings = scope.get(ServiceSettings)

        assert settings.service_name == "from-env"
        assert scope.get(ServiceSettings) is settings
