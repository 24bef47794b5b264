"""Shared pytest fixtures for scopewire tests."""

from collections.abc import Iterator

import pytest

from scopewire import ChildScope, Scope, ScopeSettings


@pytest.fixture()
def scope() -> Iterator[Scope]:
    """Root scope with default settings."""
    with Scope(name="root") as root:
        yield root


@pytest.fixture()
def parent_scope() -> Iterator[Scope]:
    """Root scope used as the parent of ``child_scope``."""
    with Scope(name="parent") as parent:
        yield parent


@pytest.fixture()
def child_scope(parent_scope: Scope) -> Iterator[ChildScope]:
    """Child of ``parent_scope``."""
    with ChildScope(parent_scope, name="child") as child:
        yield child


@pytest.fixture()
def strict_scope() -> Iterator[Scope]:
    """Root scope that never self-binds concrete classes."""
    with Scope(ScopeSettings(autobind_concrete_types=False), name="strict") as root:
        yield root
