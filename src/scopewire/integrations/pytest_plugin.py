"""Pytest fixtures providing disposable scopes.

Enable the plugin from a test module or the root ``conftest.py``:

.. code-block:: python

    pytest_plugins = ["scopewire.integrations.pytest_plugin"]

Override ``scopewire_settings`` to configure the root scope, or
``scopewire_scope`` to add bindings every test in a module shares.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from scopewire._internal.scope import ChildScope, Scope
from scopewire._internal.settings import ScopeSettings


@pytest.fixture()
def scopewire_settings() -> ScopeSettings:
    """Settings of the per-test root scope."""
    return ScopeSettings()


@pytest.fixture()
def scopewire_scope(scopewire_settings: ScopeSettings) -> Iterator[Scope]:
    """Create a root scope disposed after the test.

    Yields:
        A new ``Scope``; bindings added by the test never leak into other
        tests.

    """
    with Scope(scopewire_settings, name="pytest") as scope:
        yield scope


@pytest.fixture()
def scopewire_child_scope(scopewire_scope: Scope) -> Iterator[ChildScope]:
    """Create a child of ``scopewire_scope`` disposed after the test.

    The child is disposed before its parent, so singletons cached by the
    child are deactivated while the parent is still usable.

    Yields:
        A new ``ChildScope`` falling back to ``scopewire_scope``.

    """
    with ChildScope(scopewire_scope, name="pytest-child") as child:
        yield child
