from __future__ import annotations

from typing import Any

import pytest

from scopewire import (
    ChildScope,
    Request,
    Scope,
    ScopeBase,
    ScopeWireImmutableComponentError,
    ScopeWireInvalidRegistrationError,
    ScopeWireNoComponentRegisteredError,
)
from scopewire.bindings import Binding
from scopewire.components import (
    IMMUTABLE_COMPONENT_KINDS,
    ActivationCache,
    ChildActivationCache,
    ChildComponentContainer,
    ChildScopeConstructorScorer,
    ConstructorScorer,
    MissingBindingResolver,
    Pipeline,
    ScopeComponent,
    Selector,
    StandardActivationCache,
    StandardConstructorScorer,
)


class Greeting(ScopeComponent):
    def __init__(self, scope: ScopeBase) -> None:
        super().__init__(scope)
        self.disposed = False

    def text(self) -> str:
        return "hello"

    def dispose(self) -> None:
        self.disposed = True


class LoudGreeting(Greeting):
    def text(self) -> str:
        return "HELLO"


class NothingResolver(MissingBindingResolver):
    def resolve(self, scope: ScopeBase, request: Request) -> list[Binding]:
        return []


def test_root_container_builds_standard_components(scope: Scope) -> None:
    assert isinstance(scope.components.get(ActivationCache), StandardActivationCache)
    assert isinstance(scope.components.get(ConstructorScorer), StandardConstructorScorer)
    assert isinstance(scope.components.get(Pipeline), Pipeline)


def test_components_are_built_once(scope: Scope) -> None:
    assert scope.components.get(Pipeline) is scope.components.get(Pipeline)


def test_transient_components_are_built_per_lookup(scope: Scope) -> None:
    scope.components.add_transient(Greeting, Greeting)

    assert scope.components.get(Greeting) is not scope.components.get(Greeting)


def test_get_returns_first_registration(scope: Scope) -> None:
    scope.components.add(Greeting, LoudGreeting)
    scope.components.add(Greeting, Greeting)

    assert scope.components.get(Greeting).text() == "HELLO"
    assert [greeting.text() for greeting in scope.components.get_all(Greeting)] == [
        "HELLO",
        "hello",
    ]


def test_get_without_registration_raises(scope: Scope) -> None:
    with pytest.raises(ScopeWireNoComponentRegisteredError):
        scope.components.get(Greeting)

    assert scope.components.get_all(Greeting) == []


def test_add_rejects_unrelated_class(scope: Scope) -> None:
    with pytest.raises(ScopeWireInvalidRegistrationError, match="does not subclass"):
        scope.components.add(Greeting, Pipeline)


def test_add_rejects_non_callable(scope: Scope) -> None:
    with pytest.raises(ScopeWireInvalidRegistrationError, match="must be callable"):
        scope.components.add(Greeting, "Greeting")  # type: ignore[arg-type]


def test_factory_functions_receive_owner_scope(scope: Scope) -> None:
    owners: list[ScopeBase] = []

    def build_greeting(owner: ScopeBase) -> Greeting:
        owners.append(owner)
        return Greeting(owner)

    scope.components.add(Greeting, build_greeting)
    scope.components.get(Greeting)

    assert owners == [scope]


def test_remove_disposes_built_instance(scope: Scope) -> None:
    scope.components.add(Greeting, Greeting)
    greeting = scope.components.get(Greeting)

    scope.components.remove(Greeting, Greeting)

    assert greeting.disposed
    assert not scope.components.has(Greeting)


def test_root_container_accepts_immutable_kinds(scope: Scope) -> None:
    scope.components.remove_all(ConstructorScorer)
    scope.components.add(ConstructorScorer, ChildScopeConstructorScorer)

    assert isinstance(scope.components.get(ConstructorScorer), ChildScopeConstructorScorer)


def test_child_container_installs_child_variants(child_scope: ChildScope) -> None:
    components = child_scope.components

    assert isinstance(components, ChildComponentContainer)
    assert isinstance(components.get(ActivationCache), ChildActivationCache)
    assert isinstance(components.get(ConstructorScorer), ChildScopeConstructorScorer)
    assert components.get(Selector) is not None


@pytest.mark.parametrize("kind", sorted(IMMUTABLE_COMPONENT_KINDS, key=lambda kind: kind.__name__))
def test_child_container_rejects_writes_to_immutable_kinds(
    child_scope: ChildScope,
    kind: type[Any],
) -> None:
    with pytest.raises(ScopeWireImmutableComponentError):
        child_scope.components.add(kind, kind)
    with pytest.raises(ScopeWireImmutableComponentError):
        child_scope.components.remove(kind, kind)
    with pytest.raises(ScopeWireImmutableComponentError):
        child_scope.components.remove_all(kind)


def test_child_container_allows_transient_registration_of_immutable_kinds(
    parent_scope: Scope,
    child_scope: ChildScope,
) -> None:
    components = child_scope.components
    preinstalled = components.get(Selector)

    components.add_transient(Selector, Selector)

    selectors = components.get_all(Selector)
    assert len(selectors) == 3
    assert selectors[0] is preinstalled
    assert selectors[1] is not components.get_all(Selector)[1]
    assert selectors[2] is parent_scope.components.get(Selector)
    assert components.get(Selector) is preinstalled


def test_child_container_falls_back_to_parent(
    parent_scope: Scope,
    child_scope: ChildScope,
) -> None:
    parent_scope.components.add(Greeting, Greeting)

    assert child_scope.components.get(Greeting) is parent_scope.components.get(Greeting)
    assert not child_scope.components.has(Greeting)


def test_child_container_prefers_local_registration(
    parent_scope: Scope,
    child_scope: ChildScope,
) -> None:
    parent_scope.components.add(Greeting, Greeting)
    child_scope.components.add(Greeting, LoudGreeting)

    assert child_scope.components.get(Greeting).text() == "HELLO"
    assert parent_scope.components.get(Greeting).text() == "hello"


def test_child_container_get_all_lists_local_then_parent(
    parent_scope: Scope,
    child_scope: ChildScope,
) -> None:
    parent_scope.components.add(Greeting, Greeting)
    child_scope.components.add(Greeting, LoudGreeting)

    texts = [greeting.text() for greeting in child_scope.components.get_all(Greeting)]

    assert texts == ["HELLO", "hello"]


def test_child_remove_all_leaves_parent_registrations(
    parent_scope: Scope,
    child_scope: ChildScope,
) -> None:
    parent_scope.components.add(Greeting, Greeting)
    child_scope.components.add(Greeting, LoudGreeting)

    child_scope.components.remove_all(Greeting)

    assert child_scope.components.get(Greeting).text() == "hello"


def test_child_resolvers_run_before_parent_resolvers(
    parent_scope: Scope,
    child_scope: ChildScope,
) -> None:
    child_scope.components.add(MissingBindingResolver, NothingResolver)

    resolvers = child_scope.components.get_all(MissingBindingResolver)

    assert isinstance(resolvers[0], NothingResolver)
    assert resolvers[1:] == parent_scope.components.get_all(MissingBindingResolver)


def test_disposing_child_leaves_parent_components(parent_scope: Scope) -> None:
    parent_scope.components.add(Greeting, Greeting)
    parent_greeting = parent_scope.components.get(Greeting)
    child = ChildScope(parent_scope)
    child.components.add(Greeting, LoudGreeting)
    child_greeting = child.components.get(Greeting)

    child.dispose()

    assert child_greeting.disposed
    assert not parent_greeting.disposed
    assert parent_scope.components.get(Greeting) is parent_greeting
