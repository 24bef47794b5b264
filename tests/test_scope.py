"""Tests for registration, resolution and lifecycle of root scopes."""

from abc import ABC, abstractmethod
from typing import Annotated, Any

import pytest

from scopewire import (
    ChildScope,
    ConstructorArgument,
    Context,
    Disposable,
    Initializable,
    Lifetime,
    Named,
    ResolutionRoot,
    Scope,
    ScopeBase,
    ScopeSettings,
    ScopeWireActivationError,
    ScopeWireAmbiguousBindingError,
    ScopeWireCircularDependencyError,
    ScopeWireInvalidRegistrationError,
    ScopeWireNoViableBindingError,
    ScopeWireScopeDisposedError,
    constructor,
    inject,
)


class Config:
    def __init__(self, name: str) -> None:
        self.name = name


class Widget:
    pass


class Database(ABC):
    @abstractmethod
    def query(self) -> str: ...


class SqliteDatabase(Database):
    def query(self) -> str:
        return "sqlite"


class PostgresDatabase(Database):
    def query(self) -> str:
        return "postgres"


class Report:
    def __init__(self, db: Annotated[Database, Named("replica")]) -> None:
        self.db = db


class AuditLog:
    def __init__(self, db: Database) -> None:
        self.db = db


class Greeter:
    def __init__(self, greeting: str) -> None:
        self.greeting = greeting


class App:
    def __init__(self, greeter: Greeter) -> None:
        self.greeter = greeter


class Plugin(ABC):
    @abstractmethod
    def run(self) -> str: ...


class UpperPlugin(Plugin):
    def run(self) -> str:
        return "upper"


class LowerPlugin(Plugin):
    def run(self) -> str:
        return "lower"


class PluginHost:
    def __init__(self, plugins: list[Plugin]) -> None:
        self.plugins = plugins


class FrozenPluginHost:
    def __init__(self, plugins: tuple[Plugin, ...]) -> None:
        self.plugins = plugins


class Cache(ABC):
    @abstractmethod
    def get(self, key: str) -> Any: ...


class InMemoryCache(Cache):
    def get(self, key: str) -> Any:
        return None


class Client:
    def __init__(self, timeout: int = 30, cache: Cache | None = None) -> None:
        self.timeout = timeout
        self.cache = cache


class CachedView:
    def __init__(self, cache: Cache | None) -> None:
        self.cache = cache


class Chicken:
    def __init__(self, egg: "Egg") -> None:
        self.egg = egg


class Egg:
    def __init__(self, chicken: Chicken) -> None:
        self.chicken = chicken


class Transport:
    pass


class Mailer:
    def __init__(self) -> None:
        self.transport: Transport | None = None

    @inject
    def set_transport(self, transport: Transport) -> None:
        self.transport = transport


class Preferring:
    @inject
    def __init__(self) -> None:
        self.db: Database | None = None

    @constructor
    def from_database(cls, db: Database) -> "Preferring":
        instance = cls()
        instance.db = db
        return instance


class Tied:
    def __init__(self) -> None:
        self.built_by = "__init__"

    @constructor
    def alternative(cls) -> "Tied":
        instance = cls()
        instance.built_by = "alternative"
        return instance


class Reporter:
    def __init__(self) -> None:
        self.db: Database | None = None

    @constructor
    def with_database(cls, db: Database) -> "Reporter":
        instance = cls()
        instance.db = db
        return instance


class Connection(Disposable):
    def __init__(self) -> None:
        self.closed = False

    def dispose(self) -> None:
        self.closed = True


class Counter(Initializable):
    def __init__(self) -> None:
        self.initialized = 0

    def initialize(self) -> None:
        self.initialized += 1


class TestRegistration:
    def test_add_instance_infers_service_from_type(self, scope: Scope) -> None:
        config = Config("app")
        scope.add_instance(config)

        assert scope.get(Config) is config

    def test_add_instance_with_explicit_service(self, scope: Scope) -> None:
        database = SqliteDatabase()
        scope.add_instance(database, provides=Database)

        assert scope.get(Database) is database

    def test_add_instance_rejects_none_provides(self, scope: Scope) -> None:
        with pytest.raises(ScopeWireInvalidRegistrationError, match="provides"):
            scope.add_instance(Widget(), provides=None)

    def test_add_concrete_binds_class_to_service(self, scope: Scope) -> None:
        scope.add_concrete(SqliteDatabase, provides=Database)

        assert isinstance(scope.get(Database), SqliteDatabase)

    def test_add_concrete_rejects_non_class(self, scope: Scope) -> None:
        with pytest.raises(ScopeWireInvalidRegistrationError, match="expects a class"):
            scope.add_concrete(lambda: Widget())  # type: ignore[arg-type]

    def test_add_concrete_rejects_unknown_lifetime(self, scope: Scope) -> None:
        with pytest.raises(ScopeWireInvalidRegistrationError, match="Unsupported lifetime"):
            scope.add_concrete(Widget, lifetime="forever")  # type: ignore[arg-type]

    def test_add_factory_infers_service_from_return_annotation(self, scope: Scope) -> None:
        def build_config() -> Config:
            return Config("factory")

        scope.add_factory(build_config)

        assert scope.get(Config).name == "factory"

    def test_add_factory_without_return_annotation_is_rejected(self, scope: Scope) -> None:
        def build_config():  # type: ignore[no-untyped-def]
            return Config("factory")

        with pytest.raises(ScopeWireInvalidRegistrationError, match="cannot infer"):
            scope.add_factory(build_config)

    def test_add_factory_rejects_non_callable(self, scope: Scope) -> None:
        with pytest.raises(ScopeWireInvalidRegistrationError, match="expects a callable"):
            scope.add_factory(42)  # type: ignore[arg-type]

    def test_add_factory_parameters_are_injected(self, scope: Scope) -> None:
        scope.add_concrete(SqliteDatabase, provides=Database)

        def build_log(db: Database) -> AuditLog:
            return AuditLog(db)

        scope.add_factory(build_log)

        assert isinstance(scope.get(AuditLog).db, SqliteDatabase)

    def test_add_factory_receives_context(self, scope: Scope) -> None:
        def build_config(context: Context) -> Config:
            return Config(context.scope.name or "")

        scope.add_factory(build_config)

        assert scope.get(Config).name == "root"

    def test_add_method_calls_callback_with_context(self, scope: Scope) -> None:
        scope.add_method(lambda context: Config(f"built by {context.scope!r}"), provides=Config)

        assert scope.get(Config).name == "built by Scope('root')"

    def test_add_method_infers_service_from_return_annotation(self, scope: Scope) -> None:
        def make_config(context: Context) -> Config:
            return Config("method")

        scope.add_method(make_config)

        assert scope.get(Config).name == "method"

    def test_remove_drops_every_binding_of_service(self, scope: Scope) -> None:
        scope.add_concrete(SqliteDatabase, provides=Database)
        scope.add_concrete(PostgresDatabase, provides=Database, name="replica")

        removed = scope.remove(Database)

        assert len(removed) == 2
        assert scope.get_bindings(Database) == []
        with pytest.raises(ScopeWireNoViableBindingError):
            scope.get(Database)

    def test_registration_returns_the_stored_binding(self, scope: Scope) -> None:
        binding = scope.add_concrete(SqliteDatabase, provides=Database, name="main")

        assert scope.get_bindings(Database) == [binding]
        assert binding.name == "main"
        assert not binding.is_implicit


class TestArguments:
    def test_binding_arguments_fill_constructor_parameters(self, scope: Scope) -> None:
        scope.add_concrete(Greeter, arguments={"greeting": "hi"})

        assert scope.get(Greeter).greeting == "hi"

    def test_request_arguments_override_binding_arguments(self, scope: Scope) -> None:
        scope.add_concrete(Greeter, arguments={"greeting": "hi"})

        greeter = scope.get(Greeter, arguments={"greeting": "hello"})

        assert greeter.greeting == "hello"

    def test_arguments_are_not_passed_to_nested_dependencies(self, scope: Scope) -> None:
        with pytest.raises(ScopeWireNoViableBindingError) as exc_info:
            scope.get(App, arguments={"greeting": "hello"})

        assert exc_info.value.service is str

    def test_inherited_arguments_reach_nested_dependencies(self, scope: Scope) -> None:
        app = scope.get(
            App,
            arguments={"greeting": ConstructorArgument("greeting", "hey", inherited=True)},
        )

        assert app.greeter.greeting == "hey"


class TestNamedBindings:
    def test_named_request_selects_named_binding(self, scope: Scope) -> None:
        primary = SqliteDatabase()
        replica = PostgresDatabase()
        scope.add_instance(primary, provides=Database, name="primary")
        scope.add_instance(replica, provides=Database, name="replica")

        assert scope.get(Database, name="replica") is replica
        assert scope.get(Database, name="primary") is primary

    def test_unnamed_request_ignores_named_bindings(self, scope: Scope) -> None:
        scope.add_instance(SqliteDatabase(), provides=Database, name="primary")

        with pytest.raises(ScopeWireNoViableBindingError):
            scope.get(Database)

    def test_annotated_named_parameter(self, scope: Scope) -> None:
        replica = PostgresDatabase()
        scope.add_instance(SqliteDatabase(), provides=Database)
        scope.add_instance(replica, provides=Database, name="replica")

        assert scope.get(Report).db is replica

    def test_get_all_returns_named_and_unnamed_bindings(self, scope: Scope) -> None:
        primary = SqliteDatabase()
        replica = PostgresDatabase()
        scope.add_instance(primary, provides=Database)
        scope.add_instance(replica, provides=Database, name="replica")

        assert scope.get_all(Database) == [primary, replica]
        assert scope.get_all(Database, name="replica") == [replica]

    def test_named_requests_are_never_self_bound(self, scope: Scope) -> None:
        with pytest.raises(ScopeWireNoViableBindingError) as exc_info:
            scope.get(Widget, name="special")

        assert "named 'special'" in str(exc_info.value)


class TestSequences:
    def test_list_parameter_receives_every_binding(self, scope: Scope) -> None:
        scope.add_concrete(UpperPlugin, provides=Plugin)
        scope.add_concrete(LowerPlugin, provides=Plugin)

        host = scope.get(PluginHost)

        assert isinstance(host.plugins, list)
        assert [plugin.run() for plugin in host.plugins] == ["upper", "lower"]

    def test_tuple_parameter_receives_tuple(self, scope: Scope) -> None:
        scope.add_concrete(UpperPlugin, provides=Plugin)

        host = scope.get(FrozenPluginHost)

        assert isinstance(host.plugins, tuple)
        assert len(host.plugins) == 1

    def test_sequence_without_bindings_is_empty(self, scope: Scope) -> None:
        assert scope.get(PluginHost).plugins == []


class TestDefaultValues:
    def test_default_values_are_injected_when_unbound(self, scope: Scope) -> None:
        client = scope.get(Client)

        assert client.timeout == 30
        assert client.cache is None

    def test_explicit_binding_overrides_default_value(self, scope: Scope) -> None:
        scope.add_instance(5, provides=int)

        assert scope.get(Client).timeout == 5

    def test_default_value_binding_is_not_used_without_a_target(self, scope: Scope) -> None:
        scope.get(Client)

        with pytest.raises(ScopeWireNoViableBindingError):
            scope.get(int)


class TestNoneInjection:
    def test_factory_returning_none_fails_activation(self, scope: Scope) -> None:
        scope.add_factory(lambda: None, provides=Config)

        with pytest.raises(ScopeWireActivationError, match="returned None"):
            scope.get(Config)

    def test_none_is_accepted_when_allowed(self) -> None:
        with Scope(ScopeSettings(allow_none_injection=True)) as scope:
            scope.add_factory(lambda: None, provides=Config)

            assert scope.get(Config) is None

    def test_instance_binding_may_hold_none(self, scope: Scope) -> None:
        scope.add_instance(None, provides=Config)

        assert scope.get(Config) is None

    def test_optional_annotation_injects_none_when_unbound(self, scope: Scope) -> None:
        assert scope.get(CachedView).cache is None

    def test_optional_annotation_injects_bound_instance(self, scope: Scope) -> None:
        cache = InMemoryCache()
        scope.add_instance(cache, provides=Cache)

        assert scope.get(CachedView).cache is cache

    def test_optional_annotation_injects_none_in_child_scope(self, scope: Scope) -> None:
        with ChildScope(scope) as child:
            assert child.get(CachedView).cache is None


class TestAmbiguity:
    def test_two_unnamed_bindings_are_ambiguous(self, scope: Scope) -> None:
        scope.add_concrete(SqliteDatabase, provides=Database)
        scope.add_concrete(PostgresDatabase, provides=Database)

        with pytest.raises(ScopeWireAmbiguousBindingError, match="2 bindings of Database"):
            scope.get(Database)

    def test_matching_conditional_binding_wins(self, scope: Scope) -> None:
        scope.add_concrete(SqliteDatabase, provides=Database)
        scope.add_concrete(
            PostgresDatabase,
            provides=Database,
            condition=lambda request: (
                request.parent is not None and request.parent.service is AuditLog
            ),
        )

        assert isinstance(scope.get(AuditLog).db, PostgresDatabase)
        assert isinstance(scope.get(Database), SqliteDatabase)

    def test_explicit_binding_wins_over_implicit_binding(self, scope: Scope) -> None:
        scope.get(Widget)
        widget = Widget()
        scope.add_instance(widget)

        assert scope.get(Widget) is widget


class TestCircularDependencies:
    def test_cycle_is_reported_with_service_chain(self, scope: Scope) -> None:
        with pytest.raises(ScopeWireCircularDependencyError, match="Chicken -> Egg -> Chicken"):
            scope.get(Chicken)


class TestInjection:
    def test_inject_method_is_called_after_construction(self, scope: Scope) -> None:
        mailer = scope.get(Mailer)

        assert isinstance(mailer.transport, Transport)

    def test_inject_marker_on_init_wins_over_richer_constructor(self, scope: Scope) -> None:
        scope.add_concrete(SqliteDatabase, provides=Database)

        assert scope.get(Preferring).db is None

    def test_constructor_with_bound_parameters_is_preferred(self, scope: Scope) -> None:
        scope.add_concrete(SqliteDatabase, provides=Database)

        assert isinstance(scope.get(Reporter).db, SqliteDatabase)

    def test_constructor_with_unbound_parameters_is_avoided(self, scope: Scope) -> None:
        assert scope.get(Reporter).db is None

    def test_ties_go_to_first_declared_constructor(self, scope: Scope) -> None:
        assert scope.get(Tied).built_by == "__init__"


class TestLifetimes:
    def test_transient_is_the_default(self, scope: Scope) -> None:
        scope.add_concrete(Widget)

        assert scope.get(Widget) is not scope.get(Widget)

    def test_singleton_is_cached(self, scope: Scope) -> None:
        scope.add_concrete(Widget, lifetime=Lifetime.SINGLETON)

        assert scope.get(Widget) is scope.get(Widget)

    def test_from_scope_uses_default_lifetime(self) -> None:
        with Scope(ScopeSettings(default_lifetime=Lifetime.SINGLETON)) as scope:
            binding = scope.add_concrete(Widget)

            assert binding.lifetime is Lifetime.SINGLETON
            assert scope.get(Widget) is scope.get(Widget)

    def test_self_bindings_use_default_lifetime(self) -> None:
        with Scope(ScopeSettings(default_lifetime=Lifetime.SINGLETON)) as scope:
            assert scope.get(Transport) is scope.get(Transport)


class TestAutobinding:
    def test_concrete_classes_are_self_bound(self, scope: Scope) -> None:
        assert isinstance(scope.get(Widget), Widget)
        assert scope.get_bindings(Widget)[0].is_implicit

    def test_abstract_classes_are_not_self_bound(self, scope: Scope) -> None:
        with pytest.raises(ScopeWireNoViableBindingError):
            scope.get(Database)

    def test_autobinding_can_be_disabled(self, strict_scope: Scope) -> None:
        with pytest.raises(ScopeWireNoViableBindingError):
            strict_scope.get(Widget)

        assert strict_scope.try_get(Widget) is None


class TestConvenienceApi:
    def test_try_get_returns_instance_when_bound(self, scope: Scope) -> None:
        scope.add_concrete(SqliteDatabase, provides=Database)

        assert isinstance(scope.try_get(Database), SqliteDatabase)

    def test_try_get_returns_none_when_unbound(self, scope: Scope) -> None:
        assert scope.try_get(Database) is None

    def test_get_all_returns_empty_list_when_unbound(self, scope: Scope) -> None:
        assert scope.get_all(Database) == []

    def test_can_resolve_service_has_no_side_effects(self, scope: Scope) -> None:
        assert not scope.can_resolve_service(Widget)
        assert scope.get_bindings(Widget) == []

    def test_scope_resolves_itself(self, scope: Scope) -> None:
        assert scope.get(Scope) is scope
        assert scope.get(ScopeBase) is scope
        assert scope.get(ResolutionRoot) is scope  # type: ignore[type-abstract]

    def test_resolve_is_lazy(self, scope: Scope) -> None:
        results = scope.resolve(scope.create_request(Database))

        with pytest.raises(ScopeWireNoViableBindingError):
            next(results)

    def test_repr_includes_name(self) -> None:
        assert repr(Scope()) == "Scope()"
        assert repr(Scope(name="app")) == "Scope('app')"


class TestActivation:
    def test_initializable_is_initialized_once_per_instance(self, scope: Scope) -> None:
        counter = scope.get(Counter)

        assert counter.initialized == 1

    def test_shared_instance_is_initialized_once(self, scope: Scope) -> None:
        counter = Counter()
        scope.add_instance(counter)

        scope.get(Counter)
        scope.get(Counter)

        assert counter.initialized == 1

    def test_disabled_activation_cache_reactivates_shared_instance(self) -> None:
        counter = Counter()
        with Scope(ScopeSettings(activation_cache_disabled=True)) as scope:
            scope.add_instance(counter)

            scope.get(Counter)
            scope.get(Counter)

        assert counter.initialized == 2

    def test_on_activation_runs_for_every_new_instance(self, scope: Scope) -> None:
        activated: list[Widget] = []
        scope.add_concrete(Widget, on_activation=lambda context, widget: activated.append(widget))

        first = scope.get(Widget)
        second = scope.get(Widget)

        assert activated == [first, second]


class TestReleaseAndDispose:
    def test_release_deactivates_cached_singleton(self, scope: Scope) -> None:
        scope.add_concrete(Connection, lifetime=Lifetime.SINGLETON)
        connection = scope.get(Connection)

        assert scope.release(connection)
        assert connection.closed
        assert scope.get(Connection) is not connection

    def test_release_of_unknown_instance_returns_false(self, scope: Scope) -> None:
        connection = Connection()

        assert not scope.release(connection)
        assert not connection.closed

    def test_dispose_deactivates_singletons_newest_first(self) -> None:
        events: list[str] = []
        scope = Scope()
        scope.add_concrete(
            Widget,
            lifetime=Lifetime.SINGLETON,
            on_deactivation=lambda context, instance: events.append("widget"),
        )
        scope.add_concrete(
            Transport,
            lifetime=Lifetime.SINGLETON,
            on_deactivation=lambda context, instance: events.append("transport"),
        )
        scope.get(Widget)
        scope.get(Transport)

        scope.dispose()
        scope.dispose()

        assert events == ["transport", "widget"]

    def test_dispose_does_not_touch_transients(self) -> None:
        scope = Scope()
        connection = scope.get(Connection)

        scope.dispose()

        assert not connection.closed

    def test_disposed_scope_rejects_use(self) -> None:
        scope = Scope()
        scope.dispose()

        assert scope.is_disposed
        with pytest.raises(ScopeWireScopeDisposedError):
            scope.get(Widget)
        with pytest.raises(ScopeWireScopeDisposedError):
            scope.add_concrete(Widget)

    def test_context_manager_disposes_scope(self) -> None:
        with Scope() as scope:
            scope.add_concrete(Connection, lifetime=Lifetime.SINGLETON)
            connection = scope.get(Connection)

        assert scope.is_disposed
        assert connection.closed
