"""Unit tests for DIContainer."""

import pytest

from strata_di.application.container import DIContainer
from strata_di.application.metadata import MetadataStore, metadata
from strata_di.application.registrations import (
    Registration,
    SingletonRegistration,
    TransientRegistration,
)
from strata_di.domain import (
    ContainerConfiguration,
    IContainer,
    LifetimeError,
    MetadataKey,
    RegistrationError,
    ResolverStrategy,
    UnresolvableError,
)


@pytest.fixture
def store():
    return MetadataStore()


@pytest.fixture
def container(store):
    return DIContainer(metadata_store=store)


class TestContainerInitialization:
    """Test cases for DIContainer initialization."""

    def test_container_initialization(self):
        """Test that container initializes correctly."""
        container = DIContainer()
        assert container._resolvers == {}
        assert container._invoker is not None
        assert container._lifetime_manager is not None
        assert container.metadata_store is metadata
        assert container.configuration == ContainerConfiguration()

    def test_container_implements_interface(self):
        """Test that DIContainer implements IContainer."""
        assert isinstance(DIContainer(), IContainer)

    def test_root_of_root_is_itself(self, container):
        """Test that a container without parent is its own root."""
        assert container.root is container
        assert container.parent is None


class TestHierarchy:
    """Test cases for child containers."""

    def test_child_root_is_top_most_ancestor(self, container):
        """Test that root walks the whole hierarchy."""
        grandchild = container.create_child().create_child()

        assert grandchild.root is container
        assert grandchild.parent.parent is container

    def test_child_shares_collaborators(self, container, store):
        """Test that children share store, configuration and lifetime manager."""
        child = container.create_child()

        assert child.metadata_store is store
        assert child.configuration is container.configuration
        assert child._lifetime_manager is container._lifetime_manager

    def test_create_scope_is_create_child(self, container):
        """Test that create_scope returns a child container."""
        assert container.create_scope().parent is container

    def test_child_resolves_parent_registrations(self, container):
        """Test that unknown keys are looked up in the parent."""
        container.register_instance("name", "value")

        assert container.create_child().resolve("name") == "value"

    def test_child_registration_shadows_parent(self, container):
        """Test that the closest registration wins."""
        container.register_instance("name", "parent")
        child = container.create_child()
        child.register_instance("name", "child")

        assert child.resolve("name") == "child"
        assert container.resolve("name") == "parent"


class TestPrimitiveRegistration:
    """Test cases for the registration primitives."""

    def test_register_instance(self, container):
        """Test that instances are returned as-is."""
        value = object()
        resolver = container.register_instance("value", value)

        assert resolver.strategy == ResolverStrategy.INSTANCE
        assert container.resolve("value") is value

    def test_register_singleton(self, container):
        """Test that singletons are cached."""

        class Service:
            pass

        resolver = container.register_singleton(Service)

        assert resolver.strategy == ResolverStrategy.SINGLETON
        assert resolver.state is Service
        assert container.resolve(Service) is container.resolve(Service)

    def test_register_singleton_with_factory(self, container):
        """Test that a separate factory can be given."""

        class Database:
            pass

        class Postgres(Database):
            pass

        container.register_singleton(Database, Postgres)

        assert isinstance(container.resolve(Database), Postgres)

    def test_register_transient(self, container):
        """Test that transients are created on every resolution."""

        class Service:
            pass

        resolver = container.register_transient(Service)

        assert resolver.strategy == ResolverStrategy.TRANSIENT
        assert container.resolve(Service) is not container.resolve(Service)

    def test_register_handler(self, container):
        """Test that handlers receive the container and key."""
        calls = []
        container.register_handler("handled", lambda c, key: calls.append((c, key)) or len(calls))

        assert container.resolve("handled") == 1
        assert container.resolve("handled") == 2
        assert calls[0] == (container, "handled")

    def test_register_alias(self, container):
        """Test that aliases resolve the original key."""

        class Service:
            pass

        container.register_singleton(Service)
        container.register_alias(Service, "service")

        assert container.resolve("service") is container.resolve(Service)

    def test_register_none_key_raises(self, container):
        """Test that None cannot be used as a key."""
        with pytest.raises(RegistrationError):
            container.register_instance(None, 1)

    def test_register_singletons_bulk(self, container):
        """Test registering multiple singletons at once."""

        class ServiceA:
            pass

        class ServiceB:
            pass

        container.register_singletons({ServiceA: ServiceA, ServiceB: ServiceB})

        assert container.get_resolver(ServiceA).strategy == ResolverStrategy.SINGLETON
        assert container.get_resolver(ServiceB).strategy == ResolverStrategy.SINGLETON

    def test_register_transients_bulk(self, container):
        """Test registering multiple transients at once."""

        class ServiceA:
            pass

        container.register_transients({ServiceA: ServiceA})

        assert container.get_resolver(ServiceA).strategy == ResolverStrategy.TRANSIENT


class TestReRegistration:
    """Test cases for registering a key twice."""

    def test_same_strategy_returns_existing(self, container):
        """Test that re-registering with the same lifetime keeps the first resolver."""

        class Service:
            pass

        first = container.register_singleton(Service)
        second = container.register_singleton(Service)

        assert first is second

    def test_different_strategy_raises(self, container):
        """Test that conflicting lifetimes raise LifetimeError."""

        class TestService:
            pass

        container.register_singleton(TestService)

        with pytest.raises(LifetimeError) as exc_info:
            container.register_transient(TestService)

        error = str(exc_info.value)
        assert "TestService" in error
        assert "singleton" in error
        assert "transient" in error

    def test_unregister_allows_new_strategy(self, container):
        """Test that unregister frees the key."""

        class Service:
            pass

        container.register_singleton(Service)
        container.unregister(Service)
        resolver = container.register_transient(Service)

        assert resolver.strategy == ResolverStrategy.TRANSIENT


class TestAutoRegistration:
    """Test cases for strategy-driven registration."""

    def test_default_is_singleton(self, container):
        """Test that factories without strategy are registered as singletons."""

        class Service:
            pass

        resolver = container.auto_register(Service)

        assert resolver.strategy == ResolverStrategy.SINGLETON

    def test_configured_default_lifetime(self, store):
        """Test that the default lifetime can be configured."""
        container = DIContainer(
            metadata_store=store,
            configuration=ContainerConfiguration(default_lifetime=ResolverStrategy.TRANSIENT),
        )

        class Service:
            pass

        assert container.auto_register(Service).strategy == ResolverStrategy.TRANSIENT

    def test_uses_attached_strategy(self, container, store):
        """Test that the attached strategy decides the lifetime."""

        class Service:
            pass

        store.define(MetadataKey.REGISTRATION, TransientRegistration(), Service)

        assert container.auto_register(Service).strategy == ResolverStrategy.TRANSIENT

    def test_strategy_key_override(self, container, store):
        """Test that a strategy may register under another key."""

        class Service:
            pass

        store.define(MetadataKey.REGISTRATION, TransientRegistration("service"), Service)
        resolver = container.auto_register(Service)

        assert resolver.key == "service"
        assert container.has_resolver("service")
        assert not container.has_resolver(Service)

    def test_pass_through_strategy_uses_default(self, container, store):
        """Test that a plain Registration falls back to the default lifetime."""

        class Service:
            pass

        store.define(MetadataKey.REGISTRATION, Registration(), Service)

        resolver = container.auto_register(Service)

        assert resolver.strategy == ResolverStrategy.SINGLETON
        assert resolver.state is Service

    def test_pass_through_strategy_with_factory_fn(self, container, store):
        """Test that a factory method replaces the class as factory."""

        class Service:
            pass

        def build() -> Service:
            service = Service()
            service.built = True
            return service

        store.define(MetadataKey.REGISTRATION, Registration(factory_fn=build), Service)

        resolver = container.auto_register(Service)

        assert resolver.state is build
        assert container.resolve(Service).built is True

    def test_non_callable_factory_raises(self, container):
        """Test that non-callable factories are rejected."""
        with pytest.raises(RegistrationError):
            container.auto_register("key", 42)

    def test_auto_register_all(self, container):
        """Test registering several factories."""

        class ServiceA:
            pass

        class ServiceB:
            pass

        container.auto_register_all([ServiceA, ServiceB])

        assert container.has_resolver(ServiceA)
        assert container.has_resolver(ServiceB)

    def test_register_strategy(self, container):
        """Test explicit registration through a strategy."""

        class Service:
            pass

        resolver = container.register_strategy(SingletonRegistration(True), Service)

        assert resolver.strategy == ResolverStrategy.SINGLETON
        assert container.has_resolver(Service)

    def test_inherits_plain_lifetime(self, container, store):
        """Test that a subclass uses the lifetime attached to its base."""

        class Base:
            pass

        class Derived(Base):
            pass

        store.define(MetadataKey.REGISTRATION, TransientRegistration(), Base)

        resolver = container.auto_register(Derived)

        assert resolver.strategy == ResolverStrategy.TRANSIENT
        assert resolver.state is Derived

    def test_ignores_inherited_factory_method(self, container, store):
        """Test that a base's factory method is not used for a subclass."""

        class Base:
            pass

        class Derived(Base):
            pass

        store.define(MetadataKey.REGISTRATION, TransientRegistration(factory_fn=Base), Base)

        resolver = container.auto_register(Derived)

        assert resolver.strategy == ResolverStrategy.SINGLETON
        assert resolver.state is Derived

    def test_ignores_inherited_key_override(self, container, store):
        """Test that a subclass is registered under its own key."""

        class Base:
            pass

        class Derived(Base):
            pass

        store.define(MetadataKey.REGISTRATION, SingletonRegistration("shared"), Base)

        resolver = container.auto_register(Derived)

        assert resolver.key is Derived
        assert not container.has_resolver("shared")


class TestResolution:
    """Test cases for resolve()."""

    def test_resolve_auto_registers_classes(self, container):
        """Test that unknown classes are registered on first resolution."""

        class Service:
            pass

        instance = container.resolve(Service)

        assert isinstance(instance, Service)
        assert container.has_resolver(Service)

    def test_resolve_injects_constructor_parameters(self, container):
        """Test auto-wiring of constructor parameters."""

        class Config:
            pass

        class Service:
            def __init__(self, config: Config):
                self.config = config

        assert container.resolve(Service).config is container.resolve(Config)

    def test_resolve_unknown_string_raises(self, container):
        """Test that non-callable keys must be registered."""
        with pytest.raises(UnresolvableError, match="No resolver"):
            container.resolve("missing")

    def test_auto_register_can_be_disabled(self, store):
        """Test that auto-registration follows the configuration."""
        container = DIContainer(metadata_store=store, configuration=ContainerConfiguration(auto_register=False))

        class Service:
            pass

        with pytest.raises(UnresolvableError):
            container.resolve(Service)

    def test_get_is_resolve(self, container):
        """Test that get() resolves."""
        container.register_instance("name", "value")

        assert container.get("name") == "value"

    def test_resolution_count(self, container):
        """Test that resolutions are counted on the resolver."""
        container.register_instance("name", "value")
        container.resolve("name")
        container.resolve("name")

        assert container.get_resolver("name").resolution_count == 2

    def test_invoke(self, container):
        """Test calling a function with injected parameters."""

        class Config:
            pass

        def build(config: Config) -> Config:
            return config

        assert container.invoke(build) is container.resolve(Config)

    def test_singleton_dependencies_come_from_owner(self, container):
        """Test that a root singleton is built with root registrations."""

        class Config:
            def __init__(self):
                self.name = "root"

        class Service:
            def __init__(self, config: Config):
                self.config = config

        container.register_singleton(Service)
        child = container.create_child()
        child_config = Config()
        child_config.name = "child"
        child.register_instance(Config, child_config)

        assert child.resolve(Service).config.name == "root"


class TestRegistryManagement:
    """Test cases for resolver lookup, copying and clearing."""

    def test_has_resolver_check_parent(self, container):
        """Test that check_parent includes ancestors."""
        container.register_instance("name", "value")
        child = container.create_child()

        assert not child.has_resolver("name")
        assert child.has_resolver("name", check_parent=True)

    def test_get_resolver_missing(self, container):
        """Test that unknown keys have no resolver."""
        assert container.get_resolver("missing") is None

    def test_get_registry_copy_includes_ancestors(self, container):
        """Test that copies include parent resolvers without caches."""

        class Service:
            pass

        container.register_singleton(Service)
        container.resolve(Service)
        child = container.create_child()
        child.register_instance("name", "value")

        registry = child.get_registry_copy()

        assert set(registry) == {Service, "name"}
        assert registry[Service] is not container.get_resolver(Service)
        assert registry[Service].is_cached is False
        assert container.get_resolver(Service).is_cached is True

    def test_set_registry(self, container):
        """Test replacing the resolvers."""
        source = DIContainer(metadata_store=MetadataStore())
        source.register_instance("name", "value")

        container.set_registry(source.get_registry_copy())

        assert container.resolve("name") == "value"

    def test_clear(self, container):
        """Test that clear removes resolvers and cached instances."""

        class Service:
            pass

        resolver = container.register_singleton(Service)
        container.resolve(Service)
        container.clear()

        assert not container.has_resolver(Service)
        assert resolver.is_cached is False
