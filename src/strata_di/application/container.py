import logging
import threading
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from strata_di.application.invoker import DependencyInvoker
from strata_di.application.lifetime_manager import LifetimeManager
from strata_di.application.metadata import metadata
from strata_di.domain import (
    ContainerConfiguration,
    IContainer,
    IInvoker,
    ILifetimeManager,
    IMetadataStore,
    IRegistration,
    LifetimeError,
    MetadataKey,
    RegistrationError,
    Resolver,
    ResolverStrategy,
    UnresolvableError,
)
from strata_di.domain.exceptions import describe_key

logger = logging.getLogger(__name__)


class DIContainer(IContainer):
    """Main dependency injection container.

    Stores one resolver per key and walks up the container hierarchy when a
    key is not registered locally. Factories that carry a registration
    strategy decide themselves where and how they are registered.

    Attributes:
        _parent: The parent container, or None for the root.
        _resolvers: Dictionary mapping keys to their resolvers.
        _lock: Lock serializing registrations on this container.
        _metadata_store: Store holding registration strategies.
        _configuration: Options shared by the hierarchy.
        _invoker: Component calling factories with injected parameters.
        _lifetime_manager: Component managing instance lifetimes, shared by the hierarchy.
    """

    def __init__(
        self,
        parent: Optional["DIContainer"] = None,
        metadata_store: Optional[IMetadataStore] = None,
        configuration: Optional[ContainerConfiguration] = None,
    ) -> None:
        """Initialize the container.

        Args:
            parent: Optional parent container. Children inherit its store,
                configuration and lifetime manager unless given their own.
            metadata_store: Store to read registration strategies from.
            configuration: Container options.
        """
        self._parent = parent
        self._resolvers: Dict[Any, Resolver] = {}
        self._lock = threading.RLock()

        if parent is not None:
            self._metadata_store = metadata_store if metadata_store is not None else parent.metadata_store
            self._configuration = configuration if configuration is not None else parent.configuration
            self._invoker: IInvoker = parent._invoker
            self._lifetime_manager: ILifetimeManager = parent._lifetime_manager
        else:
            self._metadata_store = metadata_store if metadata_store is not None else metadata
            self._configuration = configuration if configuration is not None else ContainerConfiguration()
            self._invoker = DependencyInvoker()
            self._lifetime_manager = LifetimeManager()

    @property
    def root(self) -> "DIContainer":
        """The top-most container of the hierarchy."""
        container = self
        while container._parent is not None:
            container = container._parent
        return container

    @property
    def parent(self) -> Optional["DIContainer"]:
        """The parent container, or None for the root."""
        return self._parent

    @property
    def metadata_store(self) -> IMetadataStore:
        """The store registration strategies are read from."""
        return self._metadata_store

    @property
    def configuration(self) -> ContainerConfiguration:
        """The options shared by this hierarchy."""
        return self._configuration

    def _register(self, key: Any, strategy: ResolverStrategy, state: Any) -> Resolver:
        if key is None:
            raise RegistrationError("Cannot register a resolver under a None key")
        return self.register_resolver(key, Resolver(key=key, strategy=strategy, state=state))

    def register_resolver(self, key: Any, resolver: Resolver) -> Resolver:
        """Store a resolver under the given key.

        Args:
            key: The key to register.
            resolver: The resolver to store.

        Returns:
            The stored resolver. When the key is already registered with the
            same strategy, the existing resolver is kept and returned.

        Raises:
            LifetimeError: If the key is registered with a different strategy.
        """
        with self._lock:
            existing = self._resolvers.get(key)
            if existing is not None:
                if existing.strategy != resolver.strategy:
                    raise LifetimeError(
                        f"Dependency {describe_key(key)} is already registered "
                        f"with lifetime {existing.strategy.value}, "
                        f"cannot re-register with {resolver.strategy.value}"
                    )
                return existing

            self._resolvers[key] = resolver
        logger.debug("Registered %s resolver for %s", resolver.strategy.value, describe_key(key))
        return resolver

    def register_instance(self, key: Any, instance: Any) -> Resolver:
        """Register an existing instance under the given key.

        Example:
            >>> container.register_instance("config", {"debug": True})
        """
        return self._register(key, ResolverStrategy.INSTANCE, instance)

    def register_singleton(self, key: Any, factory: Optional[Callable[..., Any]] = None) -> Resolver:
        """Register a factory whose first result is cached in this container.

        Args:
            key: The key to register.
            factory: The factory to invoke. Defaults to the key itself.

        Example:
            >>> container.register_singleton(Database, PostgresDatabase)
        """
        return self._register(key, ResolverStrategy.SINGLETON, key if factory is None else factory)

    def register_transient(self, key: Any, factory: Optional[Callable[..., Any]] = None) -> Resolver:
        """Register a factory invoked on every resolution.

        Args:
            key: The key to register.
            factory: The factory to invoke. Defaults to the key itself.
        """
        return self._register(key, ResolverStrategy.TRANSIENT, key if factory is None else factory)

    def register_singletons(self, dependencies: Dict[Any, Callable[..., Any]]) -> None:
        """Register multiple singleton dependencies at once.

        Args:
            dependencies: Dictionary mapping keys to factories. Factory
                parameters are resolved from their type hints.

        Raises:
            LifetimeError: If a key is already registered with a different lifetime.

        Example:
            >>> container.register_singletons({
            ...     DatabaseConfig: DatabaseConfig.from_env,
            ...     DatabaseConnection: DatabaseConnection,
            ... })
        """
        for key, factory in dependencies.items():
            self.register_singleton(key, factory)

    def register_transients(self, dependencies: Dict[Any, Callable[..., Any]]) -> None:
        """Register multiple transient dependencies at once.

        Args:
            dependencies: Dictionary mapping keys to factories.

        Raises:
            LifetimeError: If a key is already registered with a different lifetime.
        """
        for key, factory in dependencies.items():
            self.register_transient(key, factory)

    def register_handler(self, key: Any, handler: Callable[[IContainer, Any], Any]) -> Resolver:
        """Register a handler called with the resolving container and the key.

        Example:
            >>> container.register_handler("request_id", lambda c, key: uuid4().hex)
        """
        return self._register(key, ResolverStrategy.HANDLER, handler)

    def register_alias(self, original_key: Any, alias_key: Any) -> Resolver:
        """Make alias_key resolve whatever original_key resolves."""
        return self._register(alias_key, ResolverStrategy.ALIAS, original_key)

    def register_strategy(
        self,
        strategy: IRegistration,
        key: Any,
        factory: Optional[Callable[..., Any]] = None,
    ) -> Resolver:
        """Register a factory through an explicit registration strategy.

        Args:
            strategy: The strategy deciding lifetime and target container.
            key: The key to register.
            factory: The factory to use. Defaults to the key itself.

        Returns:
            The resolver the strategy registered. A plain callable returned by
            the strategy is registered with the default lifetime.

        Example:
            >>> container.register_strategy(SingletonRegistration(True), RequestContext)
        """
        factory = key if factory is None else factory
        logger.debug("Registering %s using %s", describe_key(key), type(strategy).__name__)
        result = strategy.register_resolver(self, key, factory)
        if isinstance(result, Resolver):
            return result
        return self._register_default(key, result)

    def _register_default(self, key: Any, factory: Any) -> Resolver:
        if not callable(factory):
            raise RegistrationError(f"Factory for {describe_key(key)} is not callable: {factory!r}")
        if self._configuration.default_lifetime == ResolverStrategy.TRANSIENT:
            return self.register_transient(key, factory)
        return self.register_singleton(key, factory)

    def auto_register(self, key: Any, factory: Optional[Callable[..., Any]] = None) -> Resolver:
        """Register a factory using the registration strategy attached to it.

        Args:
            key: The key to register.
            factory: The factory to register. Defaults to the key itself.

        Returns:
            The registered resolver.

        Raises:
            RegistrationError: If the factory is not callable.
        """
        factory = key if factory is None else factory
        if not callable(factory):
            raise RegistrationError(f"Cannot auto-register {describe_key(key)}: {factory!r} is not callable")

        strategy = self._metadata_store.get_own(MetadataKey.REGISTRATION, factory)
        if strategy is None:
            strategy = self._inherited_strategy(factory)
        if strategy is None:
            return self._register_default(key, factory)
        return self.register_strategy(strategy, key, factory)

    def _inherited_strategy(self, factory: Callable[..., Any]) -> Optional[IRegistration]:
        strategy = self._metadata_store.get(MetadataKey.REGISTRATION, factory)
        if strategy is None:
            return None
        # Factory methods and key overrides only apply to the class they were attached to
        if getattr(strategy, "factory_fn", None) is not None or getattr(strategy, "key", None) not in (None, ""):
            logger.debug("Ignoring %s inherited by %s", type(strategy).__name__, describe_key(factory))
            return None
        return strategy

    def auto_register_all(self, factories: Iterable[Callable[..., Any]]) -> None:
        """Auto-register each factory under itself."""
        for factory in factories:
            self.auto_register(factory)

    def has_resolver(self, key: Any, check_parent: bool = False) -> bool:
        """Check whether a resolver is stored for the key.

        Args:
            key: The key to check.
            check_parent: Also look in ancestor containers.
        """
        if key in self._resolvers:
            return True
        if check_parent and self._parent is not None:
            return self._parent.has_resolver(key, check_parent=True)
        return False

    def get_resolver(self, key: Any) -> Optional[Resolver]:
        """Return the resolver this container would use for the key, if any."""
        return self._lookup(key)[1]

    def unregister(self, key: Any) -> None:
        """Remove the resolver stored in this container for the key."""
        with self._lock:
            self._resolvers.pop(key, None)

    def _lookup(self, key: Any) -> Tuple["DIContainer", Optional[Resolver]]:
        container: Optional[DIContainer] = self
        while container is not None:
            resolver = container._resolvers.get(key)
            if resolver is not None:
                return container, resolver
            container = container._parent
        return self, None

    def _owner_of(self, resolver: Resolver) -> "DIContainer":
        container: Optional[DIContainer] = self
        while container is not None:
            if container._resolvers.get(resolver.key) is resolver:
                return container
            container = container._parent
        return self

    def resolve(self, key: Any) -> Any:
        """Resolve and return an instance for the specified key.

        Looks in this container, then its ancestors. Unknown classes and
        callables are auto-registered when the configuration allows it.

        Args:
            key: The key to resolve.

        Returns:
            The instance produced by the key's resolver.

        Raises:
            UnresolvableError: If the key cannot be resolved.

        Example:
            >>> user_service = container.resolve(UserService)
        """
        owner, resolver = self._lookup(key)

        if resolver is None:
            if not self._configuration.auto_register or not callable(key):
                raise UnresolvableError(key, "No resolver is registered for the key")
            resolver = self.auto_register(key)
            owner = self._owner_of(resolver)

        return owner._activate(resolver)

    def get(self, key: Any) -> Any:
        """Alias of resolve()."""
        return self.resolve(key)

    def _activate(self, resolver: Resolver) -> Any:
        resolver.resolution_count += 1
        strategy = resolver.strategy

        if strategy == ResolverStrategy.INSTANCE:
            return resolver.state
        if strategy == ResolverStrategy.ALIAS:
            return self.resolve(resolver.state)
        if strategy == ResolverStrategy.HANDLER:
            return self._lifetime_manager.get_or_create(resolver, lambda: resolver.state(self, resolver.key))
        return self._lifetime_manager.get_or_create(resolver, lambda: self.invoke(resolver.state))

    def invoke(self, factory: Callable[..., Any]) -> Any:
        """Call the factory with its parameters resolved from this container.

        Raises:
            UnresolvableError: If a parameter cannot be resolved.
        """
        return self._invoker.invoke(factory, self)

    def get_registry_copy(self) -> Dict[Any, Resolver]:
        """Get a copy of the resolvers visible from this container.

        Ancestor resolvers are included; local ones take precedence. Cached
        singleton instances are not copied.

        Returns:
            Copy of the visible resolvers.
        """
        registry = self._parent.get_registry_copy() if self._parent is not None else {}
        for key, resolver in self._resolvers.items():
            registry[key] = resolver.model_copy(
                update={"cached_instance": None, "is_cached": False, "resolution_count": 0}
            )
        return registry

    def set_registry(self, registry: Dict[Any, Resolver]) -> None:
        """Replace this container's resolvers.

        Args:
            registry: Resolvers to use.
        """
        self._resolvers = registry

    def create_child(self) -> "DIContainer":
        """Create a child container.

        The child shares the parent's metadata store, configuration and
        lifetime manager. Keys it cannot resolve are looked up in the parent.
        Singletons registered by strategies without ``register_in_child`` are
        stored in the root and shared by every descendant.

        Returns:
            New container whose parent is this container.

        Example:
            >>> child = container.create_child()
            >>> assert child.root is container
        """
        return DIContainer(parent=self)

    def create_scope(self) -> "DIContainer":
        """Alias of create_child()."""
        return self.create_child()

    def clear(self) -> None:
        """Clear all resolvers and cached instances of this container.

        Useful for testing or resetting the container state.
        """
        self._lifetime_manager.clear_cache(self._resolvers.values())
        self._resolvers.clear()
