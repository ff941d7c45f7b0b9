from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Optional

from strata_di.domain.models import Resolver


class IContainer(ABC):
    """Abstract interface for dependency injection container operations."""

    @property
    @abstractmethod
    def root(self) -> "IContainer":
        """The top-most container of the hierarchy. The root's root is itself."""

    @property
    @abstractmethod
    def parent(self) -> Optional["IContainer"]:
        """The parent container, or None for the root."""

    @abstractmethod
    def register_instance(self, key: Any, instance: Any) -> Resolver:
        """Register an existing instance under the given key."""

    @abstractmethod
    def register_singleton(self, key: Any, factory: Optional[Callable[..., Any]] = None) -> Resolver:
        """Register a factory whose first result is cached for this container.

        Args:
            key: The key to register the resolver under.
            factory: The factory to invoke. Defaults to the key itself.
        """

    @abstractmethod
    def register_transient(self, key: Any, factory: Optional[Callable[..., Any]] = None) -> Resolver:
        """Register a factory invoked on every resolution.

        Args:
            key: The key to register the resolver under.
            factory: The factory to invoke. Defaults to the key itself.
        """

    @abstractmethod
    def register_singletons(self, dependencies: Dict[Any, Callable[..., Any]]) -> None:
        """Register multiple singleton dependencies at once."""

    @abstractmethod
    def register_transients(self, dependencies: Dict[Any, Callable[..., Any]]) -> None:
        """Register multiple transient dependencies at once."""

    @abstractmethod
    def register_handler(self, key: Any, handler: Callable[["IContainer", Any], Any]) -> Resolver:
        """Register a handler called with the container and the key on each resolution."""

    @abstractmethod
    def register_alias(self, original_key: Any, alias_key: Any) -> Resolver:
        """Make alias_key resolve whatever original_key resolves."""

    @abstractmethod
    def register_resolver(self, key: Any, resolver: Resolver) -> Resolver:
        """Store a resolver under the given key."""

    @abstractmethod
    def auto_register(self, key: Any, factory: Optional[Callable[..., Any]] = None) -> Resolver:
        """Register a factory using the registration strategy attached to it."""

    @abstractmethod
    def auto_register_all(self, factories: Iterable[Callable[..., Any]]) -> None:
        """Auto-register each factory under itself."""

    @abstractmethod
    def has_resolver(self, key: Any, check_parent: bool = False) -> bool:
        """Check whether a resolver is stored for the key."""

    @abstractmethod
    def resolve(self, key: Any) -> Any:
        """Resolve and return an instance for the requested key."""

    @abstractmethod
    def invoke(self, factory: Callable[..., Any]) -> Any:
        """Call the factory with its parameters resolved from this container."""

    @abstractmethod
    def create_child(self) -> "IContainer":
        """Create and return a child container."""

    @abstractmethod
    def clear(self) -> None:
        """Clear all resolvers and cached instances from the container."""


class IRegistration(ABC):
    """Strategy deciding how a key is registered with a container."""

    @abstractmethod
    def register_resolver(self, container: IContainer, key: Any, factory: Callable[..., Any]) -> Any:
        """Called by the container to register the resolver.

        Args:
            container: The container the resolver is being registered with.
            key: The key the resolver should be registered as.
            factory: The function to create the resolver for.

        Returns:
            The resolver that was registered, or a callable the container
            should register with its default lifetime.
        """


class IMetadataStore(ABC):
    """Abstract interface for declaration-time metadata storage."""

    @abstractmethod
    def define(self, metadata_key: Any, value: Any, target: Any, property_key: Optional[str] = None) -> None:
        """Attach a metadata value to a target (or to one of its members)."""

    @abstractmethod
    def get(self, metadata_key: Any, target: Any, property_key: Optional[str] = None) -> Any:
        """Look up a metadata value, including values inherited by classes."""

    @abstractmethod
    def get_own(self, metadata_key: Any, target: Any, property_key: Optional[str] = None) -> Any:
        """Look up a metadata value defined directly on the target."""


class IInvoker(ABC):
    """Abstract interface for calling factories with injected parameters."""

    @abstractmethod
    def invoke(self, factory: Callable[..., Any], container: IContainer) -> Any:
        """Resolve the factory's parameters and call it.

        Args:
            factory: The class or function to call.
            container: The DI container to use for resolving parameters.

        Returns:
            The factory's result.

        Raises:
            UnresolvableError: If a parameter cannot be resolved.
        """


class ILifetimeManager(ABC):
    """Abstract interface for managing instance lifetimes."""

    @abstractmethod
    def get_or_create(self, resolver: Resolver, factory: Callable[[], Any]) -> Any:
        """Get the cached instance or create a new one based on the resolver strategy.

        Args:
            resolver: The resolver holding strategy and cache.
            factory: A callable to create a new instance if needed.
        """

    @abstractmethod
    def clear_cache(self, resolvers: Iterable[Resolver]) -> None:
        """Drop the cached instances held by the given resolvers."""
