import threading
from typing import Any, Callable, Iterable

from strata_di.domain import ILifetimeManager, Resolver, ResolverStrategy, UnresolvableError


class LifetimeManager(ILifetimeManager):
    """Applies resolver lifetimes when producing instances.

    Singleton instances are cached on their resolver, so a singleton lives as
    long as the container table holding it. First-time creation is serialized
    so concurrent resolutions share one instance.

    Attributes:
        _lock: Re-entrant lock guarding singleton creation.
    """

    def __init__(self) -> None:
        """Initialize the lifetime manager."""
        self._lock = threading.RLock()

    def get_or_create(self, resolver: Resolver, factory: Callable[[], Any]) -> Any:
        """Get the cached instance or create a new one based on the resolver strategy.

        Args:
            resolver: The resolver holding strategy and cache.
            factory: Function to create a new instance if needed.

        Returns:
            Instance according to the strategy:
            - Singleton: Returns the cached instance or creates and caches a new one
            - Anything else: Always creates a new instance

        Example:
            >>> resolver = Resolver(key=MyService, strategy=ResolverStrategy.SINGLETON, state=MyService)
            >>> instance = manager.get_or_create(resolver, lambda: MyService())
        """
        if resolver.strategy == ResolverStrategy.SINGLETON:
            if not resolver.is_cached:
                with self._lock:
                    # Another thread may have created it while we waited
                    if not resolver.is_cached:
                        resolver.cached_instance = self._create(resolver, factory)
                        resolver.is_cached = True
            return resolver.cached_instance

        return self._create(resolver, factory)

    def clear_cache(self, resolvers: Iterable[Resolver]) -> None:
        """Drop the cached singleton instances held by the given resolvers.

        Useful for testing or resetting container state.
        """
        with self._lock:
            for resolver in resolvers:
                resolver.cached_instance = None
                resolver.is_cached = False

    def _create(self, resolver: Resolver, factory: Callable[[], Any]) -> Any:
        try:
            return factory()
        except UnresolvableError:
            raise
        except Exception as e:
            raise UnresolvableError(resolver.key, f"Failed to create instance: {str(e)}") from e
