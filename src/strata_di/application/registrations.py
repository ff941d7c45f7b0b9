"""Application layer - Registration strategies."""

import inspect
import logging
import types
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from strata_di.application.metadata import metadata
from strata_di.domain import (
    IContainer,
    IMetadataStore,
    InterfaceMismatchError,
    IRegistration,
    MetadataKey,
)

logger = logging.getLogger(__name__)


def _require(container: Any, operation: str) -> Callable[..., Any]:
    primitive = getattr(container, operation, None)
    if not callable(primitive):
        raise InterfaceMismatchError(container, operation)
    return primitive


def _override_key(override: Any, key: Any) -> Any:
    if override is None or (isinstance(override, str) and not override):
        return key
    return override


def _bind_factory(target: Any, key: str) -> Callable[..., Any]:
    member = inspect.getattr_static(target, key)
    if inspect.isclass(target) and inspect.isfunction(member):
        return types.MethodType(member, target)
    return getattr(target, key)


class Registration(BaseModel, IRegistration):
    """Customizes how a particular function is resolved by the container.

    The base strategy registers nothing itself: it hands the container the
    callable to register with its default lifetime. When attached to a factory
    method, that method replaces the original factory.

    Attributes:
        factory_fn: Factory invoked instead of the target.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    factory_fn: Optional[Callable[..., Any]] = Field(
        default=None,
        description="Factory invoked instead of the target.",
    )

    def init(
        self,
        value: "Registration",
        target: Any,
        key: Optional[str] = None,
        descriptor: Any = None,
        store: Optional[IMetadataStore] = None,
    ) -> None:
        """Attach a registration to its target.

        When a member name is given the declaration annotates a factory
        method: the method becomes the factory and the registration is
        attached to the method's declared return type instead of the owner.

        Args:
            value: The registration instance.
            target: The target to attach the registration to.
            key: An optional member name for factory methods.
            descriptor: The decorated member, if any.
            store: Metadata store to write to. Defaults to the shared store.
        """
        store = metadata if store is None else store

        if key:
            value.factory_fn = _bind_factory(target, key)
            target = store.get(MetadataKey.RETURN_TYPE, target, key)

        store.define(MetadataKey.REGISTRATION, value, target)
        logger.debug("Attached %s to %r", type(value).__name__, target)

    def register_resolver(self, container: IContainer, key: Any, factory: Callable[..., Any]) -> Any:
        """Return the callable the container should register for the key.

        Args:
            container: The container the resolver is being registered with.
            key: The key the resolver should be registered as.
            factory: The function to create the resolver for.

        Returns:
            The factory method when one was attached, otherwise ``factory``.
        """
        return self._effective_factory(factory)

    def _effective_factory(self, factory: Callable[..., Any]) -> Callable[..., Any]:
        return self.factory_fn if self.factory_fn is not None else factory


class TransientRegistration(Registration):
    """Registers the decorated item with a transient lifetime.

    Attributes:
        key: Optional key to register as instead of the resolved key.
    """

    key: Any = Field(default=None, description="Key to register as.")

    def __init__(self, key: Any = None, **data: Any) -> None:
        super().__init__(key=key, **data)

    def register_resolver(self, container: IContainer, key: Any, factory: Callable[..., Any]) -> Any:
        """Register a transient resolver on the given container.

        Raises:
            InterfaceMismatchError: If the container cannot register transients.
        """
        register_transient = _require(container, "register_transient")
        return register_transient(_override_key(self.key, key), self._effective_factory(factory))


class SingletonRegistration(Registration):
    """Registers the decorated item with a singleton lifetime.

    The first constructor argument is ``register_in_child`` when it is a
    ``bool`` (the key is then None and the second argument is ignored);
    otherwise it is the key and the second argument is ``register_in_child``.

    Attributes:
        key: Optional key to register as instead of the resolved key.
        register_in_child: Register on the resolving container instead of the root.
    """

    key: Any = Field(default=None, description="Key to register as.")
    register_in_child: bool = Field(
        default=False,
        description="Register on the resolving container instead of the root.",
    )

    def __init__(self, key_or_register_in_child: Any = None, register_in_child: bool = False, **data: Any) -> None:
        if isinstance(key_or_register_in_child, bool):
            super().__init__(key=None, register_in_child=key_or_register_in_child, **data)
        else:
            super().__init__(key=key_or_register_in_child, register_in_child=register_in_child, **data)

    @classmethod
    def scoped(cls, register_in_child: bool) -> "SingletonRegistration":
        """Create a singleton registration without a key override."""
        return cls(None, register_in_child)

    @classmethod
    def keyed(cls, key: Any, register_in_child: bool = False) -> "SingletonRegistration":
        """Create a singleton registration for an explicit key, even a ``bool`` one."""
        registration = cls(None, register_in_child)
        registration.key = key
        return registration

    def register_resolver(self, container: IContainer, key: Any, factory: Callable[..., Any]) -> Any:
        """Register a singleton resolver on the container or on its root.

        Raises:
            InterfaceMismatchError: If the container cannot register singletons.
        """
        if self.register_in_child:
            owner = container
        else:
            owner = getattr(container, "root", None)
            if owner is None:
                raise InterfaceMismatchError(container, "root")

        register_singleton = _require(owner, "register_singleton")
        return register_singleton(_override_key(self.key, key), self._effective_factory(factory))
