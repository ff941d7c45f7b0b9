"""Application layer - Declaration-time registration decorators."""

import functools
import inspect
from typing import Any, Callable, Optional

from strata_di.application.registrations import Registration, SingletonRegistration, TransientRegistration
from strata_di.domain import IMetadataStore, RegistrationError


def _is_class_member(target: Any) -> bool:
    if isinstance(target, (staticmethod, classmethod)):
        return True
    if not inspect.isfunction(target):
        return False
    owner, _, _ = target.__qualname__.rpartition(".")
    return bool(owner) and not owner.endswith("<locals>")


class _DeferredRegistration:
    """Holds a decorated class member until its owning class exists.

    Class creation replaces the placeholder with the original member and
    attaches the registration. A placeholder wrapped by another decorator,
    such as ``@staticmethod`` applied on top of it, is hidden from class
    creation, so any use of it raises instead of silently skipping the
    registration.
    """

    def __init__(self, member: Any, strategy: Registration, store: Optional[IMetadataStore]) -> None:
        functools.update_wrapper(self, getattr(member, "__func__", member))
        self._member = member
        self._strategy = strategy
        self._store = store

    def __set_name__(self, owner: type, name: str) -> None:
        setattr(owner, name, self._member)
        self._strategy.init(self._strategy, owner, name, self._member, store=self._store)

    def _misplaced(self) -> RegistrationError:
        return RegistrationError(
            f"Registration of {self.__qualname__} was never applied: "
            f"{type(self._strategy).__name__} must be the outermost decorator"
        )

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        raise self._misplaced()

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        raise self._misplaced()


def registration(strategy: Registration, store: Optional[IMetadataStore] = None) -> Callable[..., Any]:
    """Decorator: Specifies a custom registration strategy for the decorated item.

    Applied to a class or a module-level function, the strategy is attached
    immediately. Applied to a method inside a class body, it is attached to
    the method's declared return type once the class is created. The
    decorator can also be called explicitly as ``decorator(owner, "method")``.

    Args:
        strategy: The registration to attach.
        store: Metadata store to write to. Defaults to the shared store.

    Returns:
        A decorator returning the decorated item unchanged.

    Example:
        >>> @registration(TransientRegistration())
        ... class RequestHandler:
        ...     pass
        >>>
        >>> class Factories:
        ...     @registration(SingletonRegistration())
        ...     @staticmethod
        ...     def create_connection() -> DatabaseConnection:
        ...         return DatabaseConnection("sqlite://")
    """

    def decorator(target: Any, key: Optional[str] = None, descriptor: Any = None) -> Any:
        if key is None and _is_class_member(target):
            return _DeferredRegistration(target, strategy, store)
        strategy.init(strategy, target, key, descriptor, store=store)
        return target

    return decorator


def transient(key: Any = None, store: Optional[IMetadataStore] = None) -> Callable[..., Any]:
    """Decorator: Specifies to register the decorated item with a transient lifetime.

    Args:
        key: Optional key to register as.
        store: Metadata store to write to. Defaults to the shared store.
    """
    return registration(TransientRegistration(key), store=store)


def singleton(
    key_or_register_in_child: Any = None,
    register_in_child: bool = False,
    store: Optional[IMetadataStore] = None,
) -> Callable[..., Any]:
    """Decorator: Specifies to register the decorated item with a singleton lifetime.

    Args:
        key_or_register_in_child: ``register_in_child`` when a ``bool``, otherwise the key.
        register_in_child: Register on the resolving container instead of the root.
        store: Metadata store to write to. Defaults to the shared store.
    """
    return registration(SingletonRegistration(key_or_register_in_child, register_in_child), store=store)
