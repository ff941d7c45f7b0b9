from typing import Any, Optional


def describe_key(key: Any) -> str:
    return getattr(key, "__name__", None) or repr(key)


class DIException(Exception):
    """Base exception for DI-related errors."""


class UnresolvableError(DIException):
    """Raised when a dependency cannot be resolved.

    This occurs when:
    - No resolver exists for the requested key and it cannot be auto-registered.
    - A factory parameter lacks a type hint.
    - The factory raised while creating the instance.

    Attributes:
        key: The key that could not be resolved.
        reason: Optional reason for the failure.
    """

    def __init__(self, key: Any, reason: Optional[str] = None) -> None:
        self.key = key
        self.reason = reason
        message = f"Cannot resolve dependency for key: {describe_key(key)}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class LifetimeError(DIException):
    """Raised for conflicting lifetime configurations.

    This occurs when a key is registered again with a different resolver strategy.
    """


class RegistrationError(DIException):
    """Raised for invalid registration input.

    This occurs when:
    - A non-callable factory is auto-registered.
    - An unsupported default lifetime is configured.
    """


class InterfaceMismatchError(DIException, TypeError):
    """Raised when a strategy calls a container primitive the container does not provide.

    Attributes:
        container: The container that was handed to the strategy.
        operation: Name of the missing primitive.
    """

    def __init__(self, container: Any, operation: str) -> None:
        self.container = container
        self.operation = operation
        super().__init__(f"{type(container).__name__} does not implement '{operation}'")


class MetadataError(DIException):
    """Raised when metadata cannot be attached to a target.

    Typically the declared return type of a factory method could not be found.
    """
