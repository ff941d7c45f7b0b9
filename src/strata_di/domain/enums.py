from enum import Enum


class ResolverStrategy(str, Enum):
    """Defines how a stored resolver produces instances.

    Attributes:
        INSTANCE: Always returns the instance supplied at registration.
        SINGLETON: Creates one instance on first resolution and caches it.
        TRANSIENT: Creates a new instance on each resolution.
        HANDLER: Delegates to a handler receiving the container and the key.
        ALIAS: Resolves another key from the same container.
    """

    INSTANCE = "instance"
    SINGLETON = "singleton"
    TRANSIENT = "transient"
    HANDLER = "handler"
    ALIAS = "alias"

    def __str__(self) -> str:
        return self.value


class MetadataKey(str, Enum):
    """Well-known metadata slots used by the registration layer."""

    REGISTRATION = "strata:registration"
    RETURN_TYPE = "design:returntype"

    def __str__(self) -> str:
        return self.value
