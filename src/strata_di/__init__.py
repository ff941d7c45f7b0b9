"""
strata-di: Dependency Injection container with declarative registration strategies.

Public API exports for the strata-di package.
"""

# Application exports
from strata_di.application.container import DIContainer
from strata_di.application.decorators import registration, singleton, transient
from strata_di.application.metadata import MetadataStore, metadata
from strata_di.application.registrations import (
    Registration,
    SingletonRegistration,
    TransientRegistration,
)

# Domain exports
from strata_di.domain.enums import MetadataKey, ResolverStrategy
from strata_di.domain.exceptions import (
    DIException,
    InterfaceMismatchError,
    LifetimeError,
    MetadataError,
    RegistrationError,
    UnresolvableError,
)
from strata_di.domain.models import ContainerConfiguration, Resolver

__version__ = "0.1.0"

__all__ = [
    # Container
    "DIContainer",
    "ContainerConfiguration",
    "Resolver",
    # Strategies
    "Registration",
    "TransientRegistration",
    "SingletonRegistration",
    # Decorators
    "registration",
    "transient",
    "singleton",
    # Metadata
    "MetadataStore",
    "metadata",
    # Enums
    "ResolverStrategy",
    "MetadataKey",
    # Exceptions
    "DIException",
    "UnresolvableError",
    "LifetimeError",
    "RegistrationError",
    "InterfaceMismatchError",
    "MetadataError",
]
