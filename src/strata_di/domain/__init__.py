"""
Domain layer - Core models, contracts and errors.

This layer contains the fundamental rules and models for dependency injection.
It has no dependencies on other layers.
"""

from .enums import MetadataKey, ResolverStrategy
from .exceptions import (
    DIException,
    InterfaceMismatchError,
    LifetimeError,
    MetadataError,
    RegistrationError,
    UnresolvableError,
)
from .interfaces import IContainer, IInvoker, ILifetimeManager, IMetadataStore, IRegistration
from .models import ContainerConfiguration, Resolver

__all__ = [
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
    # Interfaces
    "IContainer",
    "IRegistration",
    "IMetadataStore",
    "IInvoker",
    "ILifetimeManager",
    # Models
    "Resolver",
    "ContainerConfiguration",
]
