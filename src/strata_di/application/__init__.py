"""
Application layer - Registration strategies and container orchestration.

This layer contains the strategies, decorators and container built on the domain models.
It depends only on the Domain layer.
"""

from .container import DIContainer
from .decorators import registration, singleton, transient
from .invoker import DependencyInvoker
from .lifetime_manager import LifetimeManager
from .metadata import MetadataStore, metadata
from .registrations import Registration, SingletonRegistration, TransientRegistration

__all__ = [
    "DIContainer",
    "DependencyInvoker",
    "LifetimeManager",
    "MetadataStore",
    "metadata",
    "Registration",
    "TransientRegistration",
    "SingletonRegistration",
    "registration",
    "transient",
    "singleton",
]
