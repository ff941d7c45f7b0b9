"""
FastAPI integration module.

Provides helpers and utilities for integrating strata-di with FastAPI.
"""

from .integration import (
    ChildContainerMiddleware,
    create_child_dependency,
    create_fastapi_dependency,
    inject_dependencies,
)

__all__ = [
    "create_fastapi_dependency",
    "create_child_dependency",
    "inject_dependencies",
    "ChildContainerMiddleware",
]
