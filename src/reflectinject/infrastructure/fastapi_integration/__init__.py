"""
FastAPI integration module.

Provides helpers for resolving reflectinject dependencies from FastAPI endpoints.
"""

from .integration import (
    ScopedRegistryMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
    create_scoped_dependency,
)

__all__ = [
    "create_fastapi_dependency",
    "create_request_dependency",
    "create_scoped_dependency",
    "ScopedRegistryMiddleware",
]
