"""
reflectinject: Reflection-based dependency registry with constructor, field and setter injection.

Public API exports for the reflectinject package.
"""

# Application exports
from reflectinject.application.introspector import ReflectionIntrospector
from reflectinject.application.registry import Binding, Registry

# Domain exports
from reflectinject.domain.enums import Lifecycle
from reflectinject.domain.exceptions import (
    AccessError,
    CircularDependencyError,
    CloneError,
    ConstructionError,
    DIException,
    InvocationError,
    MethodNotFoundError,
)
from reflectinject.domain.interfaces import IIntrospector, IRegistry
from reflectinject.domain.markers import Inject, constructor, inject

__version__ = "0.1.0"

__all__ = [
    # Registry
    "Registry",
    "Binding",
    "ReflectionIntrospector",
    # Enums
    "Lifecycle",
    # Markers
    "Inject",
    "inject",
    "constructor",
    # Interfaces
    "IIntrospector",
    "IRegistry",
    # Exceptions
    "DIException",
    "ConstructionError",
    "CircularDependencyError",
    "AccessError",
    "InvocationError",
    "MethodNotFoundError",
    "CloneError",
]
