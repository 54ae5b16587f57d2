"""
Domain layer - Core rules and models.

This layer contains the fundamental value objects, markers and interfaces for
dependency resolution. It has no dependencies on other layers.
"""

from .enums import Lifecycle
from .exceptions import (
    AccessError,
    CircularDependencyError,
    CloneError,
    ConstructionError,
    DIException,
    InvocationError,
    MethodNotFoundError,
)
from .interfaces import IIntrospector, IRegistry
from .markers import Inject, constructor, inject
from .models import ConstructorCandidate, FieldSpec, MethodSpec, ParameterSpec

__all__ = [
    # Enums
    "Lifecycle",
    # Exceptions
    "DIException",
    "ConstructionError",
    "CircularDependencyError",
    "AccessError",
    "InvocationError",
    "MethodNotFoundError",
    "CloneError",
    # Interfaces
    "IIntrospector",
    "IRegistry",
    # Markers
    "Inject",
    "inject",
    "constructor",
    # Models
    "ConstructorCandidate",
    "ParameterSpec",
    "FieldSpec",
    "MethodSpec",
]
