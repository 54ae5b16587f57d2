"""
Application layer - Resolution and injection.

This layer contains the registry, its bindings and the reflection backend.
It depends only on the Domain layer.
"""

from .circular_detector import CircularDependencyDetector
from .introspector import ReflectionIntrospector
from .registry import Binding, Registry

__all__ = [
    "Registry",
    "Binding",
    "ReflectionIntrospector",
    "CircularDependencyDetector",
]
