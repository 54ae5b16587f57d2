"""
Testing utilities module.

Provides helpers for testing applications wired with reflectinject.
"""

from .utilities import MockScope, TestRegistry, create_mock_registry

__all__ = [
    "TestRegistry",
    "create_mock_registry",
    "MockScope",
]
