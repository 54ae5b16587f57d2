from typing import Any, Iterable, Optional, Type, TypeVar

from reflectinject.application import Binding, Registry
from reflectinject.domain import Lifecycle

T = TypeVar("T")


class TestRegistry(Registry):
    """Registry for tests with dependency override capabilities.

    Starts from a copy of a parent registry (bindings, namespaces and toggles)
    and lets a test replace selected dependencies. The parent is never
    modified.

    Attributes:
        _parent_registry: The registry the bindings were copied from.

    Example:
        >>> def test_user_service():
        ...     with TestRegistry(registry) as test_registry:
        ...         mock_email = MockEmailService()
        ...         test_registry.mock_singleton(EmailService, mock_email)
        ...
        ...         service = test_registry.resolve(UserService)
        ...         assert service.email is mock_email
    """

    __test__ = False  # Tell pytest not to collect this class as a test

    def __init__(self, parent_registry: Optional[Registry] = None, namespaces: Iterable[str] = ()) -> None:
        """Initialize the test registry.

        Args:
            parent_registry: Optional registry to inherit from.
            namespaces: Extra module prefixes, added to the parent's.
        """
        if parent_registry is None:
            super().__init__(namespaces)
        else:
            super().__init__(
                set(parent_registry.namespaces) | set(namespaces),
                inject_properties=parent_registry.inject_properties,
                inject_setters=parent_registry.inject_setters,
                introspector=parent_registry.introspector,
            )
            self._bindings = parent_registry.get_bindings_copy()
        self._parent_registry = parent_registry

    def mock_singleton(self, dependency_type: Type[T], mock_instance: T) -> None:
        """Replace a dependency with a fixed instance.

        Example:
            >>> test_registry.mock_singleton(DatabaseConnection, mock_db)
            >>> assert test_registry.resolve(DatabaseConnection) is mock_db
        """
        self.add_mapping(dependency_type, Binding.from_instance(mock_instance))

    def mock_transient(self, dependency_type: Type[T], implementation: Type[T]) -> None:
        """Replace a dependency with another class, built fresh on each resolution.

        Example:
            >>> test_registry.mock_transient(RequestHandler, FakeRequestHandler)
            >>> assert isinstance(test_registry.resolve(RequestHandler), FakeRequestHandler)
        """
        self.add_mapping(dependency_type, Binding(target_type=implementation, lifecycle=Lifecycle.TRANSIENT))

    def reset_overrides(self) -> None:
        """Remove all overrides and restore the parent's bindings."""
        if self._parent_registry is not None:
            bindings = self._parent_registry.get_bindings_copy()
        else:
            bindings = {}
        with self._lock:
            self._bindings = bindings

    def __enter__(self) -> "TestRegistry":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        """Context manager exit - automatically clean up overrides."""
        self.reset_overrides()
        return False


def create_mock_registry(*instances: Any, namespaces: Iterable[str] = ()) -> TestRegistry:
    """Create a test registry with pre-bound singleton instances.

    Each instance is keyed by its runtime type.

    Example:
        >>> test_registry = create_mock_registry(FakeDatabase(), FakeCache(), namespaces=["myapp"])
        >>> service = test_registry.resolve(UserService)
    """
    registry = TestRegistry(namespaces=namespaces)

    for instance in instances:
        registry.mock_singleton(type(instance), instance)

    return registry


class MockScope:
    """Context manager yielding a scoped copy of a registry with extra instances bound.

    Example:
        >>> with MockScope(registry, fake_request) as scoped:
        ...     handler = scoped.resolve(RequestHandler)
        ...     assert handler.request is fake_request
        ...
        ... # registry is unchanged here
    """

    def __init__(self, parent_registry: Registry, *extras: Any) -> None:
        self._parent_registry = parent_registry
        self._extras = extras
        self._scoped_registry: Optional[Registry] = None

    def __enter__(self) -> Registry:
        self._scoped_registry = self._parent_registry.copy()
        for extra in self._extras:
            self._scoped_registry.add_mapping(extra)
        return self._scoped_registry

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self._scoped_registry = None
        return False
