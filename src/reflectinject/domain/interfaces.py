from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Sequence, Type, TypeVar

from reflectinject.domain.models import ConstructorCandidate, FieldSpec, MethodSpec, ParameterSpec

T = TypeVar("T")


class IIntrospector(ABC):
    """Abstract interface for every reflective operation the registry needs.

    The resolution algorithm only talks to the host runtime through this
    interface, so alternative backends (explicit registration tables,
    generated descriptors) can replace runtime reflection.
    """

    @abstractmethod
    def namespace_of(self, target: Any) -> Optional[str]:
        """Return the namespace declaring ``target``, or None if it has none."""

    @abstractmethod
    def is_primitive(self, target: Any) -> bool:
        """Return True for primitive scalars and single-dimension primitive arrays."""

    @abstractmethod
    def constructors(self, cls: Any) -> List[ConstructorCandidate]:
        """List the public constructors of ``cls`` in their natural order.

        Raises:
            ConstructionError: If ``cls`` is not a class.
        """

    @abstractmethod
    def instantiate(self, cls: Type[T]) -> T:
        """Build ``cls`` through its default, argument-less construction path.

        Raises:
            ConstructionError: If ``cls`` cannot be default constructed.
            InvocationError: If construction itself raised.
        """

    @abstractmethod
    def fields(self, cls: Type) -> List[FieldSpec]:
        """List the fields of ``cls`` that are candidates for injection."""

    @abstractmethod
    def methods(self, cls: Type) -> List[MethodSpec]:
        """List the methods of ``cls`` that are candidates for injection."""

    @abstractmethod
    def parameters(self, function: Callable[..., Any]) -> List[ParameterSpec]:
        """List the injectable parameters of ``function`` in declared order."""

    @abstractmethod
    def is_marked(self, member: Any) -> bool:
        """Return True if a method carries the injection marker."""

    @abstractmethod
    def assign(self, instance: Any, name: str, value: Any) -> None:
        """Assign ``value`` to attribute ``name`` of ``instance``.

        Raises:
            AccessError: If the attribute cannot be written.
        """

    @abstractmethod
    def call(self, function: Callable[..., Any], parameters: Sequence[ParameterSpec], values: Sequence[Any]) -> Any:
        """Call ``function`` passing ``values`` for ``parameters``.

        Raises:
            InvocationError: If the call raised.
        """

    @abstractmethod
    def bind(self, instance: Any, method: Callable[..., Any]) -> Callable[..., Any]:
        """Return ``method`` bound to ``instance``.

        Raises:
            AccessError: If the method cannot be bound to the instance.
        """


class IRegistry(ABC):
    """Abstract interface for dependency registry operations."""

    @abstractmethod
    def add_mapping(self, target: Any, rule: Any = None) -> None:
        """Bind a type to a lifecycle or binding, or bind a bare instance as a singleton."""

    @abstractmethod
    def is_eligible(self, target: Any) -> bool:
        """Return True if the registry can and may produce an instance of ``target``."""

    @abstractmethod
    def resolve(self, target: Type[T]) -> Optional[T]:
        """Resolve and return an instance of the requested type, or None.

        Args:
            target: The type to resolve.
        """

    @abstractmethod
    def resolve_with_extras(self, target: Type[T], *extras: Any) -> Optional[T]:
        """Resolve ``target`` with extra instances bound for this call only."""

    @abstractmethod
    def inject_into_properties(self, instance: Any) -> None:
        """Assign resolved values to every marked field of ``instance``."""

    @abstractmethod
    def inject_into_setters(self, instance: Any) -> None:
        """Invoke every marked setter of ``instance`` with resolved values."""

    @abstractmethod
    def invoke_with_injected_args(self, instance: Any, method: Callable[..., Any]) -> Any:
        """Invoke ``method`` on ``instance`` with resolved arguments."""

    @abstractmethod
    def copy(self) -> "IRegistry":
        """Return an independent duplicate of this registry."""
