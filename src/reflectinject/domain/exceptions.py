from typing import Any, List, Optional, Type


def _name_of(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)


class DIException(Exception):
    """Base exception for DI-related errors."""


class ConstructionError(DIException):
    """Raised when an instance of a type cannot be built.

    This occurs when:
    - No constructor has only eligible parameters.
    - The type is abstract and cannot be default constructed.
    - The requested target is not a class.

    Attributes:
        cls: The type that could not be constructed.
        reason: Optional reason for the failure.
    """

    def __init__(self, cls: Any, reason: Optional[str] = None) -> None:
        self.cls = cls
        self.reason = reason
        message = f"Cannot construct an instance of type: {_name_of(cls)}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class CircularDependencyError(ConstructionError):
    """Raised when a type re-enters its own resolution.

    Attributes:
        dependency_chain: List of types involved in the circular dependency.
    """

    def __init__(self, dependency_chain: List[Type]) -> None:
        self.dependency_chain = dependency_chain
        chain = " -> ".join(_name_of(cls) for cls in dependency_chain)
        super().__init__(dependency_chain[-1], f"Circular dependency detected: {chain}")


class AccessError(DIException):
    """Raised when a member cannot be read, bound or assigned.

    Attributes:
        member: Name of the member that was not accessible.
        reason: Optional reason for the failure.
    """

    def __init__(self, member: str, reason: Optional[str] = None) -> None:
        self.member = member
        self.reason = reason
        message = f"Member '{member}' is not accessible"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class InvocationError(DIException):
    """Raised when an invoked constructor or method itself fails.

    The original exception is available as ``__cause__``.

    Attributes:
        target: The callable that raised.
        reason: Optional reason for the failure.
    """

    def __init__(self, target: Any, reason: Optional[str] = None) -> None:
        self.target = target
        self.reason = reason
        message = f"Invocation of {_name_of(target)} failed"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MethodNotFoundError(DIException):
    """Raised when no eligible method with a given name exists.

    Attributes:
        owner: The type that was searched.
        method_name: The requested method name.
    """

    def __init__(self, owner: Type, method_name: str) -> None:
        self.owner = owner
        self.method_name = method_name
        super().__init__(f"No injectable method named '{method_name}' on {_name_of(owner)}")


class CloneError(DIException):
    """Raised when a registry cannot be duplicated."""
