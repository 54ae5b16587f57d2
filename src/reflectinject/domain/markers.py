"""Declarative markers telling a registry which members to inject."""

from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

INJECT_ATTRIBUTE = "__reflectinject_inject__"
CONSTRUCTOR_ATTRIBUTE = "__reflectinject_constructor__"


class Inject:
    """Field marker, used as ``Annotated`` metadata.

    Example:
        >>> class UserService:
        ...     repository: Annotated[UserRepository, Inject]
    """

    def __repr__(self) -> str:
        return "Inject"


def is_inject_marker(value: Any) -> bool:
    """Return True if an ``Annotated`` metadata entry is the inject marker."""
    return value is Inject or isinstance(value, Inject)


def inject(method: F) -> F:
    """Mark a method as injectable.

    Marked setters (``set_*`` methods) are called automatically after
    construction when setter injection is enabled.

    Example:
        >>> class UserService:
        ...     @inject
        ...     def set_repository(self, repository: UserRepository) -> None:
        ...         self.repository = repository
    """
    setattr(method, INJECT_ATTRIBUTE, True)
    return method


def constructor(function: Callable[..., Any]) -> classmethod:
    """Declare an alternative constructor.

    The function is turned into a classmethod. Alternative constructors are
    tried after ``__init__``, in definition order, when ``__init__`` needs a
    parameter the registry cannot supply.

    Example:
        >>> class Connection:
        ...     def __init__(self, url: Url) -> None: ...
        ...
        ...     @constructor
        ...     def from_settings(cls, settings: Settings) -> "Connection": ...
    """
    setattr(function, CONSTRUCTOR_ATTRIBUTE, True)
    return classmethod(function)


def is_marked_constructor(attribute: Any) -> bool:
    return isinstance(attribute, classmethod) and getattr(attribute.__func__, CONSTRUCTOR_ATTRIBUTE, False)
