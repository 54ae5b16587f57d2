import copy
import logging
import threading
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from reflectinject.application.circular_detector import CircularDependencyDetector
from reflectinject.application.introspector import ReflectionIntrospector
from reflectinject.domain import (
    AccessError,
    CircularDependencyError,
    CloneError,
    ConstructionError,
    ConstructorCandidate,
    IIntrospector,
    InvocationError,
    IRegistry,
    Lifecycle,
    MethodNotFoundError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SETTER_PREFIX = "set_"


def _display_name(target: Any) -> str:
    return getattr(target, "__qualname__", None) or repr(target)


def _is_setter_name(name: str, owner: Type) -> bool:
    mangling_prefix = f"_{owner.__name__.lstrip('_')}__"
    if name.startswith(mangling_prefix):
        name = name[len(mangling_prefix) :]
    return name.lstrip("_").startswith(SETTER_PREFIX)


class Binding(BaseModel):
    """Resolution rule for a single type.

    A singleton binding caches the first instance it builds; a transient one
    builds a new instance on every resolution.

    The singleton cache is not synchronised. Two threads resolving the same
    unbuilt singleton at once may both construct an instance; the last write
    wins and the other instance is dropped. Callers that need strict single
    construction under concurrent first use must lock around the first
    resolution themselves.

    Attributes:
        target_type: The class that is constructed.
        lifecycle: SINGLETON or TRANSIENT.
        cached_instance: The singleton instance once built.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    target_type: Any = Field(..., description="The class to construct when resolving.")
    lifecycle: Lifecycle = Field(default=Lifecycle.TRANSIENT, description="The lifecycle of produced instances.")
    cached_instance: Optional[Any] = Field(
        default=None,
        description="Cached instance for the Singleton lifecycle.",
    )

    @model_validator(mode="after")
    def validate_cached_instance(self) -> "Binding":
        if self.cached_instance is not None and self.lifecycle is not Lifecycle.SINGLETON:
            raise ValueError("Only singleton bindings can hold a cached instance.")
        return self

    @classmethod
    def from_instance(cls, instance: Any) -> "Binding":
        """Create a singleton binding pre-filled with ``instance``.

        Example:
            >>> binding = Binding.from_instance(settings)
            >>> binding.resolve(registry) is settings
            True
        """
        return cls(target_type=type(instance), lifecycle=Lifecycle.SINGLETON, cached_instance=instance)

    @staticmethod
    def is_constructible(target_type: Any, registry: "Registry") -> bool:
        """Check if a type has at least one constructor the registry can feed.

        A type without any public constructor is constructible through its
        default construction path.

        Args:
            target_type: The class to check.
            registry: The registry deciding parameter eligibility.

        Returns:
            True if an instance could be constructed.
        """
        try:
            candidates = registry.introspector.constructors(target_type)
        except ConstructionError:
            return False
        if not candidates:
            return True
        return any(Binding.is_constructor_eligible(candidate, registry) for candidate in candidates)

    @staticmethod
    def is_constructor_eligible(candidate: ConstructorCandidate, registry: "Registry") -> bool:
        """Check that every parameter of a constructor is eligible."""
        return all(registry.is_eligible(parameter_type) for parameter_type in candidate.parameter_types)

    def is_instantiable(self, registry: "Registry") -> bool:
        return Binding.is_constructible(self.target_type, registry)

    def resolve(self, registry: "Registry") -> Any:
        """Return an instance according to the lifecycle.

        Raises:
            ConstructionError: If no usable constructor exists.
            AccessError: If construction needed an inaccessible member.
            InvocationError: If the constructor itself raised.
        """
        if self.lifecycle is Lifecycle.SINGLETON:
            if self.cached_instance is None:
                self.cached_instance = self.construct(registry)
            return self.cached_instance
        return self.construct(registry)

    def construct(self, registry: "Registry") -> Any:
        """Build a new instance of the target type and inject its members.

        Constructors are tried in the order the introspector lists them and the
        first one whose parameters are all eligible is used. That order is the
        only tie-break between several usable constructors.

        Args:
            registry: The registry resolving constructor parameters and members.

        Returns:
            The new instance.

        Raises:
            ConstructionError: If no constructor qualifies or the type is abstract.
            InvocationError: If the chosen constructor raised.
        """
        introspector = registry.introspector
        candidates = introspector.constructors(self.target_type)

        if not candidates:
            instance = introspector.instantiate(self.target_type)
        else:
            for candidate in candidates:
                if self.is_constructor_eligible(candidate, registry):
                    instance = self._run_constructor(candidate, registry)
                    break
            else:
                raise ConstructionError(self.target_type, "No constructor has only eligible parameters.")

        if registry.inject_properties:
            registry.inject_into_properties(instance)
        if registry.inject_setters:
            registry.inject_into_setters(instance)
        return instance

    def _run_constructor(self, candidate: ConstructorCandidate, registry: "Registry") -> Any:
        values = [registry.resolve(parameter.annotation) for parameter in candidate.parameters]
        return registry.introspector.call(candidate.factory, candidate.parameters, values)

    def duplicate(self) -> "Binding":
        """Shallow copy; a singleton copy shares the cached instance reference."""
        return self.model_copy()


class Registry(IRegistry):
    """Dependency registry and resolution entry point.

    Holds explicit bindings and the module prefixes whose classes may be
    resolved implicitly. Unbound but eligible classes are auto-wired through
    their constructors, then their marked fields and setters are injected.

    Resolution never raises: failures are logged and None is returned.
    Explicit method invocation propagates errors instead.

    Attributes:
        _bindings: Mapping of key types to their bindings.
        _namespaces: Module prefixes eligible for implicit resolution.
        _inject_properties: Whether marked fields are injected after construction.
        _inject_setters: Whether marked setters are called after construction.
        _introspector: Reflection backend.
        _lock: Serialises writes to bindings and namespaces and copy snapshots.
    """

    def __init__(
        self,
        namespaces: Union[str, Iterable[str]],
        *,
        inject_properties: bool = True,
        inject_setters: bool = True,
        introspector: Optional[IIntrospector] = None,
    ) -> None:
        """Initialize the registry.

        Args:
            namespaces: One module prefix or an iterable of prefixes.
            inject_properties: Inject marked fields after construction.
            inject_setters: Call marked setters after construction.
            introspector: Reflection backend, ReflectionIntrospector by default.

        Example:
            >>> registry = Registry("myapp")
            >>> registry = Registry({"myapp.services", "myapp.storage"})
        """
        self._bindings: Dict[Any, Binding] = {}
        self._namespaces = {namespaces} if isinstance(namespaces, str) else set(namespaces)
        self._inject_properties = inject_properties
        self._inject_setters = inject_setters
        self._introspector: IIntrospector = introspector or ReflectionIntrospector()
        self._lock = threading.RLock()
        self._eligibility_detector = CircularDependencyDetector()
        self._resolution_detector = CircularDependencyDetector()

    @property
    def introspector(self) -> IIntrospector:
        return self._introspector

    @property
    def namespaces(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._namespaces)

    @property
    def inject_properties(self) -> bool:
        """Whether marked fields are injected after construction."""
        return self._inject_properties

    @inject_properties.setter
    def inject_properties(self, value: bool) -> None:
        self._inject_properties = value

    @property
    def inject_setters(self) -> bool:
        """Whether marked setters are called after construction."""
        return self._inject_setters

    @inject_setters.setter
    def inject_setters(self, value: bool) -> None:
        self._inject_setters = value

    def add_mapping(self, target: Any, rule: Union[Lifecycle, str, Binding, None] = None) -> None:
        """Add a binding. A later mapping for the same key replaces the earlier one.

        Args:
            target: The key type, or a pre-built instance when ``rule`` is omitted.
            rule: A lifecycle for ``target``, an explicit binding (possibly for
                another class), or None to bind ``target`` itself as a singleton
                instance keyed by its runtime type.

        Raises:
            TypeError: If ``rule`` is of an unsupported kind.

        Example:
            >>> registry.add_mapping(UserService, Lifecycle.SINGLETON)
            >>> registry.add_mapping(Repository, Binding(target_type=SqlRepository))
            >>> registry.add_mapping(Settings(debug=True))
        """
        if rule is None:
            key, binding = type(target), Binding.from_instance(target)
        elif isinstance(rule, Binding):
            key, binding = target, rule
        elif isinstance(rule, str):
            key, binding = target, Binding(target_type=target, lifecycle=Lifecycle(rule))
        else:
            raise TypeError(f"Unsupported mapping rule for {_display_name(target)}: {rule!r}")

        with self._lock:
            self._bindings[key] = binding

    def register_singletons(self, *types: Type) -> None:
        """Bind every given class to itself with the Singleton lifecycle."""
        for target in types:
            self.add_mapping(target, Lifecycle.SINGLETON)

    def register_transients(self, *types: Type) -> None:
        """Bind every given class to itself with the Transient lifecycle."""
        for target in types:
            self.add_mapping(target, Lifecycle.TRANSIENT)

    def add_working_package(self, package_name: str) -> None:
        """Allow implicit resolution of classes whose module starts with ``package_name``."""
        with self._lock:
            self._namespaces.add(package_name)

    def get_binding(self, target: Any) -> Optional[Binding]:
        return self._bindings.get(target)

    def get_bindings_copy(self) -> Dict[Any, Binding]:
        """Get a copy of the bindings, duplicating each binding.

        Returns:
            New mapping whose singleton bindings share their cached instances.
        """
        with self._lock:
            return {key: binding.duplicate() for key, binding in self._bindings.items()}

    def is_eligible(self, target: Any) -> bool:
        """Check if the registry can and may produce an instance of ``target``.

        Order of the checks:
        - an explicit binding makes any type eligible;
        - primitive scalars and single-dimension primitive arrays are not;
        - types without a namespace or outside every registered prefix are not;
        - otherwise the type must be constructible from eligible parameters.

        A type whose constructors need the type itself is not eligible.
        """
        if target in self._bindings:
            return True

        if self._introspector.is_primitive(target):
            return False

        namespace = self._introspector.namespace_of(target)
        if namespace is None:
            return False

        if not any(namespace.startswith(prefix) for prefix in self.namespaces):
            return False

        try:
            with self._eligibility_detector.track(target):
                return Binding.is_constructible(target, self)
        except CircularDependencyError as e:
            logger.debug("Treating %s as not eligible: %s", _display_name(target), e)
            return False

    def resolve(self, target: Type[T]) -> Optional[T]:
        """Resolve and return an instance of the requested type.

        Uses the explicit binding when one exists, otherwise a throwaway
        transient binding. Construction, access and invocation failures,
        cycles included, are logged and turned into None.

        Args:
            target: The type to resolve.

        Returns:
            The instance, or None if it could not be produced.

        Example:
            >>> user_service = registry.resolve(UserService)
        """
        try:
            with self._resolution_detector.track(target):
                binding = self._bindings.get(target)
                if binding is None:
                    binding = Binding(target_type=target, lifecycle=Lifecycle.TRANSIENT)
                return binding.resolve(self)
        except (ConstructionError, AccessError, InvocationError):
            logger.error("Unable to get an instance of %s", _display_name(target), exc_info=True)
        return None

    def get(self, target: Type[T]) -> Optional[T]:
        """Alias of :meth:`resolve`."""
        return self.resolve(target)

    def resolve_with_extras(self, target: Type[T], *extras: Any) -> Optional[T]:
        """Resolve ``target`` with extra instances available for this call only.

        Each extra is bound as a singleton, keyed by its runtime type, on a copy
        of this registry. The registry itself is never modified. If the copy
        fails the extras are dropped and a plain resolution is attempted.

        Example:
            >>> handler = registry.resolve_with_extras(RequestHandler, request)
        """
        try:
            scoped = self.copy()
        except CloneError:
            logger.warning("Unable to copy the registry, skipping extra instances", exc_info=True)
            return self.resolve(target)

        for extra in extras:
            scoped.add_mapping(extra)
        return scoped.resolve(target)

    def inject_into_properties(self, instance: Any) -> None:
        """Assign resolved values to the marked fields of an existing object.

        Fields that cannot be assigned are logged and skipped.
        """
        for field in self._introspector.fields(type(instance)):
            if not field.marked:
                continue
            try:
                self._introspector.assign(instance, field.name, self.resolve(field.annotation))
            except AccessError:
                logger.warning("Can't inject into property %s", field.name, exc_info=True)

    def inject_into_setters(self, instance: Any) -> None:
        """Call every marked single-parameter ``set_*`` method of an object.

        Setters that cannot be bound or that raise are logged and skipped.
        """
        for method in self._introspector.methods(type(instance)):
            if not _is_setter_name(method.name, method.owner):
                continue
            if len(self._introspector.parameters(method.function)) != 1:
                continue
            if not self.is_method_eligible(method.function):
                continue
            try:
                self.invoke_with_injected_args(instance, method.function)
            except (AccessError, InvocationError):
                logger.warning("Can't inject into setter %s", method.name, exc_info=True)

    def invoke_with_injected_args(self, instance: Any, method: Callable[..., Any]) -> Any:
        """Invoke a method on an object with resolved arguments.

        Args:
            instance: The object the method is invoked on.
            method: A function defined on the object's class, or a bound method.

        Returns:
            The method result.

        Raises:
            AccessError: If the method cannot be bound to ``instance``.
            InvocationError: If the method raised.
        """
        bound = self._introspector.bind(instance, method)
        parameters = self._introspector.parameters(bound)
        values = [self.resolve(parameter.annotation) for parameter in parameters]
        return self._introspector.call(bound, parameters, values)

    def invoke_named_with_injected_args(self, instance: Any, method_name: str) -> Any:
        """Invoke the public method called ``method_name`` with resolved arguments.

        The injection marker is not required, but every parameter must be eligible.

        Raises:
            MethodNotFoundError: If no public method with that name qualifies.
            AccessError: If the method cannot be bound to ``instance``.
            InvocationError: If the method raised.
        """
        for method in self._introspector.methods(type(instance)):
            if method.name != method_name or method.name.startswith("_"):
                continue
            if self.is_method_eligible(method.function, force=True):
                return self.invoke_with_injected_args(instance, method.function)
        raise MethodNotFoundError(type(instance), method_name)

    def is_method_eligible(self, method: Callable[..., Any], force: bool = False) -> bool:
        """Check if a method can be invoked with injected arguments.

        Args:
            method: The method to check.
            force: Skip the injection marker requirement.

        Returns:
            True if the method is marked (or ``force`` is set) and every
            parameter is eligible.
        """
        if not force and not self._introspector.is_marked(method):
            return False
        return all(self.is_eligible(parameter.annotation) for parameter in self._introspector.parameters(method))

    def copy(self) -> "Registry":
        """Duplicate the registry.

        The copy has its own binding map and namespace set; singleton bindings
        share their cached instances with this registry.

        Raises:
            CloneError: If the registry cannot be duplicated.
        """
        try:
            with self._lock:
                clone = copy.copy(self)
                clone._bindings = self.get_bindings_copy()
                clone._namespaces = set(self._namespaces)
            clone._lock = threading.RLock()
            clone._eligibility_detector = CircularDependencyDetector()
            clone._resolution_detector = CircularDependencyDetector()
            return clone
        except Exception as e:
            raise CloneError(f"Unable to copy registry: {e}") from e

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Registry):
            return NotImplemented
        return (
            self._bindings == other._bindings
            and self.namespaces == other.namespaces
            and self._inject_properties == other._inject_properties
            and self._inject_setters == other._inject_setters
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(namespaces={sorted(self.namespaces)!r}, bindings={len(self._bindings)})"
