import inspect
import logging
import sys
from typing import (
    Annotated,
    Any,
    Callable,
    ClassVar,
    Dict,
    List,
    Optional,
    Sequence,
    Type,
    TypeVar,
    get_args,
    get_origin,
    get_type_hints,
)

from reflectinject.domain import (
    AccessError,
    ConstructionError,
    ConstructorCandidate,
    FieldSpec,
    IIntrospector,
    InvocationError,
    MethodSpec,
    ParameterSpec,
)
from reflectinject.domain.markers import INJECT_ATTRIBUTE, is_inject_marker, is_marked_constructor

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Python stand-ins for the fixed-width scalars: int covers byte/short/int/long,
# float covers float/double, str covers char. bytes is the byte array.
PRIMITIVE_TYPES = frozenset({bool, int, float, str, bytes})
# Ordered sequences only; sets are collections, not arrays.
ARRAY_ORIGINS = frozenset({list, tuple})
UNNAMED_NAMESPACES = frozenset({"__main__"})


def _strip_annotated(annotation: Any) -> Any:
    if get_origin(annotation) is Annotated:
        return get_args(annotation)[0]
    return annotation


def _evaluate_hint(holder: Any, name: str, annotation: Any, globalns: Dict[str, Any], localns: Any = None) -> Any:
    """Evaluate a single annotation, returning it unchanged when it cannot be evaluated.

    Each member is evaluated on its own so that one unresolvable hint (a
    ``TYPE_CHECKING``-only import, a typo) only affects that member.
    """
    try:
        return get_type_hints(holder, globalns, localns, include_extras=True)[name]
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s type hint", exc.name, name)
    except (SyntaxError, TypeError) as exc:
        logger.warning("Invalid type hint %r for %s: %s", annotation, name, exc)
    return annotation


def _field_hint(owner: Type, name: str, annotation: Any) -> Any:
    holder = type("FieldHint", (), {"__annotations__": {name: annotation}, "__module__": owner.__module__})
    module_globals = getattr(sys.modules.get(owner.__module__), "__dict__", {})
    # Module globals shadow class attributes, as get_type_hints does for the owner.
    return _evaluate_hint(holder, name, annotation, dict(vars(owner)), module_globals)


def _parameter_hint(function: Callable[..., Any], name: str, annotation: Any) -> Any:
    if annotation is inspect.Parameter.empty:
        return annotation

    def holder():
        pass

    holder.__annotations__ = {name: annotation}
    target = getattr(function, "__func__", function)
    try:
        target = inspect.unwrap(target)
    except ValueError:
        pass
    return _evaluate_hint(holder, name, annotation, getattr(target, "__globals__", {}))


class ReflectionIntrospector(IIntrospector):
    """Introspects classes using Python's inspect module and type hints.

    Conventions:
    - The namespace of a class is its ``__module__``; classes from ``__main__``
      have no namespace.
    - Public constructors are ``__init__`` (unless inherited from ``object``)
      followed by ``@constructor`` classmethods, in MRO then definition order.
    - Parameters named ``self``/``cls``, variadic parameters and parameters
      with default values are never injected.
    - Fields are class annotations; ``Annotated[T, Inject]`` marks them.
    - Members declared on the class itself are listed whatever their name;
      inherited members only when public (no leading underscore).
    """

    def namespace_of(self, target: Any) -> Optional[str]:
        target = _strip_annotated(target)
        if target is inspect.Parameter.empty or get_origin(target) is not None or not inspect.isclass(target):
            return None
        module = getattr(target, "__module__", None)
        if not module or module in UNNAMED_NAMESPACES:
            return None
        return module

    def is_primitive(self, target: Any) -> bool:
        target = _strip_annotated(target)
        if target in PRIMITIVE_TYPES:
            return True
        if get_origin(target) in ARRAY_ORIGINS:
            arguments = [argument for argument in get_args(target) if argument is not Ellipsis]
            return len(arguments) == 1 and arguments[0] in PRIMITIVE_TYPES
        return False

    def constructors(self, cls: Any) -> List[ConstructorCandidate]:
        if not inspect.isclass(cls) or get_origin(cls) is not None:
            raise ConstructionError(cls, "Target is not a class.")

        candidates: List[ConstructorCandidate] = []
        if cls.__init__ is not object.__init__:
            parameters = self._readable_parameters(cls.__init__)
            if parameters is not None:
                candidates.append(ConstructorCandidate(factory=cls, parameters=parameters))

        seen = set()
        for klass in cls.__mro__:
            for name, attribute in vars(klass).items():
                if name in seen:
                    continue
                seen.add(name)
                if name.startswith("_") or not is_marked_constructor(attribute):
                    continue
                factory = getattr(cls, name)
                parameters = self._readable_parameters(factory)
                if parameters is not None:
                    candidates.append(ConstructorCandidate(factory=factory, parameters=parameters))
        return candidates

    def instantiate(self, cls: Type[T]) -> T:
        if inspect.isabstract(cls):
            raise ConstructionError(cls, "Abstract classes cannot be instantiated.")
        if getattr(cls, "_is_protocol", False):
            raise ConstructionError(cls, "Protocols cannot be instantiated.")
        try:
            return cls()
        except Exception as e:
            raise InvocationError(cls, str(e)) from e

    def fields(self, cls: Type) -> List[FieldSpec]:
        result: List[FieldSpec] = []
        seen = set()
        for klass in cls.__mro__:
            if klass is object:
                continue
            try:
                annotations = inspect.get_annotations(klass)
            except NameError as exc:
                logger.warning("'%s' name error retrieving %s annotations", exc.name, klass.__qualname__)
                continue
            for name, annotation in annotations.items():
                if name in seen:
                    continue
                seen.add(name)
                if klass is not cls and name.startswith("_"):
                    continue
                annotation = _field_hint(klass, name, annotation)
                if get_origin(annotation) is ClassVar:
                    continue
                marked = get_origin(annotation) is Annotated and any(
                    is_inject_marker(metadata) for metadata in annotation.__metadata__
                )
                result.append(
                    FieldSpec(name=name, annotation=_strip_annotated(annotation), marked=marked, owner=klass)
                )
        return result

    def methods(self, cls: Type) -> List[MethodSpec]:
        result: List[MethodSpec] = []
        seen = set()
        for klass in cls.__mro__:
            if klass is object:
                continue
            for name, attribute in vars(klass).items():
                if name in seen:
                    continue
                seen.add(name)
                if klass is not cls and name.startswith("_"):
                    continue
                if inspect.isfunction(attribute):
                    result.append(MethodSpec(name=name, function=attribute, owner=klass))
        return result

    def parameters(self, function: Callable[..., Any]) -> List[ParameterSpec]:
        return self._readable_parameters(function) or []

    def is_marked(self, member: Any) -> bool:
        return bool(getattr(member, INJECT_ATTRIBUTE, False))

    def assign(self, instance: Any, name: str, value: Any) -> None:
        try:
            setattr(instance, name, value)
        except (AttributeError, TypeError, ValueError) as e:
            raise AccessError(name, str(e)) from e

    def call(self, function: Callable[..., Any], parameters: Sequence[ParameterSpec], values: Sequence[Any]) -> Any:
        args = []
        kwargs = {}
        for parameter, value in zip(parameters, values):
            if parameter.positional_only:
                args.append(value)
            else:
                kwargs[parameter.name] = value
        try:
            return function(*args, **kwargs)
        except Exception as e:
            raise InvocationError(function, str(e)) from e

    def bind(self, instance: Any, method: Callable[..., Any]) -> Callable[..., Any]:
        # Already bound methods are used as given.
        if inspect.ismethod(method):
            return method
        try:
            return method.__get__(instance, type(instance))
        except (AttributeError, TypeError) as e:
            name = getattr(method, "__name__", repr(method))
            raise AccessError(name, f"Cannot bind to {type(instance).__qualname__}: {e}") from e

    def _readable_parameters(self, function: Callable[..., Any]) -> Optional[List[ParameterSpec]]:
        """Describe the injectable parameters of a callable.

        Args:
            function: Function, bound method or class whose signature is read.

        Returns:
            Parameters in declared order, or None if the signature cannot be read
            (some builtins do not expose one).
        """
        try:
            signature = inspect.signature(function)
        except (TypeError, ValueError):
            return None
        except NameError as exc:
            # Deferred annotations are evaluated by signature() on newer interpreters
            logger.warning("'%s' name error reading the signature of %r", exc.name, function)
            return None

        parameters = []
        for name, parameter in signature.parameters.items():
            # Skip 'self' and 'cls' parameters
            if name in ("self", "cls"):
                continue

            # Skip *args and **kwargs parameters (VAR_POSITIONAL and VAR_KEYWORD)
            if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            # Skip parameters with defaults (let them use default values)
            if parameter.default is not inspect.Parameter.empty:
                continue

            parameters.append(
                ParameterSpec(
                    name=name,
                    annotation=_strip_annotated(_parameter_hint(function, name, parameter.annotation)),
                    positional_only=parameter.kind is inspect.Parameter.POSITIONAL_ONLY,
                )
            )
        return parameters
