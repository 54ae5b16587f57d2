from typing import Any, Callable, List, Type

from pydantic import BaseModel, ConfigDict, Field


class ParameterSpec(BaseModel):
    """Value object describing one injectable parameter of a callable.

    Attributes:
        name: The parameter name.
        annotation: The declared type, or ``inspect.Parameter.empty`` when missing.
        positional_only: Whether the parameter must be passed positionally.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="The parameter name.")
    annotation: Any = Field(..., description="The declared type of the parameter.")
    positional_only: bool = Field(default=False, description="Whether the parameter is positional-only.")


class ConstructorCandidate(BaseModel):
    """Value object representing one public way of building a type.

    Attributes:
        factory: Callable that returns a new instance when invoked.
        parameters: Injectable parameters in declared order.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    factory: Callable[..., Any] = Field(..., description="The callable producing the instance.")
    parameters: List[ParameterSpec] = Field(default_factory=list, description="Parameters in declared order.")

    @property
    def parameter_types(self) -> List[Any]:
        return [parameter.annotation for parameter in self.parameters]


class FieldSpec(BaseModel):
    """A class-level attribute that may receive an injected value.

    Attributes:
        name: Attribute name as stored on the instance (mangled for private names).
        annotation: The declared type with any ``Annotated`` wrapper removed.
        marked: Whether the attribute carries the ``Inject`` marker.
        owner: The class declaring the attribute.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    annotation: Any
    marked: bool = False
    owner: Type


class MethodSpec(BaseModel):
    """A plain function declared on a class, looked up through its MRO.

    Attributes:
        name: Attribute name of the method.
        function: The underlying (unbound) function.
        owner: The class declaring the method.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    function: Callable[..., Any]
    owner: Type
