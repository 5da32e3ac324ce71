from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from miraveja_ioc.domain.enums import Isolation, Propagation, Scope


class RuntimeReference(BaseModel):
    """Marker for a value that refers to another component by name.

    References are resolved lazily against the container at construction time,
    never at registration time, so forward references are allowed.

    Attributes:
        name: Name of the referenced component.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Name of the referenced component.")


def ref(name: str) -> RuntimeReference:
    """Shorthand for ``RuntimeReference(name=name)``."""
    return RuntimeReference(name=name)


class ComponentDescriptor(BaseModel):
    """Value object describing how a component is built.

    Descriptors are immutable: ``properties`` and ``setters`` are read-only
    copies of the mappings they were created with.

    Attributes:
        component_type: Class to build, or a dotted import path resolved at resolution time.
        scope: Singleton or transient.
        constructor_args: Ordered literals or references passed to the constructor.
        properties: Property values (literals or references) applied through setters.
        factory: Explicit constructor function, used instead of discovered constructors.
        setters: Explicit property bindings ``(instance, value) -> None``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    component_type: Union[Type, str] = Field(..., description="The component class or its import path.")
    scope: Scope = Field(default=Scope.SINGLETON, description="The scope of the component.")
    constructor_args: Tuple[Any, ...] = Field(
        default=(),
        description="Constructor arguments, each a literal or a RuntimeReference.",
    )
    properties: Mapping[str, Any] = Field(
        default_factory=dict,
        validate_default=True,
        description="Property name to literal or RuntimeReference.",
    )
    factory: Optional[Callable[..., Any]] = Field(
        default=None,
        description="Explicit constructor function replacing constructor discovery.",
    )
    setters: Mapping[str, Callable[[Any, Any], None]] = Field(
        default_factory=dict,
        validate_default=True,
        description="Explicit property bindings taking precedence over setter lookup.",
    )

    @field_validator("properties", "setters", mode="after")
    @classmethod
    def freeze_mapping(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        """Store a read-only copy so the registered recipe cannot change afterwards."""
        return MappingProxyType(dict(value))

    @property
    def is_singleton(self) -> bool:
        return self.scope == Scope.SINGLETON


class TransactionDefinition(BaseModel):
    """Requested characteristics of a unit of work.

    Only ``isolation`` is honoured against the underlying resource; the other
    attributes are carried for callers and interceptors.
    """

    model_config = ConfigDict(frozen=True)

    propagation: Propagation = Field(default=Propagation.REQUIRED, description="Propagation behaviour.")
    isolation: Isolation = Field(default=Isolation.DEFAULT, description="Isolation level.")
    timeout: int = Field(default=-1, description="Timeout in seconds, -1 for the resource default.")
    read_only: bool = Field(default=False, description="Whether the transaction is read-only.")


class UnitOfWork(BaseModel):
    """A resource-scoped transaction boundary.

    Attributes:
        connection: The underlying resource handle.
        transaction: The resource's transaction object.
        is_new_transaction: True when this unit of work opened the transaction.
        rollback_only: Set when the unit of work must be rolled back.
        completed: Set once commit or rollback has been called.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    connection: Any = Field(..., description="The underlying resource handle.")
    transaction: Any = Field(default=None, description="The resource's transaction object.")
    is_new_transaction: bool = Field(default=True, description="Whether this unit of work began the transaction.")
    rollback_only: bool = Field(default=False, description="Whether the unit of work must be rolled back.")
    completed: bool = Field(default=False, description="Whether commit or rollback has been called.")

    def set_rollback_only(self) -> None:
        """Mark the unit of work so that it is rolled back instead of committed."""
        self.rollback_only = True
