from typing import List, Optional, Sequence, Type


class IoCException(Exception):
    """Base exception for container, proxy and transaction errors."""


class UnknownComponentError(IoCException):
    """Raised when no descriptor is registered under the requested name.

    Attributes:
        name: The component name that was requested.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No component named '{name}' is registered")


class CyclicDependencyError(IoCException):
    """Raised when a component (transitively) depends on itself.

    Attributes:
        dependency_chain: Component names involved in the cycle, first name repeated last.
    """

    def __init__(self, dependency_chain: List[str]) -> None:
        self.dependency_chain = dependency_chain
        message = f"Cyclic dependency detected: {' -> '.join(dependency_chain)}"
        super().__init__(message)


class NoImplementationFoundError(IoCException):
    """Raised when an abstract component type has no constructible implementation registered.

    Attributes:
        name: The component name being resolved.
        component_type: The abstract type lacking an implementation.
    """

    def __init__(self, name: str, component_type: Type) -> None:
        self.name = name
        self.component_type = component_type
        super().__init__(
            f"Cannot instantiate abstract type {component_type.__name__} for component '{name}'. "
            "No implementation found."
        )


class NoCompatibleConstructorError(IoCException):
    """Raised when no constructor candidate accepts the resolved arguments.

    Attributes:
        component_type: The type being constructed.
        argument_types: Types of the resolved constructor arguments.
    """

    def __init__(self, component_type: Type, argument_types: Sequence[Type]) -> None:
        self.component_type = component_type
        self.argument_types = list(argument_types)
        names = ", ".join(arg_type.__name__ for arg_type in self.argument_types)
        super().__init__(
            f"No compatible constructor found for {component_type.__name__} "
            f"with provided arguments. Argument types: [{names}]"
        )


class PropertyInjectionError(IoCException):
    """Raised when a declared property cannot be applied.

    This occurs when:
    - No setter exists for the property.
    - The literal value cannot be coerced to the setter's type.
    - The setter itself raises.

    Attributes:
        name: The component name.
        property_name: The property that failed.
        reason: Optional reason for the failure.
    """

    def __init__(self, name: str, property_name: str, reason: Optional[str] = None) -> None:
        self.name = name
        self.property_name = property_name
        self.reason = reason
        message = f"Failed to apply property '{property_name}' on component '{name}'"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class ComponentCreationError(IoCException):
    """Raised when a component cannot be created or post-processed.

    Wraps failures raised by user code (constructors, factories, post-processors)
    and failed marker-driven field injection.

    Attributes:
        name: The component name.
        reason: Optional reason for the failure.
    """

    def __init__(self, name: str, reason: Optional[str] = None) -> None:
        self.name = name
        self.reason = reason
        message = f"Failed to create component '{name}'"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class NoCapabilitiesToProxyError(IoCException):
    """Raised when proxying a target that declares no abstract interfaces.

    Attributes:
        target_type: The type of the target.
    """

    def __init__(self, target_type: Type) -> None:
        self.target_type = target_type
        super().__init__(f"Cannot proxy {target_type.__name__}: it implements no interfaces")


class TransactionError(IoCException):
    """Raised when beginning, committing or rolling back a unit of work fails.

    Attributes:
        operation: One of ``begin``, ``commit`` or ``rollback``.
        reason: Optional reason for the failure.
    """

    def __init__(self, operation: str, reason: Optional[str] = None) -> None:
        self.operation = operation
        self.reason = reason
        message = f"Transaction {operation} failed"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)
