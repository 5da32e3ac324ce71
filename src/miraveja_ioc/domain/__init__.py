"""
Domain layer - Core models, contracts and errors.

This layer contains the descriptors, markers and interfaces of the component runtime.
It has no dependencies on other layers.
"""

from .enums import Isolation, Propagation, Scope
from .exceptions import (
    ComponentCreationError,
    CyclicDependencyError,
    IoCException,
    NoCapabilitiesToProxyError,
    NoCompatibleConstructorError,
    NoImplementationFoundError,
    PropertyInjectionError,
    TransactionError,
    UnknownComponentError,
)
from .interfaces import (
    IContainer,
    IInstantiator,
    ILifetimeManager,
    IMethodInterceptor,
    IMethodInvocation,
    IPostProcessor,
    ITransactionManager,
)
from .markers import Inject, constructor
from .models import ComponentDescriptor, RuntimeReference, TransactionDefinition, UnitOfWork, ref

__all__ = [
    # Enums
    "Scope",
    "Propagation",
    "Isolation",
    # Exceptions
    "IoCException",
    "UnknownComponentError",
    "CyclicDependencyError",
    "NoImplementationFoundError",
    "NoCompatibleConstructorError",
    "PropertyInjectionError",
    "ComponentCreationError",
    "NoCapabilitiesToProxyError",
    "TransactionError",
    # Interfaces
    "IContainer",
    "IInstantiator",
    "ILifetimeManager",
    "IPostProcessor",
    "IMethodInvocation",
    "IMethodInterceptor",
    "ITransactionManager",
    # Markers
    "Inject",
    "constructor",
    # Models
    "ComponentDescriptor",
    "RuntimeReference",
    "TransactionDefinition",
    "UnitOfWork",
    "ref",
]
