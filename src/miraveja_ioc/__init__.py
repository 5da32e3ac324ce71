"""
miraveja-ioc: Descriptor-driven component container with interface proxies and transactional interception.

Public API exports for the miraveja-ioc package.
"""

# Application exports
from miraveja_ioc.application.container import ComponentContainer
from miraveja_ioc.application.interceptors import LoggingInterceptor, TransactionInterceptor, current_unit_of_work
from miraveja_ioc.application.post_processors import InjectionPostProcessor, InterceptionPostProcessor
from miraveja_ioc.application.proxy_factory import ProxyFactory, create_proxy, is_proxy, unwrap

# Domain exports
from miraveja_ioc.domain.enums import Isolation, Propagation, Scope
from miraveja_ioc.domain.exceptions import (
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
from miraveja_ioc.domain.interfaces import IMethodInterceptor, IMethodInvocation, IPostProcessor, ITransactionManager
from miraveja_ioc.domain.markers import Inject, constructor
from miraveja_ioc.domain.models import ComponentDescriptor, RuntimeReference, TransactionDefinition, UnitOfWork, ref

__version__ = "0.1.0"

__all__ = [
    # Container
    "ComponentContainer",
    "ComponentDescriptor",
    "RuntimeReference",
    "ref",
    "Inject",
    "constructor",
    # Post-processors
    "IPostProcessor",
    "InjectionPostProcessor",
    "InterceptionPostProcessor",
    # Proxies and interceptors
    "ProxyFactory",
    "create_proxy",
    "is_proxy",
    "unwrap",
    "IMethodInterceptor",
    "IMethodInvocation",
    "LoggingInterceptor",
    "TransactionInterceptor",
    "current_unit_of_work",
    # Transactions
    "ITransactionManager",
    "TransactionDefinition",
    "UnitOfWork",
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
]
