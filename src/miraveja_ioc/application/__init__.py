"""
Application layer - Use cases and orchestration.

This layer contains the container, the proxy engine and the interceptors.
It depends only on the Domain layer.
"""

from .container import ComponentContainer
from .instantiator import ConstructorInstantiator
from .interceptors import LoggingInterceptor, TransactionInterceptor, current_unit_of_work
from .invocation import MethodInvocation
from .lifetime_manager import LifetimeManager
from .post_processors import InjectionPostProcessor, InterceptionPostProcessor
from .property_applier import PropertyApplier
from .proxy_factory import ProxyFactory, capabilities_of, create_proxy, is_proxy, unwrap
from .resolution_stack import ResolutionStack

__all__ = [
    "ComponentContainer",
    "ConstructorInstantiator",
    "PropertyApplier",
    "LifetimeManager",
    "ResolutionStack",
    "InjectionPostProcessor",
    "InterceptionPostProcessor",
    "ProxyFactory",
    "MethodInvocation",
    "LoggingInterceptor",
    "TransactionInterceptor",
    "current_unit_of_work",
    "capabilities_of",
    "create_proxy",
    "is_proxy",
    "unwrap",
]
