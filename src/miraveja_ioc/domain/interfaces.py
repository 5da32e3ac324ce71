from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple, Type

from miraveja_ioc.domain.models import ComponentDescriptor, TransactionDefinition, UnitOfWork


class IPostProcessor(ABC):
    """Transforms or wraps a freshly constructed component before it reaches the caller."""

    @abstractmethod
    def post_process(self, instance: Any, name: str) -> Any:
        """Return the instance, or a replacement for it.

        Args:
            instance: The constructed (possibly already processed) component.
            name: The component name.
        """


class IContainer(ABC):
    """Abstract interface for component container operations."""

    @abstractmethod
    def register(self, name: str, descriptor: ComponentDescriptor) -> None:
        """Register or replace the descriptor stored under ``name``.

        Args:
            name: The component name.
            descriptor: The recipe used to build the component.
        """

    @abstractmethod
    def resolve(self, name: str) -> Any:
        """Resolve and return the component registered under ``name``.

        Args:
            name: The component name.
        """

    @abstractmethod
    def add_post_processor(self, processor: IPostProcessor) -> None:
        """Append a post-processor to the pipeline."""

    @abstractmethod
    def contains(self, name: str) -> bool:
        """Return whether a descriptor is registered under ``name``."""

    @abstractmethod
    def clear(self) -> None:
        """Clear all registrations and cached instances from the container."""

    @abstractmethod
    def get_registry_copy(self) -> Dict[str, ComponentDescriptor]:
        """Get a copy of the current descriptor registry."""


class IInstantiator(ABC):
    """Abstract interface for building a component from its descriptor."""

    @abstractmethod
    def instantiate(self, name: str, component_type: Type, descriptor: ComponentDescriptor, container: IContainer) -> Any:
        """Resolve constructor arguments and call the first compatible constructor.

        Args:
            name: The component name, for error context.
            component_type: The concrete class to build.
            descriptor: The component descriptor.
            container: Container used to resolve references.

        Raises:
            NoCompatibleConstructorError: If no constructor candidate matches.
        """


class ILifetimeManager(ABC):
    """Abstract interface for managing component scopes."""

    @abstractmethod
    def get_or_create(self, name: str, descriptor: ComponentDescriptor, factory: Callable[[], Any]) -> Any:
        """Get the cached instance or create a new one based on scope.

        Args:
            name: The component name.
            descriptor: The component descriptor carrying the scope.
            factory: A callable creating a fully processed instance.
        """

    @abstractmethod
    def clear_cache(self) -> None:
        """Clear any cached instances managed by this lifetime manager."""


class IMethodInvocation(ABC):
    """A reified call on a proxy: target, method identity and arguments."""

    @property
    @abstractmethod
    def target(self) -> Any:
        """The proxied object."""

    @property
    @abstractmethod
    def method(self) -> Callable[..., Any]:
        """The unbound function being invoked."""

    @property
    @abstractmethod
    def args(self) -> Tuple[Any, ...]:
        """Positional arguments of the call."""

    @property
    @abstractmethod
    def kwargs(self) -> Dict[str, Any]:
        """Keyword arguments of the call."""

    @abstractmethod
    def proceed(self) -> Any:
        """Run the next interceptor, or the target method when the chain is exhausted."""


class IMethodInterceptor(ABC):
    """Unit of cross-cutting logic run around a proxied method call."""

    @abstractmethod
    def invoke(self, invocation: IMethodInvocation) -> Any:
        """Handle the invocation.

        Implementations call ``invocation.proceed()`` to continue the chain and may run
        logic before, after or instead of it.
        """


class ITransactionManager(ABC):
    """Abstract interface for resource-scoped transaction management."""

    @abstractmethod
    def begin(self, definition: Optional[TransactionDefinition] = None) -> UnitOfWork:
        """Acquire a resource and open a new unit of work."""

    @abstractmethod
    def commit(self, unit_of_work: UnitOfWork) -> None:
        """Commit the unit of work, then release its resource."""

    @abstractmethod
    def rollback(self, unit_of_work: UnitOfWork) -> None:
        """Roll back the unit of work, then release its resource."""
