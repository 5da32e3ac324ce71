import importlib
import inspect
import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Type, Union

from miraveja_ioc.application.instantiator import ConstructorInstantiator
from miraveja_ioc.application.lifetime_manager import LifetimeManager
from miraveja_ioc.application.property_applier import PropertyApplier
from miraveja_ioc.application.resolution_stack import ResolutionStack
from miraveja_ioc.domain import (
    ComponentCreationError,
    ComponentDescriptor,
    IContainer,
    IInstantiator,
    ILifetimeManager,
    IoCException,
    IPostProcessor,
    NoImplementationFoundError,
    Scope,
    UnknownComponentError,
)

logger = logging.getLogger(__name__)

ComponentSpec = Union[Type, ComponentDescriptor]


def is_abstract_type(component_type: Type) -> bool:
    """Return whether ``component_type`` cannot be instantiated directly (ABC or Protocol)."""
    return inspect.isabstract(component_type) or bool(getattr(component_type, "_is_protocol", False))


def load_type(type_path: str) -> Type:
    """Import ``package.module.ClassName`` and return the class."""
    module_name, _, class_name = type_path.rpartition(".")
    if not module_name:
        raise ImportError(f"'{type_path}' is not a dotted class path")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, class_name)
    except AttributeError as e:
        raise ImportError(f"Module '{module_name}' has no attribute '{class_name}'") from e


class ComponentContainer(IContainer):
    """Main component container.

    Turns registered descriptors into wired instances: constructs them, applies
    their properties, runs the post-processor pipeline and caches singletons.

    Attributes:
        _registry: Component name to descriptor, in registration order.
        _implementations: Abstract type to implementation name, rebuilt on registration.
        _bindings: Explicit abstract type to implementation name bindings.
        _post_processors: Ordered post-processor pipeline.
        _instantiator: Component selecting and calling constructors.
        _property_applier: Component applying descriptor properties.
        _lifetime_manager: Component managing singleton caching.
        _resolution_stack: Per-thread names being resolved, used to detect cycles.
    """

    def __init__(
        self,
        instantiator: Optional[IInstantiator] = None,
        lifetime_manager: Optional[ILifetimeManager] = None,
    ) -> None:
        """Initialize the container with an empty registry and default collaborators."""
        self._registry: Dict[str, ComponentDescriptor] = {}
        self._implementations: Dict[Type, str] = {}
        self._bindings: Dict[Type, str] = {}
        self._post_processors: List[IPostProcessor] = []
        self._registry_lock = threading.RLock()
        self._instantiator: IInstantiator = instantiator or ConstructorInstantiator()
        self._property_applier = PropertyApplier()
        self._lifetime_manager: ILifetimeManager = lifetime_manager or LifetimeManager()
        self._resolution_stack = ResolutionStack()

    def register(self, name: str, descriptor: ComponentDescriptor) -> None:
        """Register a descriptor, replacing any descriptor stored under the same name.

        An already cached singleton is not evicted by a replacement; only later
        resolutions of uncached components see the new descriptor.

        Args:
            name: The component name.
            descriptor: Recipe used to build the component.

        Example:
            >>> container.register(
            ...     "userService",
            ...     ComponentDescriptor(
            ...         component_type=UserServiceImpl,
            ...         properties={"userRepository": ref("userRepository"), "pageSize": "20"},
            ...     ),
            ... )
        """
        with self._registry_lock:
            if name in self._registry:
                logger.debug("Replacing descriptor for component '%s'", name)
            self._registry[name] = descriptor
            self._index_implementations()

    def _register_all(self, components: Mapping[str, ComponentSpec], scope: Scope) -> None:
        for name, spec in components.items():
            if isinstance(spec, ComponentDescriptor):
                descriptor = spec.model_copy(update={"scope": scope})
            else:
                descriptor = ComponentDescriptor(component_type=spec, scope=scope)
            self.register(name, descriptor)

    def register_singletons(self, components: Mapping[str, ComponentSpec]) -> None:
        """Register multiple singleton components at once.

        Args:
            components: Component name to class or descriptor; descriptors are forced to singleton scope.

        Example:
            >>> container.register_singletons({
            ...     "userRepository": InMemoryUserRepository,
            ...     "userService": ComponentDescriptor(
            ...         component_type=UserServiceImpl,
            ...         constructor_args=(ref("userRepository"),),
            ...     ),
            ... })
        """
        self._register_all(components, Scope.SINGLETON)

    def register_transients(self, components: Mapping[str, ComponentSpec]) -> None:
        """Register multiple transient components at once.

        Args:
            components: Component name to class or descriptor; descriptors are forced to transient scope.
        """
        self._register_all(components, Scope.TRANSIENT)

    def register_implementation(self, abstract_type: Type, name: str) -> None:
        """Bind an abstract type to the component that implements it.

        Explicit bindings win over the implementations discovered from registered descriptors.

        Args:
            abstract_type: The interface or abstract class.
            name: Name of the implementing component.
        """
        with self._registry_lock:
            self._bindings[abstract_type] = name
            self._index_implementations()

    def _index_implementations(self) -> None:
        """Map every abstract ancestor of registered concrete classes to the first component providing it."""
        implementations: Dict[Type, str] = {}
        for name, descriptor in self._registry.items():
            component_type = descriptor.component_type
            if not isinstance(component_type, type) or is_abstract_type(component_type):
                continue
            for base in component_type.__mro__[1:]:
                if is_abstract_type(base):
                    implementations.setdefault(base, name)
        implementations.update(self._bindings)
        self._implementations = implementations

    def add_post_processor(self, processor: IPostProcessor) -> None:
        """Append a post-processor; processors run in the order they were added."""
        self._post_processors.append(processor)

    def resolve(self, name: str) -> Any:
        """Resolve and return the component registered under ``name``.

        Args:
            name: The component name.

        Returns:
            The constructed, wired and post-processed component; the cached one for singletons.

        Raises:
            UnknownComponentError: If no descriptor is registered under ``name``.
            CyclicDependencyError: If the component transitively depends on itself.
            NoImplementationFoundError: If an abstract component has no registered implementation.
            NoCompatibleConstructorError: If no constructor accepts the resolved arguments.
            PropertyInjectionError: If a property cannot be applied.
            ComponentCreationError: If user code fails while creating the component.

        Example:
            >>> user_service = container.resolve("userService")
        """
        descriptor = self._registry.get(name)
        if descriptor is None:
            raise UnknownComponentError(name)

        with self._resolution_stack.resolving(name):
            return self._lifetime_manager.get_or_create(name, descriptor, lambda: self._create(name, descriptor))

    def _create(self, name: str, descriptor: ComponentDescriptor) -> Any:
        """Construct, configure and post-process one instance."""
        component_type = self._component_type(name, descriptor)

        if is_abstract_type(component_type):
            implementation = self._find_implementation(name, component_type)
            logger.debug("Component '%s' resolved through implementation '%s'", name, implementation)
            instance = self.resolve(implementation)
            self._property_applier.apply(name, instance, descriptor, self)
            return instance

        instance = self._instantiator.instantiate(name, component_type, descriptor, self)
        self._property_applier.apply(name, instance, descriptor, self)
        return self._post_process(name, instance)

    def _component_type(self, name: str, descriptor: ComponentDescriptor) -> Type:
        component_type = descriptor.component_type
        if isinstance(component_type, type):
            return component_type
        try:
            return load_type(component_type)
        except ImportError as e:
            raise ComponentCreationError(name, f"Cannot load type '{component_type}': {e}") from e

    def _find_implementation(self, name: str, abstract_type: Type) -> str:
        implementation = self._implementations.get(abstract_type)
        if implementation is None or implementation == name:
            raise NoImplementationFoundError(name, abstract_type)
        return implementation

    def _post_process(self, name: str, instance: Any) -> Any:
        for processor in self._post_processors:
            try:
                instance = processor.post_process(instance, name)
            except IoCException:
                raise
            except Exception as e:
                raise ComponentCreationError(
                    name, f"Post-processor {type(processor).__name__} failed: {e}"
                ) from e
        return instance

    def contains(self, name: str) -> bool:
        return name in self._registry

    def get_descriptor(self, name: str) -> ComponentDescriptor:
        """Return the descriptor registered under ``name``.

        Raises:
            UnknownComponentError: If no descriptor is registered under ``name``.
        """
        try:
            return self._registry[name]
        except KeyError:
            raise UnknownComponentError(name) from None

    def component_names(self) -> List[str]:
        """Return registered component names in registration order."""
        return list(self._registry)

    def get_registry_copy(self) -> Dict[str, ComponentDescriptor]:
        """Get a copy of the descriptor registry.

        Returns:
            Copy of the current registry.
        """
        return self._registry.copy()

    def set_registry(self, registry: Dict[str, ComponentDescriptor]) -> None:
        """Replace the whole registry, e.g. with a copy taken from another container.

        Args:
            registry: Registry to adopt.
        """
        with self._registry_lock:
            self._registry = registry
            self._index_implementations()

    def clear(self) -> None:
        """Clear all registrations, bindings and cached instances.

        Post-processors stay registered. Useful for testing or resetting the container state.
        """
        with self._registry_lock:
            self._registry.clear()
            self._bindings.clear()
            self._implementations.clear()
        self._lifetime_manager.clear_cache()
        self._resolution_stack.reset()
