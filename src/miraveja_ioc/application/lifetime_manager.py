import logging
import threading
from typing import Any, Callable, Dict

from miraveja_ioc.domain import ComponentCreationError, ComponentDescriptor, ILifetimeManager, IoCException

logger = logging.getLogger(__name__)


class LifetimeManager(ILifetimeManager):
    """Manages instance scopes for singleton and transient components.

    Singleton creation is a critical section guarded by a re-entrant lock, so a
    singleton is constructed at most once even when several threads resolve it
    at the same time. The lock is re-entrant because building one singleton
    usually resolves others on the same thread. One lock covers every name:
    two threads entering a dependency cycle from opposite ends then reach the
    cycle check instead of waiting on each other.

    Attributes:
        _singleton_cache: Cache for singleton instances, keyed by component name.
        _lock: Lock serializing singleton creation.
    """

    def __init__(self) -> None:
        """Initialize the lifetime manager with an empty cache."""
        self._singleton_cache: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def get_or_create(self, name: str, descriptor: ComponentDescriptor, factory: Callable[[], Any]) -> Any:
        """Get existing instance or create new one based on scope.

        Args:
            name: The component name.
            descriptor: Descriptor carrying the scope.
            factory: Function creating a fully processed instance.

        Returns:
            Instance according to scope rules:
            - Singleton: Returns cached instance or creates and caches new one
            - Transient: Always creates new instance

        Example:
            >>> descriptor = ComponentDescriptor(component_type=MyService)
            >>> instance = manager.get_or_create("myService", descriptor, lambda: MyService())
        """
        if not descriptor.is_singleton:
            return self._create(name, factory)

        if name in self._singleton_cache:
            return self._singleton_cache[name]

        with self._lock:
            # Another thread may have created it while we waited
            if name not in self._singleton_cache:
                logger.debug("Creating singleton component '%s'", name)
                self._singleton_cache[name] = self._create(name, factory)
            return self._singleton_cache[name]

    def _create(self, name: str, factory: Callable[[], Any]) -> Any:
        try:
            return factory()
        except IoCException:
            raise
        except Exception as e:
            raise ComponentCreationError(name, f"Failed to create instance: {e}") from e

    def is_cached(self, name: str) -> bool:
        """Return whether a singleton instance is cached under ``name``."""
        return name in self._singleton_cache

    def clear_cache(self) -> None:
        """Clear all cached singleton instances.

        Useful for testing or resetting container state.
        """
        with self._lock:
            self._singleton_cache.clear()

    def evict(self, name: str) -> None:
        """Drop the cached singleton stored under ``name``, if any."""
        with self._lock:
            self._singleton_cache.pop(name, None)
