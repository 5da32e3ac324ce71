import logging
from typing import Any, Iterator, Optional, Sequence, Tuple, Type

from sqlalchemy.engine import Engine

from miraveja_ioc.application.interceptors import LoggingInterceptor
from miraveja_ioc.application.proxy_factory import ProxyFactory, capabilities_of, unwrap
from miraveja_ioc.domain import (
    ComponentCreationError,
    IContainer,
    IMethodInterceptor,
    Inject,
    IPostProcessor,
    ITransactionManager,
    UnknownComponentError,
)

logger = logging.getLogger(__name__)


def _injection_points(cls: Type) -> Iterator[Tuple[str, Inject]]:
    """Yield ``(field_name, marker)`` for every ``Inject`` attribute on the class hierarchy."""
    seen = set()
    for klass in cls.__mro__:
        for field_name, attr in vars(klass).items():
            if field_name in seen:
                continue
            seen.add(field_name)
            if isinstance(attr, Inject):
                yield field_name, attr


class InjectionPostProcessor(IPostProcessor):
    """Fills ``Inject``-marked fields with components looked up by name.

    The component name is the field name unless the marker names another one.
    Values are assigned with ``object.__setattr__`` so custom ``__setattr__``
    hooks and frozen models do not get in the way.

    Example:
        >>> class UserController:
        ...     user_service = Inject()
        >>>
        >>> container.add_post_processor(InjectionPostProcessor(container))
        >>> container.resolve("userController").user_service  # component "user_service"
    """

    def __init__(self, container: IContainer) -> None:
        self._container = container

    def post_process(self, instance: Any, name: str) -> Any:
        target = unwrap(instance)
        for field_name, marker in _injection_points(type(target)):
            component_name = marker.name or field_name
            try:
                dependency = self._container.resolve(component_name)
            except UnknownComponentError as e:
                if not marker.optional:
                    raise ComponentCreationError(
                        name, f"Failed to inject field '{field_name}': {e}"
                    ) from e
                dependency = None
            logger.debug("Injecting '%s' into field '%s' of component '%s'", component_name, field_name, name)
            object.__setattr__(target, field_name, dependency)
        return instance


class InterceptionPostProcessor(IPostProcessor):
    """Wraps eligible components in a proxy routed through a fixed interceptor chain.

    A component is eligible when it implements at least one abstract interface and
    is not infrastructure: transaction managers and data sources are never proxied.

    Attributes:
        _interceptors: Interceptors applied to every proxy, outermost first.
        _excluded_types: Types that are never proxied.
    """

    DEFAULT_EXCLUDED_TYPES: Tuple[Type, ...] = (ITransactionManager, Engine)

    def __init__(
        self,
        interceptors: Optional[Sequence[IMethodInterceptor]] = None,
        excluded_types: Optional[Sequence[Type]] = None,
    ) -> None:
        self._interceptors = list(interceptors) if interceptors is not None else [LoggingInterceptor()]
        self._excluded_types = tuple(excluded_types) if excluded_types is not None else self.DEFAULT_EXCLUDED_TYPES

    def is_eligible(self, instance: Any) -> bool:
        """Return whether ``instance`` should be proxied."""
        if isinstance(unwrap(instance), self._excluded_types):
            return False
        return bool(capabilities_of(type(instance)))

    def post_process(self, instance: Any, name: str) -> Any:
        if not self.is_eligible(instance):
            return instance
        logger.debug("Proxying component '%s'", name)
        return ProxyFactory(instance, self._interceptors).get_proxy()
