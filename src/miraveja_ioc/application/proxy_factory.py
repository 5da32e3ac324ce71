import functools
import inspect
import logging
import threading
import types
from abc import ABC
from typing import AbstractSet, Any, Callable, Dict, Generic, Iterable, List, Optional, Protocol, Sequence, Tuple, Type

from miraveja_ioc.application.invocation import MethodInvocation
from miraveja_ioc.domain import IMethodInterceptor, NoCapabilitiesToProxyError

logger = logging.getLogger(__name__)

_TARGET_ATTR = "_miraveja_target"
_INTERCEPTORS_ATTR = "_miraveja_interceptors"


class _ProxyBase:
    """Common base of generated proxy classes."""

    def __init__(self, target: Any, interceptors: Sequence[IMethodInterceptor]) -> None:
        object.__setattr__(self, _TARGET_ATTR, target)
        object.__setattr__(self, _INTERCEPTORS_ATTR, tuple(interceptors))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} for {object.__getattribute__(self, _TARGET_ATTR)!r}>"


def _minimal(capabilities: Iterable[Type]) -> List[Type]:
    """Drop every capability that is an ancestor of another one, keeping order."""
    found = list(dict.fromkeys(capabilities))
    return [cap for cap in found if not any(other is not cap and issubclass(other, cap) for other in found)]


def capabilities_of(cls: Type) -> List[Type]:
    """Return the abstract interfaces implemented by ``cls``.

    Abstract ancestors (ABCs with abstract methods) are collected in MRO order,
    reduced to the most specific ones.

    Example:
        >>> class UserService(ABC):
        ...     @abstractmethod
        ...     def find(self, user_id: int): ...
        >>>
        >>> class UserServiceImpl(UserService):
        ...     def find(self, user_id: int):
        ...         return {"id": user_id}
        >>>
        >>> capabilities_of(UserServiceImpl)
        [<class 'UserService'>]
    """
    return _minimal(base for base in cls.__mro__[1:] if base is not ABC and inspect.isabstract(base))


def is_proxy(obj: Any) -> bool:
    """Return whether ``obj`` was produced by the proxy factory."""
    return isinstance(obj, _ProxyBase)


def unwrap(obj: Any) -> Any:
    """Return the original target behind any number of proxy layers."""
    while isinstance(obj, _ProxyBase):
        obj = object.__getattribute__(obj, _TARGET_ATTR)
    return obj


# Never forwarded: the proxy itself relies on these
_PROXY_OWNED = frozenset(vars(_ProxyBase)) | frozenset(
    (
        "__new__",
        "__del__",
        "__getattribute__",
        "__setattr__",
        "__delattr__",
        "__init_subclass__",
        "__subclasshook__",
        "__class_getitem__",
    )
)
_OBJECT_PROTOCOL = frozenset(dir(object))
_SKIPPED_BASES = (object, ABC, Generic, Protocol)


def _forwarder(method_name: str, interface_function: Callable[..., Any]) -> Callable[..., Any]:
    def forward(self: Any, *args: Any, **kwargs: Any) -> Any:
        invocation = MethodInvocation(
            object.__getattribute__(self, _TARGET_ATTR),
            method_name,
            args,
            kwargs,
            object.__getattribute__(self, _INTERCEPTORS_ATTR),
        )
        return invocation.proceed()

    # Copy naming only; copying __dict__ would carry __isabstractmethod__ over
    return functools.update_wrapper(forward, interface_function, assigned=("__name__", "__qualname__", "__doc__"), updated=())


def _property_forwarder(property_name: str) -> property:
    return property(lambda self: getattr(object.__getattribute__(self, _TARGET_ATTR), property_name))


def _interface_function(attr: Any) -> Optional[Callable[..., Any]]:
    """Return the plain function behind a method, static method or class method."""
    if isinstance(attr, (staticmethod, classmethod)):
        attr = attr.__func__
    return attr if inspect.isfunction(attr) else None


def _is_forwarded(attr_name: str, abstract_names: AbstractSet[str]) -> bool:
    if attr_name in _PROXY_OWNED:
        return False
    # object already answers the protocol dunders unless the interface insists
    return attr_name not in _OBJECT_PROTOCOL or attr_name in abstract_names


def _build_namespace(capabilities: Sequence[Type]) -> Dict[str, Any]:
    """Forward every method and property declared by the capabilities.

    Dunder and underscore-prefixed members are included, as are static and
    class methods, which the proxy routes to the target like instance methods.
    """
    namespace: Dict[str, Any] = {}
    for capability in capabilities:
        abstract_names = getattr(capability, "__abstractmethods__", frozenset())
        for klass in capability.__mro__:
            if klass in _SKIPPED_BASES:
                continue
            for attr_name, attr in vars(klass).items():
                if attr_name in namespace or not _is_forwarded(attr_name, abstract_names):
                    continue
                if isinstance(attr, property):
                    namespace[attr_name] = _property_forwarder(attr_name)
                    continue
                function = _interface_function(attr)
                if function is not None:
                    namespace[attr_name] = _forwarder(attr_name, function)
    return namespace


_proxy_classes: Dict[Tuple[Type, Tuple[Type, ...]], Type] = {}
_proxy_classes_lock = threading.Lock()


def _proxy_class(target_type: Type, capabilities: Tuple[Type, ...]) -> Type:
    key = (target_type, capabilities)
    with _proxy_classes_lock:
        proxy_class = _proxy_classes.get(key)
        if proxy_class is None:
            namespace = _build_namespace(capabilities)
            proxy_class = types.new_class(
                f"{target_type.__name__}Proxy",
                (_ProxyBase, *capabilities),
                exec_body=lambda ns: ns.update(namespace),
            )
            _proxy_classes[key] = proxy_class
        return proxy_class


def create_proxy(target: Any, capabilities: Iterable[Type], interceptors: Sequence[IMethodInterceptor] = ()) -> Any:
    """Create a proxy implementing ``capabilities`` that routes every call through ``interceptors``.

    Args:
        target: The object receiving the calls.
        capabilities: Interfaces the proxy implements; the target must implement them too.
        interceptors: Ordered interceptor chain, outermost first.

    Returns:
        A proxy usable wherever the capabilities are expected.

    Raises:
        NoCapabilitiesToProxyError: If ``capabilities`` is empty.
        TypeError: If the target does not implement one of the capabilities.
    """
    selected = tuple(_minimal(capabilities))
    if not selected:
        raise NoCapabilitiesToProxyError(type(target))

    for capability in selected:
        if not isinstance(target, capability):
            raise TypeError(f"{type(target).__name__} does not implement {capability.__name__}")

    logger.debug(
        "Creating proxy for %s implementing %s",
        type(target).__name__,
        ", ".join(capability.__name__ for capability in selected),
    )
    return _proxy_class(type(target), selected)(target, interceptors)


class ProxyFactory:
    """Collects a target, its capabilities and an interceptor chain, then builds the proxy.

    Example:
        >>> factory = ProxyFactory(UserServiceImpl())
        >>> factory.add_interceptor(LoggingInterceptor())
        >>> service = factory.get_proxy()
        >>> isinstance(service, UserService)
        True
    """

    def __init__(
        self,
        target: Any = None,
        interceptors: Optional[Sequence[IMethodInterceptor]] = None,
        capabilities: Optional[Sequence[Type]] = None,
    ) -> None:
        self._target = target
        self._interceptors: List[IMethodInterceptor] = list(interceptors or [])
        self._capabilities = list(capabilities) if capabilities is not None else None

    @property
    def target(self) -> Any:
        return self._target

    def set_target(self, target: Any) -> None:
        self._target = target

    @property
    def interceptors(self) -> List[IMethodInterceptor]:
        return list(self._interceptors)

    def add_interceptor(self, interceptor: IMethodInterceptor) -> None:
        """Append an interceptor; interceptors run in the order they were added."""
        self._interceptors.append(interceptor)

    @property
    def capabilities(self) -> List[Type]:
        """Explicit capabilities, or those discovered on the target's class."""
        if self._capabilities is not None:
            return list(self._capabilities)
        if self._target is None:
            return []
        return capabilities_of(type(self._target))

    def get_proxy(self) -> Any:
        """Build the proxy for the configured target.

        Raises:
            ValueError: If no target has been set.
            NoCapabilitiesToProxyError: If the target implements no interfaces.
        """
        if self._target is None:
            raise ValueError("ProxyFactory requires a target before creating a proxy")
        return create_proxy(self._target, self.capabilities, self._interceptors)
