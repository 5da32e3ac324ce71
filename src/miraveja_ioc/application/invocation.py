from typing import Any, Callable, Dict, Sequence, Tuple

from miraveja_ioc.domain import IMethodInterceptor, IMethodInvocation


class MethodInvocation(IMethodInvocation):
    """A call on a proxy travelling through an ordered interceptor chain.

    Each ``proceed()`` hands the invocation to the next interceptor; once the
    chain is exhausted the target's method is called with the original arguments.

    Attributes:
        _target: The proxied object.
        _method_name: Name of the invoked method.
        _interceptors: The ordered interceptor chain.
        _index: Position of the next interceptor to run.
    """

    def __init__(
        self,
        target: Any,
        method_name: str,
        args: Tuple[Any, ...],
        kwargs: Dict[str, Any],
        interceptors: Sequence[IMethodInterceptor] = (),
    ) -> None:
        self._target = target
        self._method_name = method_name
        self._args = tuple(args)
        self._kwargs = dict(kwargs)
        self._interceptors = tuple(interceptors)
        self._index = 0

    @property
    def target(self) -> Any:
        return self._target

    @property
    def method(self) -> Callable[..., Any]:
        return getattr(type(self._target), self._method_name)

    @property
    def method_name(self) -> str:
        return self._method_name

    @property
    def args(self) -> Tuple[Any, ...]:
        return self._args

    @property
    def kwargs(self) -> Dict[str, Any]:
        return self._kwargs

    def proceed(self) -> Any:
        """Run the next interceptor, or the target method when the chain is exhausted."""
        if self._index < len(self._interceptors):
            interceptor = self._interceptors[self._index]
            self._index += 1
            return interceptor.invoke(self)
        return getattr(self._target, self._method_name)(*self._args, **self._kwargs)

    def __repr__(self) -> str:
        return f"MethodInvocation({type(self._target).__name__}.{self._method_name})"
