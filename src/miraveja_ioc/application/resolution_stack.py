import threading
from contextlib import contextmanager
from typing import Iterator, List

from miraveja_ioc.domain import CyclicDependencyError


class ResolutionStack:
    """Names of the components each thread is currently resolving, outermost first.

    Resolving a name that is already on the calling thread's stack means the
    component graph loops back on itself.

    Example:
        >>> stack = ResolutionStack()
        >>> with stack.resolving("userService"):
        ...     with stack.resolving("userRepository"):
        ...         stack.names()
        ['userService', 'userRepository']
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def _names(self) -> List[str]:
        names = getattr(self._local, "names", None)
        if names is None:
            names = self._local.names = []
        return names

    @contextmanager
    def resolving(self, name: str) -> Iterator[None]:
        """Mark ``name`` as being resolved for the duration of the block.

        Raises:
            CyclicDependencyError: If ``name`` is already being resolved on this thread.
        """
        names = self._names()
        if name in names:
            raise CyclicDependencyError(names[names.index(name) :] + [name])

        names.append(name)
        try:
            yield
        finally:
            names.pop()

    def names(self) -> List[str]:
        """Return the calling thread's in-progress names."""
        return list(self._names())

    def reset(self) -> None:
        """Forget the calling thread's in-progress names."""
        self._names().clear()
