"""Declarative markers read by the container and its post-processors."""

from typing import Any, Callable, Optional

CONSTRUCTOR_MARKER = "__miraveja_constructor__"


class Inject:
    """Marks a class attribute to be filled with a component by the injection post-processor.

    The component is looked up by the attribute name unless ``name`` is given.

    Example:
        >>> class UserService:
        ...     user_repository = Inject()
        ...     audit_log = Inject(name="auditLog", optional=True)
    """

    def __init__(self, name: Optional[str] = None, optional: bool = False) -> None:
        self.name = name
        self.optional = optional
        self.field_name: Optional[str] = None

    def __set_name__(self, owner: type, field_name: str) -> None:
        self.field_name = field_name

    @property
    def component_name(self) -> str:
        return self.name or self.field_name or ""

    def __repr__(self) -> str:
        return f"Inject(name={self.component_name!r}, optional={self.optional})"


def constructor(func: Callable[..., Any]) -> classmethod:
    """Declare a classmethod as an alternative constructor.

    Marked constructors are candidates after ``__init__``, in definition order.

    Example:
        >>> class Pool:
        ...     def __init__(self):
        ...         self.size = 1
        ...
        ...     @constructor
        ...     def sized(cls, size: int):
        ...         pool = cls()
        ...         pool.size = size
        ...         return pool
    """
    target = func.__func__ if isinstance(func, classmethod) else func
    setattr(target, CONSTRUCTOR_MARKER, True)
    return classmethod(target)
