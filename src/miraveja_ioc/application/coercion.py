"""Literal coercion and parameter compatibility rules."""

import inspect
import types
from typing import Any, Callable, Dict, Tuple, Union, get_args, get_origin, get_type_hints

NoneType = type(None)

PRIMITIVE_TYPES = (int, float, bool)

# ``X | Y`` unions have their own origin type
_UNION_ORIGINS = (Union, getattr(types, "UnionType", Union))


def unwrap_optional(annotation: Any) -> Any:
    """Return ``X`` for ``Optional[X]``, the annotation itself otherwise."""
    if get_origin(annotation) in _UNION_ORIGINS:
        members = [member for member in get_args(annotation) if member is not NoneType]
        if len(members) == 1:
            return members[0]
    return annotation


def parse_bool(text: str) -> bool:
    """Parse a boolean literal: ``"true"`` in any case is True, anything else False."""
    return text.strip().lower() == "true"


def coerce_literal(value: Any, annotation: Any) -> Any:
    """Coerce a literal value to ``annotation`` using string parsing rules.

    Strings become ``int``, ``float`` or ``bool`` when the target is one of those;
    any value becomes ``str`` when the target is ``str``; everything else passes
    through unchanged.

    Raises:
        ValueError: If a string cannot be parsed as the target number type.

    Example:
        >>> coerce_literal("42", int)
        42
        >>> coerce_literal("TRUE", Optional[bool])
        True
    """
    target = unwrap_optional(annotation)
    if value is None:
        return None
    if target is str:
        return value if isinstance(value, str) else str(value)
    if not isinstance(value, str):
        return value
    if target is bool:
        return parse_bool(value)
    if target is int:
        return int(value.strip())
    if target is float:
        return float(value.strip())
    return value


def _is_unconstrained(annotation: Any) -> bool:
    return annotation is inspect.Parameter.empty or annotation is Any or isinstance(annotation, str)


def check_compatible(value: Any, annotation: Any, literal: bool = False) -> Tuple[bool, Any]:
    """Check whether ``value`` can be passed to a parameter annotated with ``annotation``.

    Rules, in order: unannotated parameters accept anything; ``None`` is accepted
    for any non-primitive parameter; unions accept a value compatible with any
    member; ``bool`` is never accepted for ``int``/``float``; ``int`` is accepted
    for ``float``; literal strings are parsed for ``int``/``float``/``bool``
    parameters; otherwise ``isinstance`` decides.

    Args:
        value: The resolved argument.
        annotation: The parameter annotation.
        literal: Whether the value is a literal from the descriptor (eligible for coercion).

    Returns:
        A ``(compatible, converted_value)`` tuple.
    """
    if _is_unconstrained(annotation):
        return True, value

    origin = get_origin(annotation)
    if origin in _UNION_ORIGINS:
        members = get_args(annotation)
        if value is None:
            return NoneType in members, value
        for member in members:
            if member is NoneType:
                continue
            compatible, converted = check_compatible(value, member, literal)
            if compatible:
                return True, converted
        return False, value

    if value is None:
        return annotation not in PRIMITIVE_TYPES, value

    if annotation in PRIMITIVE_TYPES:
        if literal and isinstance(value, str):
            return _parse_primitive(value, annotation)
        if isinstance(value, bool):
            return annotation is bool, value
        if annotation is float:
            return isinstance(value, (int, float)), value
        return isinstance(value, annotation), value

    check_type = origin if origin is not None else annotation
    if isinstance(check_type, type):
        return isinstance(value, check_type), value
    return True, value


def _parse_primitive(text: str, annotation: type) -> Tuple[bool, Any]:
    if annotation is bool:
        normalized = text.strip().lower()
        if normalized in ("true", "false"):
            return True, normalized == "true"
        return False, text
    try:
        return True, annotation(text.strip())
    except ValueError:
        return False, text


def resolve_type_hints(func: Callable[..., Any]) -> Dict[str, Any]:
    """Return evaluated type hints for a callable, empty when they cannot be evaluated."""
    target = func.__init__ if isinstance(func, type) else func
    try:
        return get_type_hints(target)
    except (NameError, TypeError, AttributeError):
        return {}
