import inspect
import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple, Type

from miraveja_ioc.application.coercion import check_compatible, resolve_type_hints
from miraveja_ioc.domain import (
    ComponentDescriptor,
    IContainer,
    IInstantiator,
    NoCompatibleConstructorError,
    RuntimeReference,
)
from miraveja_ioc.domain.markers import CONSTRUCTOR_MARKER

logger = logging.getLogger(__name__)

_POSITIONAL_KINDS = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class ConstructorInstantiator(IInstantiator):
    """Builds components by matching resolved constructor arguments against constructor candidates.

    Candidates are, in order, the class itself (its ``__init__``) followed by the
    classmethods marked with ``@constructor`` in definition order. A descriptor
    ``factory`` replaces discovery and is the only candidate.
    """

    def instantiate(self, name: str, component_type: Type, descriptor: ComponentDescriptor, container: IContainer) -> Any:
        """Resolve constructor arguments and call the first compatible constructor.

        Args:
            name: The component name.
            component_type: The concrete class to build.
            descriptor: The component descriptor.
            container: Container used to resolve references.

        Returns:
            The new, not yet post-processed, instance.

        Raises:
            NoCompatibleConstructorError: If no candidate accepts the arguments.
            UnknownComponentError: If a referenced component is not registered.

        Example:
            >>> class Pool:
            ...     def __init__(self, name: str, size: int):
            ...         self.name, self.size = name, size
            >>>
            >>> descriptor = ComponentDescriptor(component_type=Pool, constructor_args=("main", "8"))
            >>> pool = ConstructorInstantiator().instantiate("pool", Pool, descriptor, container)
            >>> pool.size
            8
        """
        args, literal_flags = self._resolve_arguments(descriptor.constructor_args, container)

        for candidate in self.candidates(component_type, descriptor):
            converted = self._match(candidate, args, literal_flags)
            if converted is not None:
                logger.debug("Constructing '%s' with %s", name, getattr(candidate, "__qualname__", candidate))
                return candidate(*converted)

        raise NoCompatibleConstructorError(component_type, [type(arg) for arg in args])

    def candidates(self, component_type: Type, descriptor: ComponentDescriptor) -> List[Callable[..., Any]]:
        """List constructor candidates in declaration order."""
        if descriptor.factory is not None:
            return [descriptor.factory]

        candidates: List[Callable[..., Any]] = [component_type]
        for attr_name, attr in vars(component_type).items():
            if isinstance(attr, classmethod) and getattr(attr.__func__, CONSTRUCTOR_MARKER, False):
                candidates.append(getattr(component_type, attr_name))
        return candidates

    def _resolve_arguments(
        self, constructor_args: Sequence[Any], container: IContainer
    ) -> Tuple[List[Any], List[bool]]:
        args: List[Any] = []
        literal_flags: List[bool] = []
        for value in constructor_args:
            if isinstance(value, RuntimeReference):
                args.append(container.resolve(value.name))
                literal_flags.append(False)
            else:
                args.append(value)
                literal_flags.append(True)
        return args, literal_flags

    def _match(self, candidate: Callable[..., Any], args: List[Any], literal_flags: List[bool]) -> Optional[List[Any]]:
        """Return the converted arguments when ``candidate`` accepts them, None otherwise."""
        try:
            signature = inspect.signature(candidate)
        except ValueError:
            # Builtin-backed classes without introspectable signature only take no arguments
            return [] if not args else None

        parameters = list(signature.parameters.values())
        positional = [param for param in parameters if param.kind in _POSITIONAL_KINDS]
        var_positional = next((p for p in parameters if p.kind is inspect.Parameter.VAR_POSITIONAL), None)
        required = [param for param in positional if param.default is inspect.Parameter.empty]
        required_keyword = [
            param
            for param in parameters
            if param.kind is inspect.Parameter.KEYWORD_ONLY and param.default is inspect.Parameter.empty
        ]

        if required_keyword or len(args) < len(required):
            return None
        if len(args) > len(positional) and var_positional is None:
            return None

        hints = resolve_type_hints(candidate)
        converted: List[Any] = []
        for index, (value, literal) in enumerate(zip(args, literal_flags)):
            param = positional[index] if index < len(positional) else var_positional
            annotation = hints.get(param.name, param.annotation)
            compatible, value = check_compatible(value, annotation, literal)
            if not compatible:
                return None
            converted.append(value)
        return converted
