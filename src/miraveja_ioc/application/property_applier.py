import inspect
import logging
import re
from typing import Any, Callable, Optional, Tuple

from miraveja_ioc.application.coercion import coerce_literal, resolve_type_hints
from miraveja_ioc.application.proxy_factory import unwrap
from miraveja_ioc.domain import (
    ComponentDescriptor,
    IContainer,
    IoCException,
    PropertyInjectionError,
    RuntimeReference,
)

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def setter_name(property_name: str) -> str:
    """Return the setter method name for a property, e.g. ``dataSource`` -> ``set_data_source``."""
    return "set_" + _CAMEL_BOUNDARY.sub("_", property_name).lower()


class PropertyApplier:
    """Applies descriptor properties to a constructed component through its setters.

    Setter lookup order for a property ``fooBar``:
    1. An explicit binding in ``descriptor.setters``.
    2. A method named ``set_foo_bar`` taking one argument.
    3. A writable ``property`` named ``fooBar``.

    Literal values are coerced to the setter's declared parameter type, references
    are resolved through the container. Setters always run on the unwrapped
    target, never on a proxy.
    """

    def apply(self, name: str, instance: Any, descriptor: ComponentDescriptor, container: IContainer) -> None:
        """Apply every declared property of ``descriptor`` to ``instance``.

        Args:
            name: The component name, for error context.
            instance: The constructed component, possibly a proxy.
            descriptor: The component descriptor.
            container: Container used to resolve references.

        Raises:
            PropertyInjectionError: If a setter is missing, coercion fails or the setter raises.
            UnknownComponentError: If a referenced component is not registered.
        """
        target = unwrap(instance)
        for property_name, raw_value in descriptor.properties.items():
            setter, annotation = self._find_setter(name, target, property_name, descriptor)

            if isinstance(raw_value, RuntimeReference):
                value = container.resolve(raw_value.name)
            else:
                try:
                    value = coerce_literal(raw_value, annotation)
                except ValueError as e:
                    raise PropertyInjectionError(
                        name, property_name, f"Cannot convert {raw_value!r} to {annotation}: {e}"
                    ) from e

            logger.debug("Setting property '%s' on component '%s'", property_name, name)
            try:
                setter(value)
            except IoCException:
                raise
            except Exception as e:
                raise PropertyInjectionError(name, property_name, str(e)) from e

    def _find_setter(
        self, name: str, target: Any, property_name: str, descriptor: ComponentDescriptor
    ) -> Tuple[Callable[[Any], None], Any]:
        """Locate the setter for ``property_name`` and the type its value is coerced to."""
        binding = descriptor.setters.get(property_name)
        if binding is not None:
            return (lambda value: binding(target, value)), self._value_annotation(binding, skip=1)

        method = getattr(target, setter_name(property_name), None)
        if callable(method):
            return method, self._value_annotation(method, skip=0)

        attribute = inspect.getattr_static(type(target), property_name, None)
        if isinstance(attribute, property) and attribute.fset is not None:
            annotation = resolve_type_hints(attribute.fget).get("return", Any) if attribute.fget else Any
            return (lambda value: setattr(target, property_name, value)), annotation

        raise PropertyInjectionError(
            name,
            property_name,
            f"No setter '{setter_name(property_name)}' or writable property found on {type(target).__name__}",
        )

    def _value_annotation(self, setter: Callable[..., Any], skip: int) -> Optional[Any]:
        """Return the annotation of the setter's value parameter, ``Any`` when unknown."""
        try:
            parameters = list(inspect.signature(setter).parameters.values())
        except (TypeError, ValueError):
            return Any
        if len(parameters) <= skip:
            return Any
        value_parameter = parameters[skip]
        return resolve_type_hints(setter).get(value_parameter.name, Any)
