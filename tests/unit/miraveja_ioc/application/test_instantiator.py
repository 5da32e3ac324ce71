"""Unit tests for ConstructorInstantiator."""

from typing import Optional

import pytest

from miraveja_ioc.application.container import ComponentContainer
from miraveja_ioc.application.instantiator import ConstructorInstantiator
from miraveja_ioc.domain import (
    ComponentDescriptor,
    IInstantiator,
    NoCompatibleConstructorError,
    UnknownComponentError,
    constructor,
    ref,
)


class Credentials:
    def __init__(self):
        self.user = None
        self.port = None
        self.used = "__init__"

    @constructor
    def with_user(cls, user: str, port: int):
        credentials = cls()
        credentials.user = user
        credentials.port = port
        credentials.used = "with_user"
        return credentials


class Engine:
    pass


class Repository:
    def __init__(self, engine: Engine, table: str = "users"):
        self.engine = engine
        self.table = table


def build(descriptor, container=None):
    container = container or ComponentContainer()
    component_type = descriptor.component_type
    return ConstructorInstantiator().instantiate("component", component_type, descriptor, container)


class TestConstructorSelection:
    """Test cases for constructor candidate selection."""

    def test_implements_interface(self):
        """Test that ConstructorInstantiator implements IInstantiator."""
        assert isinstance(ConstructorInstantiator(), IInstantiator)

    def test_no_arguments_uses_init(self):
        """Test that an empty argument list calls the zero-argument __init__."""
        instance = build(ComponentDescriptor(component_type=Credentials))
        assert instance.used == "__init__"

    def test_two_arguments_select_two_argument_constructor(self):
        """Test that the 2-arg constructor wins over the 0-arg one."""
        instance = build(ComponentDescriptor(component_type=Credentials, constructor_args=("admin", 5432)))
        assert instance.used == "with_user"
        assert instance.user == "admin"
        assert instance.port == 5432

    def test_literal_strings_are_coerced(self):
        """Test that literal strings are parsed for annotated parameters."""
        instance = build(ComponentDescriptor(component_type=Credentials, constructor_args=("admin", "5432")))
        assert instance.port == 5432

    def test_incompatible_types_raise(self):
        """Test that mismatching argument types are reported."""
        with pytest.raises(NoCompatibleConstructorError) as exc_info:
            build(ComponentDescriptor(component_type=Credentials, constructor_args=("admin", "not-a-port")))

        assert exc_info.value.argument_types == [str, str]

    def test_wrong_argument_count_raises(self):
        """Test that no candidate with the right arity raises."""
        with pytest.raises(NoCompatibleConstructorError):
            build(ComponentDescriptor(component_type=Credentials, constructor_args=("a",)))

    def test_declaration_order_wins(self):
        """Test that the first compatible candidate is used."""

        class Flexible:
            def __init__(self, value=None):
                self.used = "__init__"

            @constructor
            def from_value(cls, value):
                instance = cls()
                instance.used = "from_value"
                return instance

        assert build(ComponentDescriptor(component_type=Flexible, constructor_args=(1,))).used == "__init__"

    def test_optional_parameters_may_be_omitted(self):
        """Test that defaulted parameters need no argument."""
        engine = Engine()
        container = ComponentContainer()
        container.register("engine", ComponentDescriptor(component_type=Engine, factory=lambda: engine))

        repository = build(ComponentDescriptor(component_type=Repository, constructor_args=(ref("engine"),)), container)

        assert repository.engine is engine
        assert repository.table == "users"

    def test_none_accepted_for_object_parameter(self):
        """Test that None is compatible with a non-primitive parameter."""
        repository = build(ComponentDescriptor(component_type=Repository, constructor_args=(None, "accounts")))
        assert repository.engine is None
        assert repository.table == "accounts"

    def test_required_keyword_only_parameters_skip_candidate(self):
        """Test that candidates with required keyword-only parameters never match."""

        class KeywordOnly:
            def __init__(self, *, name: str):
                self.name = name

        with pytest.raises(NoCompatibleConstructorError):
            build(ComponentDescriptor(component_type=KeywordOnly))

    def test_var_positional_accepts_extra_arguments(self):
        """Test that *args absorbs additional arguments."""

        class Collector:
            def __init__(self, *items: int):
                self.items = items

        collector = build(ComponentDescriptor(component_type=Collector, constructor_args=("1", "2")))
        assert collector.items == (1, 2)


class TestFactoryAndReferences:
    """Test cases for explicit factories and reference arguments."""

    def test_factory_replaces_discovery(self):
        """Test that the descriptor factory is the only candidate."""

        def make_credentials(user: str, port: Optional[int] = None):
            credentials = Credentials()
            credentials.user = user
            credentials.used = "factory"
            return credentials

        descriptor = ComponentDescriptor(component_type=Credentials, factory=make_credentials, constructor_args=("x",))
        assert build(descriptor).used == "factory"

    def test_reference_argument_resolved_from_container(self):
        """Test that references are resolved before matching."""
        container = ComponentContainer()
        container.register_singletons({"engine": Engine})

        repository = build(ComponentDescriptor(component_type=Repository, constructor_args=(ref("engine"),)), container)

        assert repository.engine is container.resolve("engine")

    def test_unknown_reference_raises(self):
        """Test that a reference to an unregistered name raises UnknownComponentError."""
        with pytest.raises(UnknownComponentError):
            build(ComponentDescriptor(component_type=Repository, constructor_args=(ref("engine"),)))

    def test_candidates_listing(self):
        """Test that candidates list __init__ first, then marked constructors."""
        candidates = ConstructorInstantiator().candidates(Credentials, ComponentDescriptor(component_type=Credentials))
        assert candidates[0] is Credentials
        assert candidates[1] == Credentials.with_user
