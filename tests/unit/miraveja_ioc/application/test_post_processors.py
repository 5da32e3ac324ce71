"""Unit tests for the built-in post-processors."""

from abc import ABC, abstractmethod
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine

from miraveja_ioc.application.container import ComponentContainer
from miraveja_ioc.application.interceptors import LoggingInterceptor
from miraveja_ioc.application.post_processors import InjectionPostProcessor, InterceptionPostProcessor
from miraveja_ioc.application.proxy_factory import create_proxy, is_proxy, unwrap
from miraveja_ioc.domain import (
    ComponentCreationError,
    IMethodInterceptor,
    Inject,
    IPostProcessor,
    ITransactionManager,
)


class UserRepository(ABC):
    @abstractmethod
    def find(self, user_id: int) -> dict: ...


class InMemoryUserRepository(UserRepository):
    def find(self, user_id: int) -> dict:
        return {"id": user_id}


class UserController:
    user_repository = Inject()
    audit = Inject(name="auditLog", optional=True)

    def __setattr__(self, name, value):
        raise AttributeError("controller is read-only")


class Plain:
    pass


class TestInjectionPostProcessor:
    """Test cases for marker-driven field injection."""

    def test_implements_interface(self):
        """Test that the processor is a post-processor."""
        assert isinstance(InjectionPostProcessor(ComponentContainer()), IPostProcessor)

    def test_injects_by_field_name_bypassing_setattr(self):
        """Test that fields are filled by name even with a blocking __setattr__."""
        container = ComponentContainer()
        container.register_singletons({"user_repository": InMemoryUserRepository})
        controller = UserController()

        result = InjectionPostProcessor(container).post_process(controller, "userController")

        assert result is controller
        assert controller.user_repository is container.resolve("user_repository")
        assert controller.audit is None

    def test_explicit_name(self):
        """Test that the marker's explicit name is used for lookup."""
        container = ComponentContainer()
        container.register_singletons({"user_repository": InMemoryUserRepository, "auditLog": Plain})
        controller = UserController()

        InjectionPostProcessor(container).post_process(controller, "userController")

        assert isinstance(controller.audit, Plain)

    def test_missing_required_dependency_raises(self):
        """Test that a failed lookup for a required field raises a wrapped error."""
        controller = UserController()

        with pytest.raises(ComponentCreationError) as exc_info:
            InjectionPostProcessor(ComponentContainer()).post_process(controller, "userController")

        assert "user_repository" in str(exc_info.value)
        assert exc_info.value.__cause__ is not None

    def test_inherited_markers(self):
        """Test that markers declared on base classes are honoured."""

        class AdminController(UserController):
            pass

        container = ComponentContainer()
        container.register_singletons({"user_repository": InMemoryUserRepository})
        controller = AdminController()

        InjectionPostProcessor(container).post_process(controller, "adminController")

        assert isinstance(controller.user_repository, InMemoryUserRepository)

    def test_injects_into_proxy_target(self):
        """Test that fields are set on the target behind a proxy."""

        class Service(ABC):
            @abstractmethod
            def run(self): ...

        class ServiceImpl(Service):
            user_repository = Inject()

            def run(self):
                return self.user_repository

        container = ComponentContainer()
        container.register_singletons({"user_repository": InMemoryUserRepository})
        target = ServiceImpl()
        proxy = create_proxy(target, [Service])

        assert InjectionPostProcessor(container).post_process(proxy, "service") is proxy
        assert proxy.run() is container.resolve("user_repository")


class TestInterceptionPostProcessor:
    """Test cases for the proxying post-processor."""

    def test_wraps_instances_with_interfaces(self):
        """Test that eligible instances are proxied."""
        target = InMemoryUserRepository()
        result = InterceptionPostProcessor().post_process(target, "userRepository")

        assert is_proxy(result)
        assert unwrap(result) is target
        assert isinstance(result, UserRepository)
        assert result.find(3) == {"id": 3}

    def test_plain_instances_are_returned_unchanged(self):
        """Test that instances without interfaces are not proxied."""
        target = Plain()
        assert InterceptionPostProcessor().post_process(target, "plain") is target

    def test_transaction_managers_are_excluded(self):
        """Test that infrastructure objects are never proxied."""

        class Manager(ITransactionManager):
            def begin(self, definition=None):
                return MagicMock()

            def commit(self, unit_of_work):
                pass

            def rollback(self, unit_of_work):
                pass

        instance = Manager()
        assert InterceptionPostProcessor().post_process(instance, "transactionManager") is instance

    def test_engines_are_excluded(self):
        """Test that data sources are never proxied."""
        engine = create_engine("sqlite://")
        assert InterceptionPostProcessor().is_eligible(engine) is False

    def test_default_interceptor_is_logging(self):
        """Test the default chain."""
        processor = InterceptionPostProcessor()
        assert len(processor._interceptors) == 1
        assert isinstance(processor._interceptors[0], LoggingInterceptor)

    def test_configured_interceptors_are_used(self):
        """Test that the configured chain wraps every call."""
        calls = []

        class Counting(IMethodInterceptor):
            def invoke(self, invocation):
                calls.append(invocation.method_name)
                return invocation.proceed()

        proxy = InterceptionPostProcessor([Counting()]).post_process(InMemoryUserRepository(), "userRepository")
        proxy.find(1)

        assert calls == ["find"]

    def test_custom_excluded_types(self):
        """Test that excluded types can be configured."""
        processor = InterceptionPostProcessor(excluded_types=[UserRepository])
        assert processor.is_eligible(InMemoryUserRepository()) is False

    def test_callable_components_are_proxied(self):
        """Test that components implementing a callable interface resolve as proxies."""

        class Handler(ABC):
            @abstractmethod
            def __call__(self, event: str) -> str: ...

        class HandlerImpl(Handler):
            def __call__(self, event: str) -> str:
                return event.upper()

        container = ComponentContainer()
        container.add_post_processor(InterceptionPostProcessor())
        container.register_singletons({"handler": HandlerImpl})

        handler = container.resolve("handler")

        assert is_proxy(handler)
        assert handler("saved") == "SAVED"
