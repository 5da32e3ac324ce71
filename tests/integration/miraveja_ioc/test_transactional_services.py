"""Integration tests for transactional services wired by the container."""

from abc import ABC, abstractmethod

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from miraveja_ioc import (
    ComponentContainer,
    ComponentDescriptor,
    Inject,
    InjectionPostProcessor,
    InterceptionPostProcessor,
    LoggingInterceptor,
    TransactionInterceptor,
    current_unit_of_work,
    is_proxy,
    ref,
)
from miraveja_ioc.infrastructure.sqlalchemy_integration import (
    DataSourceSettings,
    DataSourceTransactionManager,
    create_data_source,
)


class InsufficientFunds(Exception):
    pass


class AccountRepository:
    """Plain data access class; runs on the caller's unit of work."""

    def insert(self, owner: str, balance: int) -> int:
        result = current_unit_of_work().connection.execute(
            text("INSERT INTO accounts (owner, balance) VALUES (:owner, :balance)"),
            {"owner": owner, "balance": balance},
        )
        return result.lastrowid

    def add(self, account_id: int, delta: int) -> None:
        current_unit_of_work().connection.execute(
            text("UPDATE accounts SET balance = balance + :delta WHERE id = :id"),
            {"delta": delta, "id": account_id},
        )

    def balance(self, account_id: int) -> int:
        return (
            current_unit_of_work()
            .connection.execute(text("SELECT balance FROM accounts WHERE id = :id"), {"id": account_id})
            .scalar_one()
        )


class AccountService(ABC):
    @abstractmethod
    def open(self, owner: str, balance: int) -> int: ...

    @abstractmethod
    def withdraw(self, account_id: int, amount: int) -> int: ...

    @abstractmethod
    def preview_withdraw(self, account_id: int, amount: int) -> int: ...

    @abstractmethod
    def balance(self, account_id: int) -> int: ...


class AccountServiceImpl(AccountService):
    account_repository = Inject(name="accountRepository")

    def __init__(self):
        self.overdraft_limit = 0

    def set_overdraft_limit(self, overdraft_limit: int) -> None:
        self.overdraft_limit = overdraft_limit

    def open(self, owner: str, balance: int) -> int:
        return self.account_repository.insert(owner, balance)

    def withdraw(self, account_id: int, amount: int) -> int:
        self.account_repository.add(account_id, -amount)
        balance = self.account_repository.balance(account_id)
        if balance < -self.overdraft_limit:
            raise InsufficientFunds(f"balance would be {balance}")
        return balance

    def preview_withdraw(self, account_id: int, amount: int) -> int:
        self.account_repository.add(account_id, -amount)
        current_unit_of_work().set_rollback_only()
        return self.account_repository.balance(account_id)

    def balance(self, account_id: int) -> int:
        return self.account_repository.balance(account_id)


@pytest.fixture
def database_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'bank.db'}"
    engine = create_engine(url)
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE accounts (id INTEGER PRIMARY KEY, owner TEXT, balance INTEGER)"))
    engine.dispose()
    return url


@pytest.fixture
def container(database_url):
    container = ComponentContainer()
    container.register_singletons(
        {
            "dataSource": ComponentDescriptor(
                component_type=Engine,
                factory=lambda url: create_data_source(DataSourceSettings(url=url, _env_file=None)),
                constructor_args=(database_url,),
            ),
            "transactionManager": ComponentDescriptor(
                component_type=DataSourceTransactionManager,
                properties={"dataSource": ref("dataSource")},
            ),
            "accountRepository": AccountRepository,
            "accountService": ComponentDescriptor(
                component_type=AccountServiceImpl,
                properties={"overdraftLimit": "50"},
            ),
        }
    )
    container.add_post_processor(InjectionPostProcessor(container))
    container.add_post_processor(
        InterceptionPostProcessor(
            [LoggingInterceptor(), TransactionInterceptor(container.resolve("transactionManager"))]
        )
    )
    yield container
    container.resolve("dataSource").dispose()


class TestTransactionalServices:
    """Test services whose calls run inside units of work."""

    def test_infrastructure_is_not_proxied(self, container):
        """Test that the data source and transaction manager stay unwrapped."""
        assert isinstance(container.resolve("dataSource"), Engine)
        assert isinstance(container.resolve("transactionManager"), DataSourceTransactionManager)
        assert is_proxy(container.resolve("accountService"))

    def test_transaction_manager_is_wired(self, container):
        """Test that the data source is injected through the setter."""
        manager = container.resolve("transactionManager")
        assert manager.data_source is container.resolve("dataSource")

    def test_committed_work_is_visible(self, container):
        """Test that a successful call commits."""
        service = container.resolve("accountService")

        account_id = service.open("ana", 100)

        assert service.balance(account_id) == 100
        assert service.withdraw(account_id, 120) == -20

    def test_failed_call_rolls_back(self, container):
        """Test that an exception undoes the call's writes and propagates."""
        service = container.resolve("accountService")
        account_id = service.open("ana", 100)

        with pytest.raises(InsufficientFunds):
            service.withdraw(account_id, 500)

        assert service.balance(account_id) == 100

    def test_rollback_only_call_discards_writes(self, container):
        """Test that a call marking its unit of work rollback-only leaves no trace."""
        service = container.resolve("accountService")
        account_id = service.open("ana", 100)

        assert service.preview_withdraw(account_id, 30) == 70
        assert service.balance(account_id) == 100

    def test_no_unit_of_work_outside_calls(self, container):
        """Test that the current unit of work is only visible during a call."""
        service = container.resolve("accountService")
        service.open("ana", 10)
        assert current_unit_of_work() is None
