import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from miraveja_ioc.domain import (
    Isolation,
    ITransactionManager,
    TransactionDefinition,
    TransactionError,
    UnitOfWork,
)

logger = logging.getLogger(__name__)


class DataSourceTransactionManager(ITransactionManager):
    """Transaction manager running each unit of work on its own pooled connection.

    ``begin`` checks a connection out of the engine and opens an explicit
    transaction on it; ``commit`` and ``rollback`` finish that transaction and
    always return the connection to the pool, whatever the outcome.

    Attributes:
        _data_source: The SQLAlchemy engine providing connections.

    Example:
        >>> manager = DataSourceTransactionManager(create_engine("sqlite:///app.db"))
        >>> unit_of_work = manager.begin(TransactionDefinition(isolation=Isolation.SERIALIZABLE))
        >>> try:
        ...     unit_of_work.connection.execute(text("INSERT INTO audit VALUES ('login')"))
        ... except Exception:
        ...     manager.rollback(unit_of_work)
        ...     raise
        ... else:
        ...     manager.commit(unit_of_work)
    """

    def __init__(self, data_source: Optional[Engine] = None) -> None:
        self._data_source = data_source

    @property
    def data_source(self) -> Optional[Engine]:
        return self._data_source

    def set_data_source(self, data_source: Engine) -> None:
        """Setter used by property injection."""
        self._data_source = data_source

    def begin(self, definition: Optional[TransactionDefinition] = None) -> UnitOfWork:
        definition = definition or TransactionDefinition()
        if self._data_source is None:
            raise TransactionError("begin", "No data source configured")

        try:
            connection = self._data_source.connect()
        except SQLAlchemyError as e:
            raise TransactionError("begin", f"Cannot acquire connection: {e}") from e

        try:
            if definition.isolation != Isolation.DEFAULT:
                connection.execution_options(isolation_level=definition.isolation.value)
            transaction = connection.begin()
        except SQLAlchemyError as e:
            connection.close()
            raise TransactionError("begin", str(e)) from e

        logger.debug("Began transaction (isolation=%s, read_only=%s)", definition.isolation, definition.read_only)
        return UnitOfWork(connection=connection, transaction=transaction, is_new_transaction=True)

    def commit(self, unit_of_work: UnitOfWork) -> None:
        self._complete(unit_of_work, "commit")

    def rollback(self, unit_of_work: UnitOfWork) -> None:
        self._complete(unit_of_work, "rollback")

    def _complete(self, unit_of_work: UnitOfWork, operation: str) -> None:
        if unit_of_work.completed:
            raise TransactionError(operation, "Unit of work has already been completed")
        unit_of_work.completed = True

        try:
            if operation == "commit":
                unit_of_work.transaction.commit()
            else:
                unit_of_work.transaction.rollback()
            logger.debug("Transaction %s succeeded", operation)
        except SQLAlchemyError as e:
            raise TransactionError(operation, str(e)) from e
        finally:
            self._release(unit_of_work)

    def _release(self, unit_of_work: UnitOfWork) -> None:
        connection = unit_of_work.connection
        if connection is not None and not connection.closed:
            connection.close()
