import logging
from contextvars import ContextVar
from typing import Any, Optional

from miraveja_ioc.domain import (
    IMethodInterceptor,
    IMethodInvocation,
    ITransactionManager,
    TransactionDefinition,
    UnitOfWork,
)

logger = logging.getLogger(__name__)

_current_unit_of_work: ContextVar[Optional[UnitOfWork]] = ContextVar("current_unit_of_work", default=None)


def current_unit_of_work() -> Optional[UnitOfWork]:
    """Return the unit of work opened by the innermost running TransactionInterceptor.

    Example:
        >>> class AccountServiceImpl(AccountService):
        ...     def transfer(self, amount: int) -> None:
        ...         if amount <= 0:
        ...             current_unit_of_work().set_rollback_only()
    """
    return _current_unit_of_work.get()


class LoggingInterceptor(IMethodInterceptor):
    """Logs before and after each proxied call and returns the result unchanged."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.INFO) -> None:
        self._log = log or logger
        self._level = level

    def invoke(self, invocation: IMethodInvocation) -> Any:
        name = f"{type(invocation.target).__name__}.{invocation.method.__name__}"
        self._log.log(self._level, "[AOP] Before: %s", name)
        try:
            result = invocation.proceed()
        except Exception:
            self._log.log(self._level, "[AOP] Failed: %s", name)
            raise
        self._log.log(self._level, "[AOP] After: %s", name)
        return result


class TransactionInterceptor(IMethodInterceptor):
    """Runs each proxied call inside its own unit of work.

    The unit of work is committed when the call returns normally and rolled back
    when it raises, interrupts included (the exception is re-raised), or when it
    was marked rollback-only. A failing commit is not followed by a rollback.

    Attributes:
        _transaction_manager: Manager opening and closing the units of work.
        _definition: Definition passed to every ``begin``.
    """

    def __init__(
        self,
        transaction_manager: ITransactionManager,
        definition: Optional[TransactionDefinition] = None,
    ) -> None:
        self._transaction_manager = transaction_manager
        self._definition = definition or TransactionDefinition()

    def invoke(self, invocation: IMethodInvocation) -> Any:
        unit_of_work = self._transaction_manager.begin(self._definition)
        token = _current_unit_of_work.set(unit_of_work)
        try:
            result = invocation.proceed()
        except BaseException:
            # Interrupts end the unit of work too
            self._transaction_manager.rollback(unit_of_work)
            raise
        finally:
            _current_unit_of_work.reset(token)

        if unit_of_work.rollback_only:
            logger.debug("Unit of work for %r marked rollback-only", invocation)
            self._transaction_manager.rollback(unit_of_work)
        else:
            self._transaction_manager.commit(unit_of_work)
        return result
