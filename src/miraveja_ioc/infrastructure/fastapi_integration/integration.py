from typing import Any, Callable, Iterator, Optional

from miraveja_ioc.domain import IContainer, ITransactionManager, TransactionDefinition, UnitOfWork


def create_fastapi_dependency(container: IContainer, name: str) -> Callable[[], Any]:
    """Create a FastAPI Depends() callable that resolves a component by name.

    The resolved instance follows the component's scope in the container
    (singleton or transient).

    Args:
        container: The container to resolve components from.
        name: The component name to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> get_user_service = create_fastapi_dependency(container, "userService")
        >>>
        >>> @app.get("/users/{user_id}")
        >>> async def get_user(user_id: int, service: UserService = Depends(get_user_service)):
        ...     return service.find(user_id)
    """

    def dependency() -> Any:
        """Resolve the component from the container."""
        return container.resolve(name)

    return dependency


def create_transaction_dependency(
    transaction_manager: ITransactionManager,
    definition: Optional[TransactionDefinition] = None,
) -> Callable[[], Iterator[UnitOfWork]]:
    """Create a FastAPI dependency that wraps the request in a unit of work.

    The unit of work is committed once the endpoint returns and rolled back if
    the endpoint raises or marks it rollback-only.

    Args:
        transaction_manager: Manager opening the unit of work.
        definition: Transaction definition used for every request.

    Returns:
        A generator dependency yielding the request's unit of work.

    Example:
        >>> get_unit_of_work = create_transaction_dependency(manager)
        >>>
        >>> @app.post("/audit")
        >>> def audit(uow: UnitOfWork = Depends(get_unit_of_work)):
        ...     uow.connection.execute(text("INSERT INTO audit VALUES ('hit')"))
    """

    def transaction_dependency() -> Iterator[UnitOfWork]:
        """Open a unit of work for the duration of the request."""
        unit_of_work = transaction_manager.begin(definition)
        try:
            yield unit_of_work
        except BaseException:
            # Includes GeneratorExit when the request is torn down early
            transaction_manager.rollback(unit_of_work)
            raise
        if unit_of_work.rollback_only:
            transaction_manager.rollback(unit_of_work)
        else:
            transaction_manager.commit(unit_of_work)

    return transaction_dependency
