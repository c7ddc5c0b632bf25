from abc import ABC, abstractmethod
from types import TracebackType


class UnitOfWork(ABC):
    """
    Transaction boundary for writes that must land together, such as an
    account and its credential.

    Used as ``async with uow: ...; await uow.commit()``. Writes not committed
    when the block exits are discarded.
    """

    async def __aenter__(self) -> "UnitOfWork":
        return self

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...

    @abstractmethod
    async def commit(self) -> None:
        """
        Raises:
            PersistenceError: ``database_error`` if the store rejects the writes
        """

    @abstractmethod
    async def rollback(self) -> None: ...
