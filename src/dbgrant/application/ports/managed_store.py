"""Managed store port - SQL connection to the MariaDB server being administered."""

from collections.abc import Sequence
from typing import Any, Protocol

from dbgrant.domain.exceptions import DbGrantError


class DataAccessError(DbGrantError):
    """Driver-level failure talking to the managed store.

    ``code`` is the server or client error number when the driver reports one.
    """

    def __init__(self, message: str, *, code: int | None = None, cause: BaseException | None = None) -> None:
        super().__init__(message, cause=cause)
        self.code = code


class ManagedStoreConnection(Protocol):
    """Port for statement execution on the managed store."""

    async def execute(self, statement: str) -> None: ...

    async def query(self, statement: str, params: Sequence[Any] = ()) -> list[tuple]: ...

    async def update(self, statement: str, params: Sequence[Any]) -> int: ...
