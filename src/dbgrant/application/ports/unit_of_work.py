"""Unit of Work port - transactional boundary."""

from collections.abc import AsyncIterator
from typing import Protocol

from dbgrant.application.ports.repositories.permission_event_repository import (
    PermissionEventRepository,
)
from dbgrant.application.ports.repositories.permission_repository import (
    PermissionRepository,
)
from dbgrant.application.ports.repositories.principal_repository import (
    PrincipalRepository,
)


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def permissions(self) -> PermissionRepository: ...

    @property
    def events(self) -> PermissionEventRepository: ...

    @property
    def principals(self) -> PrincipalRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances."""

    async def __call__(self) -> AsyncIterator[UnitOfWork]: ...
