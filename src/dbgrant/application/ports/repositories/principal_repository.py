"""Principal directory port."""

from typing import Protocol

from dbgrant.domain.entities import Principal


class PrincipalRepository(Protocol):
    """Names that may receive grants."""

    async def exists(self, name: str) -> bool: ...

    async def get(self, name: str) -> Principal | None: ...

    async def list_all(self) -> list[Principal]: ...

    async def add(self, principal: Principal) -> Principal: ...

    async def remove(self, name: str) -> None: ...
