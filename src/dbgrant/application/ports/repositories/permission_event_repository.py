"""Permission event (audit trail) repository port."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from dbgrant.domain.entities import PermissionEvent


class PermissionEventRepository(Protocol):
    """Append-only store for permission audit records."""

    async def append(self, event: PermissionEvent) -> PermissionEvent: ...

    async def list_by_permission(self, permission_id: UUID) -> list[PermissionEvent]: ...

    async def list_by_principal(self, principal: str) -> list[PermissionEvent]: ...

    async def list_between(self, start: datetime, end: datetime) -> list[PermissionEvent]: ...
