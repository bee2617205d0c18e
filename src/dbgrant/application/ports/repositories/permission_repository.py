"""Permission repository port."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from dbgrant.domain.entities import Permission
from dbgrant.domain.value_objects import PermissionStatus


class PermissionRepository(Protocol):
    """Port for permission persistence."""

    async def get_by_id(self, permission_id: UUID) -> Permission | None: ...

    async def get_for_update(self, permission_id: UUID) -> Permission | None:
        """Get permission and hold a row lock until the transaction ends."""
        ...

    async def list_by_principal(self, principal: str) -> list[Permission]: ...

    async def list_by_status(self, status: PermissionStatus) -> list[Permission]: ...

    async def list_active_expired_as_of(self, moment: datetime) -> list[Permission]:
        """ACTIVE permissions whose end time is at or before ``moment``."""
        ...

    async def list_active_expiring_between(
        self, start: datetime, end: datetime
    ) -> list[Permission]:
        """ACTIVE permissions whose end time falls within ``[start, end]``."""
        ...

    async def create(self, permission: Permission) -> Permission: ...

    async def update(self, permission: Permission) -> None: ...
