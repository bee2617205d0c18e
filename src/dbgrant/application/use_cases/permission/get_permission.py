"""Get and list permission use cases."""

from datetime import datetime
from uuid import UUID

from dbgrant.domain.entities import Permission
from dbgrant.domain.exceptions import InvalidArgumentError, NotFoundError
from dbgrant.domain.value_objects import PermissionStatus


class GetPermissionUseCase:
    """Get permission by id."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, permission_id: UUID) -> Permission:
        async with self._uow_factory() as uow:
            permission = await uow.permissions.get_by_id(permission_id)
            if not permission:
                raise NotFoundError("Permission", permission_id)
            return permission


class ListPermissionsUseCase:
    """List permissions by principal and/or status."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(
        self,
        *,
        principal: str | None = None,
        status: PermissionStatus | None = None,
    ) -> list[Permission]:
        if principal is None and status is None:
            raise InvalidArgumentError("Filter by principal or status is required")
        async with self._uow_factory() as uow:
            if principal is not None:
                permissions = await uow.permissions.list_by_principal(principal)
                if status is not None:
                    permissions = [p for p in permissions if p.status == status]
                return permissions
            return await uow.permissions.list_by_status(status)


class ListExpiringPermissionsUseCase:
    """ACTIVE permissions whose end time falls between two instants, soonest first."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, start: datetime, end: datetime) -> list[Permission]:
        if end < start:
            raise InvalidArgumentError("end must not be before start")
        async with self._uow_factory() as uow:
            return await uow.permissions.list_active_expiring_between(start, end)
