"""List permission events use case - the audit query surface."""

from datetime import datetime
from uuid import UUID

from dbgrant.domain.entities import PermissionEvent
from dbgrant.domain.exceptions import InvalidArgumentError


class ListPermissionEventsUseCase:
    """List audit records by permission, by principal or by time window."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(
        self,
        *,
        permission_id: UUID | None = None,
        principal: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[PermissionEvent]:
        """Exactly one filter: a permission id, a principal, or a start/end pair."""
        has_window = start is not None or end is not None
        given = sum([permission_id is not None, principal is not None, has_window])
        if given != 1:
            raise InvalidArgumentError(
                "Exactly one of permission_id, principal or start/end is required"
            )
        async with self._uow_factory() as uow:
            if permission_id is not None:
                return await uow.events.list_by_permission(permission_id)
            if principal is not None:
                return await uow.events.list_by_principal(principal)
            if start is None or end is None:
                raise InvalidArgumentError("Both start and end are required")
            if end <= start:
                raise InvalidArgumentError("end must be after start")
            return await uow.events.list_between(start, end)
