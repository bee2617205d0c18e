"""Revoke permission use case."""

import logging
from dataclasses import replace
from datetime import UTC, datetime
from uuid import UUID

from dbgrant.application.ports import EventPublisher
from dbgrant.domain.entities import Permission
from dbgrant.domain.events import DomainEvent
from dbgrant.domain.exceptions import NotFoundError
from dbgrant.domain.value_objects import EventKind

logger = logging.getLogger(__name__)


class RevokePermissionUseCase:
    """Withdraw a permission before its end time."""

    def __init__(self, unit_of_work_factory: type, publisher: EventPublisher) -> None:
        self._uow_factory = unit_of_work_factory
        self._publisher = publisher

    async def execute(self, permission_id: UUID, actor: str) -> Permission:
        """Mark the permission REVOKED; the privileges are dropped when the event is consumed."""
        async with self._uow_factory() as uow:
            permission = await uow.permissions.get_for_update(permission_id)
            if not permission:
                raise NotFoundError("Permission", permission_id)
            previous_status = permission.status
            permission.revoke(actor, datetime.now(UTC))
            await uow.permissions.update(permission)
            snapshot = replace(permission)

        logger.info("Permission %s revoked by %s", permission_id, actor)
        self._publisher.publish(
            DomainEvent(EventKind.REVOKED, snapshot, actor, previous_status=previous_status)
        )
        return permission
