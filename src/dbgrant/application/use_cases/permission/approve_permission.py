"""Approve permission use case."""

import logging
from dataclasses import replace
from datetime import UTC, datetime
from uuid import UUID

from dbgrant.application.ports import EventPublisher
from dbgrant.application.use_cases.permission.activate_permission import (
    ActivatePermissionUseCase,
)
from dbgrant.domain import validation
from dbgrant.domain.entities import Permission, PermissionEvent
from dbgrant.domain.events import DomainEvent
from dbgrant.domain.exceptions import NotFoundError
from dbgrant.domain.value_objects import EventKind

logger = logging.getLogger(__name__)


class ApprovePermissionUseCase:
    """Approve a pending permission, activating it at once if its start time has come."""

    def __init__(
        self,
        unit_of_work_factory: type,
        publisher: EventPublisher,
        activate: ActivatePermissionUseCase,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._publisher = publisher
        self._activate = activate

    async def execute(self, permission_id: UUID, actor: str) -> Permission:
        now = datetime.now(UTC)
        async with self._uow_factory() as uow:
            permission = await uow.permissions.get_for_update(permission_id)
            if not permission:
                raise NotFoundError("Permission", permission_id)
            permission.approve(actor, now)
            validation.validate_identity(permission.principal, permission.host, permission.resource)
            await uow.permissions.update(permission)
            await uow.events.append(
                PermissionEvent.record(
                    permission.id,
                    EventKind.APPROVED,
                    f"Approved by {actor}",
                    actor=actor,
                    event_time=now,
                )
            )
            snapshot = replace(permission)

        logger.info("Permission %s approved by %s", permission_id, actor)
        self._publisher.publish(DomainEvent(EventKind.APPROVED, snapshot, actor))

        if permission.start_time <= now:
            return await self._activate.execute(permission_id, actor)
        return permission
