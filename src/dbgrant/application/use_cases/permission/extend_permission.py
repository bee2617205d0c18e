"""Extend permission use case."""

import logging
from dataclasses import replace
from datetime import UTC, datetime
from uuid import UUID

from dbgrant.application.ports import EventPublisher
from dbgrant.domain.entities import Permission, PermissionEvent
from dbgrant.domain.events import DomainEvent
from dbgrant.domain.exceptions import NotFoundError
from dbgrant.domain.value_objects import EventKind

logger = logging.getLogger(__name__)


class ExtendPermissionUseCase:
    """Push a permission's end time later."""

    def __init__(self, unit_of_work_factory: type, publisher: EventPublisher) -> None:
        self._uow_factory = unit_of_work_factory
        self._publisher = publisher

    async def execute(
        self, permission_id: UUID, new_end_time: datetime, actor: str
    ) -> Permission:
        now = datetime.now(UTC)
        async with self._uow_factory() as uow:
            permission = await uow.permissions.get_for_update(permission_id)
            if not permission:
                raise NotFoundError("Permission", permission_id)
            previous = permission.extend(new_end_time, now)
            await uow.permissions.update(permission)
            await uow.events.append(
                PermissionEvent.record(
                    permission.id,
                    EventKind.EXTENDED,
                    f"End time extended from {previous.isoformat()} "
                    f"to {new_end_time.isoformat()}",
                    actor=actor,
                    event_time=now,
                )
            )
            snapshot = replace(permission)

        logger.info(
            "Permission %s extended to %s by %s", permission_id, new_end_time.isoformat(), actor
        )
        self._publisher.publish(
            DomainEvent(EventKind.EXTENDED, snapshot, actor, previous_end_time=previous)
        )
        return permission
