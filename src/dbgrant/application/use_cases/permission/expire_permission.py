"""Expire permission use case."""

import logging
from dataclasses import replace
from datetime import UTC, datetime
from uuid import UUID

from dbgrant.application.ports import EventPublisher
from dbgrant.domain.entities import SYSTEM_ACTOR, Permission
from dbgrant.domain.events import DomainEvent
from dbgrant.domain.exceptions import NotFoundError
from dbgrant.domain.value_objects import EventKind

logger = logging.getLogger(__name__)


class ExpirePermissionUseCase:
    """Finalize an ACTIVE permission whose end time has passed."""

    def __init__(self, unit_of_work_factory: type, publisher: EventPublisher) -> None:
        self._uow_factory = unit_of_work_factory
        self._publisher = publisher

    async def execute(self, permission_id: UUID, now: datetime | None = None) -> Permission:
        now = now or datetime.now(UTC)
        async with self._uow_factory() as uow:
            permission = await uow.permissions.get_for_update(permission_id)
            if not permission:
                raise NotFoundError("Permission", permission_id)
            permission.expire(now)
            await uow.permissions.update(permission)
            snapshot = replace(permission)

        logger.info("Permission %s expired", permission_id)
        self._publisher.publish(DomainEvent(EventKind.EXPIRED, snapshot, SYSTEM_ACTOR))
        return permission
