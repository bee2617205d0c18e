"""Create permission use case."""

import logging
from dataclasses import replace
from datetime import UTC, datetime
from uuid import uuid4

from dbgrant.application.dto.permission_dto import PermissionCreateInput
from dbgrant.application.ports import EventPublisher, GrantExecutor
from dbgrant.domain import validation
from dbgrant.domain.entities import Permission, PermissionEvent
from dbgrant.domain.events import DomainEvent
from dbgrant.domain.exceptions import NotFoundError
from dbgrant.domain.value_objects import EventKind, PermissionStatus

logger = logging.getLogger(__name__)


class CreatePermissionUseCase:
    """Record a grant request in PENDING."""

    def __init__(
        self,
        unit_of_work_factory: type,
        publisher: EventPublisher,
        default_host: str = "%",
        executor: GrantExecutor | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._publisher = publisher
        self._default_host = default_host
        self._executor = executor

    async def execute(self, actor: str, data: PermissionCreateInput) -> Permission:
        """Validate the request, check the principal is known, store it and emit CREATED.

        With an executor, the resource must also exist on the managed store.
        """
        now = datetime.now(UTC)
        permission = Permission(
            id=uuid4(),
            principal=data.principal,
            host=data.host or self._default_host,
            resource=data.resource,
            privilege_kind=data.privilege_kind,
            start_time=data.start_time,
            end_time=data.end_time,
            status=PermissionStatus.PENDING,
            description=data.description,
            created_by=actor,
            created_at=now,
            updated_at=now,
        )
        validation.validate_permission(permission, now)
        if self._executor is not None and not await self._executor.resource_exists(
            permission.resource
        ):
            raise NotFoundError("Resource", permission.resource)

        async with self._uow_factory() as uow:
            if not await uow.principals.exists(permission.principal):
                raise NotFoundError("Principal", permission.principal)
            await uow.permissions.create(permission)
            await uow.events.append(
                PermissionEvent.record(
                    permission.id,
                    EventKind.CREATED,
                    f"Requested {permission.privilege_kind} on {permission.resource} "
                    f"for {permission.account} until {permission.end_time.isoformat()}",
                    actor=actor,
                    event_time=now,
                )
            )
            snapshot = replace(permission)

        logger.info("Created permission %s for %s", permission.id, permission.account)
        self._publisher.publish(DomainEvent(EventKind.CREATED, snapshot, actor))
        return permission
