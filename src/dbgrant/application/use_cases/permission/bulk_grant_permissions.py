"""Bulk grant use case - create and approve a batch of permissions at once."""

import logging
from datetime import UTC, datetime, timedelta

from dbgrant.application.dto.permission_dto import BulkPermissionInput, PermissionCreateInput
from dbgrant.application.use_cases.permission.approve_permission import (
    ApprovePermissionUseCase,
)
from dbgrant.application.use_cases.permission.create_permission import (
    CreatePermissionUseCase,
)
from dbgrant.domain import validation
from dbgrant.domain.entities import Permission
from dbgrant.domain.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


class BulkGrantPermissionsUseCase:
    """Create one permission per resource and privilege kind, each approved by the requester.

    The whole batch is validated before the first permission is created.
    """

    def __init__(
        self,
        create: CreatePermissionUseCase,
        approve: ApprovePermissionUseCase,
    ) -> None:
        self._create = create
        self._approve = approve

    async def execute(self, actor: str, data: BulkPermissionInput) -> list[Permission]:
        if not data.resources:
            raise InvalidArgumentError("At least one resource is required")
        if not data.privilege_kinds:
            raise InvalidArgumentError("At least one privilege kind is required")
        if data.duration_days < 1:
            raise InvalidArgumentError("duration_days must be at least 1")
        validation.validate_principal(data.principal)
        if data.host is not None:
            validation.validate_host(data.host)
        for resource in data.resources:
            validation.validate_resource(resource)

        start = datetime.now(UTC)
        end = start + timedelta(days=data.duration_days)
        description = data.description or f"Temporary access for {data.duration_days} day(s)"
        logger.info(
            "Bulk grant of %d permission(s) to %s for %d day(s) requested by %s",
            len(data.resources) * len(data.privilege_kinds),
            data.principal,
            data.duration_days,
            actor,
        )

        granted: list[Permission] = []
        for resource in data.resources:
            for kind in data.privilege_kinds:
                created = await self._create.execute(
                    actor,
                    PermissionCreateInput(
                        principal=data.principal,
                        resource=resource,
                        privilege_kind=kind,
                        start_time=start,
                        end_time=end,
                        host=data.host,
                        description=description,
                    ),
                )
                granted.append(await self._approve.execute(created.id, actor))
        return granted
