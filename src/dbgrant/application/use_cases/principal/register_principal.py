"""Register principal use case."""

import logging
from datetime import UTC, datetime

from dbgrant.application.dto.principal_dto import PrincipalCreateInput
from dbgrant.application.ports import GrantExecutor
from dbgrant.domain import validation
from dbgrant.domain.entities import Principal
from dbgrant.domain.exceptions import InvalidStateError

logger = logging.getLogger(__name__)


class RegisterPrincipalUseCase:
    """Add a name to the principal directory, creating its account when a credential is given."""

    def __init__(
        self,
        unit_of_work_factory: type,
        executor: GrantExecutor,
        default_host: str = "%",
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._executor = executor
        self._default_host = default_host

    async def execute(self, actor: str, data: PrincipalCreateInput) -> Principal:
        host = data.host or self._default_host
        validation.validate_principal(data.name)
        validation.validate_host(host)
        if data.credential is not None:
            validation.validate_credential(data.credential)

        principal = Principal(
            name=data.name,
            display_name=data.display_name,
            created_at=datetime.now(UTC),
        )
        async with self._uow_factory() as uow:
            if await uow.principals.exists(data.name):
                raise InvalidStateError(f"Principal '{data.name}' is already registered")
            # account first, directory row second
            if data.credential is not None:
                await self._executor.create_principal(data.name, host, data.credential)
            await uow.principals.add(principal)

        logger.info("Principal '%s' registered by %s", data.name, actor)
        return principal
