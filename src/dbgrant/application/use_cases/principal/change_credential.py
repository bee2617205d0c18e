"""Change principal credential use case."""

import logging

from dbgrant.application.ports import GrantExecutor
from dbgrant.domain.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class ChangePrincipalCredentialUseCase:
    """Set a new credential on a registered principal's managed-store account."""

    def __init__(
        self,
        unit_of_work_factory: type,
        executor: GrantExecutor,
        default_host: str = "%",
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._executor = executor
        self._default_host = default_host

    async def execute(
        self, name: str, credential: str, actor: str, host: str | None = None
    ) -> None:
        host = host or self._default_host
        async with self._uow_factory() as uow:
            if not await uow.principals.exists(name):
                raise NotFoundError("Principal", name)
        await self._executor.alter_principal_credential(name, host, credential)
        logger.info("Credential for '%s'@'%s' changed by %s", name, host, actor)
