"""Drop principal use case."""

import logging

from dbgrant.application.ports import GrantExecutor
from dbgrant.domain.exceptions import InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)


class DropPrincipalUseCase:
    """Remove a principal from the directory and drop its managed-store account.

    Refused while the principal still has permissions that are not REVOKED or
    EXPIRED.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        executor: GrantExecutor,
        default_host: str = "%",
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._executor = executor
        self._default_host = default_host

    async def execute(self, name: str, actor: str, host: str | None = None) -> None:
        host = host or self._default_host
        async with self._uow_factory() as uow:
            if not await uow.principals.exists(name):
                raise NotFoundError("Principal", name)
            live = [
                p for p in await uow.permissions.list_by_principal(name)
                if not p.status.is_terminal
            ]
            if live:
                raise InvalidStateError(
                    f"Principal '{name}' has {len(live)} permission(s) that are not finished"
                )
            try:
                await self._executor.drop_principal(name, host)
            except NotFoundError:
                logger.info("Principal '%s'@'%s' has no account to drop", name, host)
            await uow.principals.remove(name)

        logger.info("Principal '%s'@'%s' dropped by %s", name, host, actor)
