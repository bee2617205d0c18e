"""Get and list principal use cases."""

from dbgrant.application.dto.principal_dto import PrincipalDetails, PrincipalSummary
from dbgrant.application.ports import GrantExecutor
from dbgrant.domain.exceptions import NotFoundError


class GetPrincipalUseCase:
    """Directory entry with its managed-store account and current grants."""

    def __init__(
        self,
        unit_of_work_factory: type,
        executor: GrantExecutor,
        default_host: str = "%",
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._executor = executor
        self._default_host = default_host

    async def execute(self, name: str, host: str | None = None) -> PrincipalDetails:
        host = host or self._default_host
        async with self._uow_factory() as uow:
            principal = await uow.principals.get(name)
        if not principal:
            raise NotFoundError("Principal", name)

        details = PrincipalDetails(principal=principal, host=host)
        try:
            details.account = await self._executor.get_principal_info(name, host)
        except NotFoundError:
            # registered, account not created yet
            return details
        details.grants = await self._executor.list_grants(name, host)
        return details


class ListPrincipalsUseCase:
    """Directory entries with the host patterns found on the managed store."""

    def __init__(self, unit_of_work_factory: type, executor: GrantExecutor) -> None:
        self._uow_factory = unit_of_work_factory
        self._executor = executor

    async def execute(self) -> list[PrincipalSummary]:
        async with self._uow_factory() as uow:
            principals = await uow.principals.list_all()
        hosts: dict[str, list[str]] = {}
        for account in await self._executor.list_principals():
            hosts.setdefault(account.principal, []).append(account.host)
        return [PrincipalSummary(principal=p, hosts=hosts.get(p.name, [])) for p in principals]
