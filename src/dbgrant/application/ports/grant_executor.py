"""Grant executor port - privilege and account changes on the managed store."""

from typing import Protocol

from dbgrant.domain.entities import Permission, PrincipalInfo


class GrantExecutor(Protocol):
    """Port used by the event orchestrator, the expiration sweeper and the
    principal use cases."""

    async def grant_with_auto_revoke(self, permission: Permission) -> None: ...

    async def revoke_now(self, permission: Permission) -> None: ...

    async def reschedule_auto_revoke(self, permission: Permission) -> None: ...

    async def is_event_scheduler_enabled(self) -> bool: ...

    async def enable_event_scheduler(self) -> None: ...

    async def create_principal(self, principal: str, host: str, credential: str) -> None: ...

    async def drop_principal(self, principal: str, host: str) -> None: ...

    async def alter_principal_credential(
        self, principal: str, host: str, credential: str
    ) -> None: ...

    async def principal_exists(self, principal: str, host: str) -> bool: ...

    async def list_principals(self) -> list[PrincipalInfo]: ...

    async def get_principal_info(self, principal: str, host: str) -> PrincipalInfo: ...

    async def list_grants(self, principal: str, host: str) -> list[str]: ...

    async def resource_exists(self, resource: str) -> bool: ...
