"""Domain entities."""

from dbgrant.domain.entities.permission import AUTO_REVOKE_PREFIX, Permission
from dbgrant.domain.entities.permission_event import SYSTEM_ACTOR, PermissionEvent
from dbgrant.domain.entities.principal import Principal, PrincipalInfo

__all__ = [
    "AUTO_REVOKE_PREFIX",
    "Permission",
    "PermissionEvent",
    "Principal",
    "PrincipalInfo",
    "SYSTEM_ACTOR",
]
