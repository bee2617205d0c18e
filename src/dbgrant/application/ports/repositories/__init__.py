"""Repository ports."""

from dbgrant.application.ports.repositories.permission_event_repository import (
    PermissionEventRepository,
)
from dbgrant.application.ports.repositories.permission_repository import (
    PermissionRepository,
)
from dbgrant.application.ports.repositories.principal_repository import (
    PrincipalRepository,
)

__all__ = [
    "PermissionEventRepository",
    "PermissionRepository",
    "PrincipalRepository",
]
