"""Domain value objects."""

from dbgrant.domain.value_objects.event_kind import EventKind
from dbgrant.domain.value_objects.permission_status import PermissionStatus
from dbgrant.domain.value_objects.privilege_kind import PrivilegeKind
from dbgrant.domain.value_objects.resource_scope import (
    GLOBAL_RESOURCE,
    ResourceScope,
    ScopeType,
)

__all__ = [
    "EventKind",
    "GLOBAL_RESOURCE",
    "PermissionStatus",
    "PrivilegeKind",
    "ResourceScope",
    "ScopeType",
]
