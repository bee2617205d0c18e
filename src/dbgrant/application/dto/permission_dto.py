"""Permission DTOs."""

from dataclasses import dataclass
from datetime import datetime

from dbgrant.domain.value_objects import PrivilegeKind


@dataclass
class PermissionCreateInput:
    """Input for requesting a time-bounded grant."""

    principal: str
    resource: str
    privilege_kind: PrivilegeKind
    start_time: datetime
    end_time: datetime
    host: str | None = None
    description: str | None = None


@dataclass
class BulkPermissionInput:
    """One principal, several resources and privilege kinds, one duration.

    Every resource and privilege kind pair becomes its own permission, starting
    now and ending ``duration_days`` later.
    """

    principal: str
    resources: list[str]
    privilege_kinds: list[PrivilegeKind]
    duration_days: int
    host: str | None = None
    description: str | None = None
