"""Domain events emitted by lifecycle transitions."""

from dataclasses import dataclass
from datetime import datetime

from dbgrant.domain.entities import SYSTEM_ACTOR, Permission
from dbgrant.domain.value_objects import EventKind, PermissionStatus


@dataclass(frozen=True)
class DomainEvent:
    """A lifecycle transition that already committed.

    ``permission`` is a snapshot taken at emission time. ``previous_end_time``
    is set only for EXTENDED, ``previous_status`` only for REVOKED.
    """

    kind: EventKind
    permission: Permission
    actor: str = SYSTEM_ACTOR
    previous_end_time: datetime | None = None
    previous_status: PermissionStatus | None = None

    @property
    def key(self) -> str:
        """Routing key; events for one permission share a worker."""
        return str(self.permission.id)
