"""PermissionEvent entity - append-only audit record."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4

from dbgrant.domain.value_objects import EventKind

SYSTEM_ACTOR = "SYSTEM"


@dataclass(frozen=True)
class PermissionEvent:
    """One audit row: a transition or a failed attempt at one."""

    id: UUID
    permission_id: UUID
    kind: EventKind
    actor: str
    detail: str
    event_time: datetime
    created_at: datetime

    @classmethod
    def record(
        cls,
        permission_id: UUID,
        kind: EventKind,
        detail: str,
        actor: str = SYSTEM_ACTOR,
        event_time: datetime | None = None,
    ) -> "PermissionEvent":
        now = datetime.now(UTC)
        return cls(
            id=uuid4(),
            permission_id=permission_id,
            kind=kind,
            actor=actor,
            detail=detail,
            event_time=event_time or now,
            created_at=now,
        )
