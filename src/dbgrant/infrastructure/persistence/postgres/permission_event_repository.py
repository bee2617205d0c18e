"""PostgreSQL permission event repository implementation."""

from datetime import datetime
from uuid import UUID

from psycopg import AsyncConnection

from dbgrant.domain.entities import PermissionEvent
from dbgrant.domain.value_objects import EventKind


def _row_to_event(r: tuple) -> PermissionEvent:
    return PermissionEvent(
        id=r[0],
        permission_id=r[1],
        kind=EventKind(r[2]),
        actor=r[3],
        detail=r[4],
        event_time=r[5],
        created_at=r[6],
    )


class PostgresPermissionEventRepository:
    """Append-only audit trail. There is no update or delete."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def append(self, event: PermissionEvent) -> PermissionEvent:
        await self._conn.execute(
            "INSERT INTO permission_event "
            "(id, permission_id, kind, actor, detail, event_time, created_at) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s)",
            (
                event.id,
                event.permission_id,
                event.kind.value,
                event.actor,
                event.detail,
                event.event_time,
                event.created_at,
            ),
        )
        return event

    async def list_by_permission(self, permission_id: UUID) -> list[PermissionEvent]:
        cur = await self._conn.execute(
            "SELECT id, permission_id, kind, actor, detail, event_time, created_at "
            "FROM permission_event WHERE permission_id = %s ORDER BY event_time, created_at",
            (permission_id,),
        )
        return [_row_to_event(r) for r in await cur.fetchall()]

    async def list_by_principal(self, principal: str) -> list[PermissionEvent]:
        """Events of every permission held by principal."""
        cur = await self._conn.execute(
            "SELECT e.id, e.permission_id, e.kind, e.actor, e.detail, e.event_time, e.created_at "
            "FROM permission_event e JOIN permission p ON p.id = e.permission_id "
            "WHERE p.principal = %s ORDER BY e.event_time, e.created_at",
            (principal,),
        )
        return [_row_to_event(r) for r in await cur.fetchall()]

    async def list_between(self, start: datetime, end: datetime) -> list[PermissionEvent]:
        """Events with start <= event_time < end."""
        cur = await self._conn.execute(
            "SELECT id, permission_id, kind, actor, detail, event_time, created_at "
            "FROM permission_event WHERE event_time >= %s AND event_time < %s "
            "ORDER BY event_time, created_at",
            (start, end),
        )
        return [_row_to_event(r) for r in await cur.fetchall()]
