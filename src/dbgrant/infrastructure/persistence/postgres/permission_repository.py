"""PostgreSQL permission repository implementation."""

from datetime import datetime
from uuid import UUID

from psycopg import AsyncConnection

from dbgrant.domain.entities import Permission
from dbgrant.domain.value_objects import PermissionStatus, PrivilegeKind

_COLUMNS = (
    "id, principal, host, resource, privilege_kind, start_time, end_time, status, "
    "description, created_by, created_at, updated_at, approved_by, approved_at, "
    "revoked_by, revoked_at"
)


def _row_to_permission(r: tuple) -> Permission:
    return Permission(
        id=r[0],
        principal=r[1],
        host=r[2],
        resource=r[3],
        privilege_kind=PrivilegeKind(r[4]),
        start_time=r[5],
        end_time=r[6],
        status=PermissionStatus(r[7]),
        description=r[8],
        created_by=r[9],
        created_at=r[10],
        updated_at=r[11],
        approved_by=r[12],
        approved_at=r[13],
        revoked_by=r[14],
        revoked_at=r[15],
    )


class PostgresPermissionRepository:
    """Permission repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, permission_id: UUID) -> Permission | None:
        """Get permission by id."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE id = %s",
            (permission_id,),
        )
        r = await cur.fetchone()
        return _row_to_permission(r) if r else None

    async def get_for_update(self, permission_id: UUID) -> Permission | None:
        """Get permission by id and lock its row for the current transaction."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE id = %s FOR UPDATE",
            (permission_id,),
        )
        r = await cur.fetchone()
        return _row_to_permission(r) if r else None

    async def list_by_principal(self, principal: str) -> list[Permission]:
        """List permissions for principal, newest first."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE principal = %s ORDER BY created_at DESC",
            (principal,),
        )
        return [_row_to_permission(r) for r in await cur.fetchall()]

    async def list_by_status(self, status: PermissionStatus) -> list[Permission]:
        """List permissions in status, newest first."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE status = %s ORDER BY created_at DESC",
            (status.value,),
        )
        return [_row_to_permission(r) for r in await cur.fetchall()]

    async def list_active_expired_as_of(self, moment: datetime) -> list[Permission]:
        """ACTIVE permissions with end_time at or before moment."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission "
            "WHERE status = %s AND end_time <= %s ORDER BY end_time",
            (PermissionStatus.ACTIVE.value, moment),
        )
        return [_row_to_permission(r) for r in await cur.fetchall()]

    async def list_active_expiring_between(
        self, start: datetime, end: datetime
    ) -> list[Permission]:
        """ACTIVE permissions with end_time between start and end, inclusive."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission "
            "WHERE status = %s AND end_time BETWEEN %s AND %s ORDER BY end_time",
            (PermissionStatus.ACTIVE.value, start, end),
        )
        return [_row_to_permission(r) for r in await cur.fetchall()]

    async def create(self, permission: Permission) -> Permission:
        """Create permission."""
        await self._conn.execute(
            f"INSERT INTO permission ({_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                permission.id,
                permission.principal,
                permission.host,
                permission.resource,
                permission.privilege_kind.value,
                permission.start_time,
                permission.end_time,
                permission.status.value,
                permission.description,
                permission.created_by,
                permission.created_at,
                permission.updated_at,
                permission.approved_by,
                permission.approved_at,
                permission.revoked_by,
                permission.revoked_at,
            ),
        )
        return permission

    async def update(self, permission: Permission) -> None:
        """Persist status, end time and transition stamps."""
        await self._conn.execute(
            "UPDATE permission SET status=%s, end_time=%s, updated_at=%s, "
            "approved_by=%s, approved_at=%s, revoked_by=%s, revoked_at=%s WHERE id=%s",
            (
                permission.status.value,
                permission.end_time,
                permission.updated_at,
                permission.approved_by,
                permission.approved_at,
                permission.revoked_by,
                permission.revoked_at,
                permission.id,
            ),
        )
