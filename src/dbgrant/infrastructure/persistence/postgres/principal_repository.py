"""PostgreSQL principal directory implementation."""

from psycopg import AsyncConnection

from dbgrant.domain.entities import Principal


def _row_to_principal(r: tuple) -> Principal:
    return Principal(name=r[0], display_name=r[1], created_at=r[2])


class PostgresPrincipalRepository:
    """Principal directory backed by the ``principal`` table."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def exists(self, name: str) -> bool:
        cur = await self._conn.execute(
            "SELECT 1 FROM principal WHERE name = %s",
            (name,),
        )
        return await cur.fetchone() is not None

    async def get(self, name: str) -> Principal | None:
        cur = await self._conn.execute(
            "SELECT name, display_name, created_at FROM principal WHERE name = %s",
            (name,),
        )
        r = await cur.fetchone()
        return _row_to_principal(r) if r else None

    async def list_all(self) -> list[Principal]:
        cur = await self._conn.execute(
            "SELECT name, display_name, created_at FROM principal ORDER BY name"
        )
        return [_row_to_principal(r) for r in await cur.fetchall()]

    async def add(self, principal: Principal) -> Principal:
        await self._conn.execute(
            "INSERT INTO principal (name, display_name, created_at) VALUES (%s, %s, %s)",
            (principal.name, principal.display_name, principal.created_at),
        )
        return principal

    async def remove(self, name: str) -> None:
        await self._conn.execute("DELETE FROM principal WHERE name = %s", (name,))
