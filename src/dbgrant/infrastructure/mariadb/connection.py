"""MariaDB async connection pool for the managed store."""

import logging
from collections.abc import Sequence
from typing import Any

import aiomysql
import pymysql

from dbgrant.application.ports.managed_store import DataAccessError

logger = logging.getLogger(__name__)


def _translate(error: pymysql.err.MySQLError) -> DataAccessError:
    code = error.args[0] if error.args and isinstance(error.args[0], int) else None
    message = str(error.args[1]) if len(error.args) > 1 else str(error)
    return DataAccessError(message, code=code, cause=error)


class MariaDBConnection:
    """Pooled connection to the managed MariaDB server.

    The pool is not opened on construction. Caller must ``await open()`` before
    use (done by the service lifespan) and ``await close()`` on shutdown. Each
    call acquires a connection for its own round-trip only. The session time
    zone is pinned to UTC so scheduled events fire at the stored end time.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int,
        user: str,
        password: str,
        database: str | None = None,
        min_size: int = 1,
        max_size: int = 5,
        connect_timeout: int = 10,
    ) -> None:
        self._params = {
            "host": host,
            "port": port,
            "user": user,
            "password": password,
            "db": database,
            "minsize": min_size,
            "maxsize": max_size,
            "connect_timeout": connect_timeout,
            "autocommit": True,
            "charset": "utf8mb4",
            "init_command": "SET time_zone = '+00:00'",
        }
        self._pool: aiomysql.Pool | None = None

    async def open(self) -> None:
        if self._pool is not None:
            return
        try:
            self._pool = await aiomysql.create_pool(**self._params)
        except pymysql.err.MySQLError as e:
            raise _translate(e) from e
        logger.info(
            "Opened managed store pool to %s:%s", self._params["host"], self._params["port"]
        )

    async def close(self) -> None:
        if self._pool is None:
            return
        self._pool.close()
        await self._pool.wait_closed()
        self._pool = None

    def _require_pool(self) -> aiomysql.Pool:
        if self._pool is None:
            raise DataAccessError("Managed store pool is not open")
        return self._pool

    async def _run(self, statement: str, params: Sequence[Any] | None, fetch: bool) -> Any:
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(statement, tuple(params) if params else None)
                    if fetch:
                        return list(await cur.fetchall())
                    return cur.rowcount or 0
        except pymysql.err.MySQLError as e:
            raise _translate(e) from e

    async def execute(self, statement: str) -> None:
        """Run a statement without parameters."""
        await self._run(statement, None, fetch=False)

    async def query(self, statement: str, params: Sequence[Any] = ()) -> list[tuple]:
        """Run a parameterized query and return all rows."""
        return await self._run(statement, params, fetch=True)

    async def update(self, statement: str, params: Sequence[Any]) -> int:
        """Run a parameterized statement and return the affected row count."""
        return await self._run(statement, params, fetch=False)
