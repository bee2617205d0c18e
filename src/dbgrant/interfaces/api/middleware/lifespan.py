"""Lifespan middleware - opens shared resources on startup, closes them on shutdown."""

import logging
from typing import Any

from psycopg_pool import AsyncConnectionPool

from dbgrant.application.services.expiration_sweeper import ExpirationSweeper
from dbgrant.infrastructure.events.keyed_dispatcher import KeyedDispatcher
from dbgrant.infrastructure.mariadb.connection import MariaDBConnection

logger = logging.getLogger(__name__)


class ResourceLifespanMiddleware:
    """Opens pools and starts background workers when the ASGI server starts."""

    def __init__(
        self,
        pool: AsyncConnectionPool,
        managed_store: MariaDBConnection,
        dispatcher: KeyedDispatcher,
        sweeper: ExpirationSweeper,
    ) -> None:
        self._pool = pool
        self._managed_store = managed_store
        self._dispatcher = dispatcher
        self._sweeper = sweeper

    async def process_startup(
        self, scope: dict[str, Any], event: dict[str, Any]
    ) -> None:
        await self._pool.open()
        await self._managed_store.open()
        await self._dispatcher.start()
        await self._sweeper.start()
        logger.info("dbgrant started")

    async def process_shutdown(
        self, scope: dict[str, Any], event: dict[str, Any]
    ) -> None:
        await self._sweeper.stop()
        await self._dispatcher.stop()
        await self._managed_store.close()
        await self._pool.close()
        logger.info("dbgrant stopped")
