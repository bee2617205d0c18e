"""Expiration sweeper - periodic safety net for grants past their end time.

The auto-revoke event scheduled on the managed store at activation is the
primary revoke path. The sweep only reconciles Permission status with the
clock and issues no statements itself.
"""

import asyncio
import logging
from datetime import UTC, datetime

from dbgrant.application.ports import GrantExecutor
from dbgrant.application.use_cases.permission.expire_permission import (
    ExpirePermissionUseCase,
)
from dbgrant.domain.exceptions import DbGrantError

logger = logging.getLogger(__name__)


class ExpirationSweeper:
    """Runs the expiry sweep and the event-scheduler check on their own intervals."""

    def __init__(
        self,
        unit_of_work_factory: type,
        expire: ExpirePermissionUseCase,
        executor: GrantExecutor,
        *,
        sweep_interval: float = 300.0,
        scheduler_check_interval: float = 3600.0,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._expire = expire
        self._executor = executor
        self._sweep_interval = sweep_interval
        self._scheduler_check_interval = scheduler_check_interval
        self._tasks: list[asyncio.Task] = []

    async def run_once(self, now: datetime | None = None) -> int:
        """Expire every ACTIVE permission whose end time is at or before ``now``.

        A failure on one permission is logged and the sweep moves on. Returns
        the number of permissions expired.
        """
        now = now or datetime.now(UTC)
        async with self._uow_factory() as uow:
            due = await uow.permissions.list_active_expired_as_of(now)
        if not due:
            logger.debug("Expiration sweep found nothing due")
            return 0

        logger.info("Expiration sweep found %d permission(s) past end time", len(due))
        expired = 0
        for permission in due:
            try:
                await self._expire.execute(permission.id, now)
            except Exception as e:
                logger.error("Failed to expire permission %s: %s", permission.id, e)
                continue
            expired += 1
        logger.info("Expiration sweep expired %d of %d permission(s)", expired, len(due))
        return expired

    async def check_event_scheduler(self) -> bool:
        """Verify the managed store's event scheduler; try once to enable it if off."""
        if await self._executor.is_event_scheduler_enabled():
            logger.debug("Managed store event scheduler is enabled")
            return True
        logger.warning(
            "Managed store event scheduler is DISABLED - scheduled auto-revokes will not fire"
        )
        try:
            await self._executor.enable_event_scheduler()
        except DbGrantError as e:
            logger.warning(
                "Could not enable event scheduler, grants rely on the expiration sweep: %s", e
            )
            return False
        logger.warning("Managed store event scheduler was enabled by dbgrant")
        return True

    async def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(
                self._loop(self.run_once, self._sweep_interval), name="dbgrant-sweep"
            ),
            asyncio.create_task(
                self._loop(self.check_event_scheduler, self._scheduler_check_interval),
                name="dbgrant-scheduler-check",
            ),
        ]
        logger.info(
            "Started expiration sweeper (sweep every %ss, scheduler check every %ss)",
            self._sweep_interval,
            self._scheduler_check_interval,
        )

    async def stop(self) -> None:
        for t in self._tasks:
            t.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

    async def _loop(self, job, interval: float) -> None:
        while True:
            try:
                await job()
            except Exception:
                logger.exception("Periodic job %s failed", getattr(job, "__name__", job))
            await asyncio.sleep(interval)
