"""Health check endpoints."""

import falcon.asgi

from dbgrant.application.ports import GrantExecutor


class HealthResource:
    """Health and readiness endpoints."""

    def __init__(self, executor: GrantExecutor | None = None) -> None:
        self._executor = executor

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health - liveness."""
        resp.media = {"status": "ok"}
        resp.status = falcon.HTTP_200

    async def on_get_ready(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health/ready - readiness, with managed-store event scheduler status."""
        if self._executor is None:
            resp.media = {"status": "ready"}
            resp.status = falcon.HTTP_200
            return
        enabled = await self._executor.is_event_scheduler_enabled()
        resp.media = {
            "status": "ready" if enabled else "degraded",
            "event_scheduler": "ON" if enabled else "OFF",
        }
        resp.status = falcon.HTTP_200
