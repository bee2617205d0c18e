"""Audit trail API resources."""

from uuid import UUID

import falcon.asgi

from dbgrant.application.use_cases.history.list_events import ListPermissionEventsUseCase
from dbgrant.domain.entities import PermissionEvent
from dbgrant.domain.exceptions import DbGrantError
from dbgrant.interfaces.api.resources.errors import (
    bad_request,
    error_response,
    parse_timestamp,
    unauthorized,
)


def event_media(e: PermissionEvent) -> dict:
    return {
        "id": str(e.id),
        "permission_id": str(e.permission_id),
        "kind": e.kind.value,
        "actor": e.actor,
        "detail": e.detail,
        "event_time": e.event_time.isoformat(),
        "created_at": e.created_at.isoformat(),
    }


class PermissionEventsResource:
    """GET /v1/permissions/{id}/events - audit trail of one permission."""

    def __init__(self, list_events: ListPermissionEventsUseCase) -> None:
        self._list = list_events

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_id: str
    ) -> None:
        if not req.context.actor:
            unauthorized(resp)
            return
        try:
            pid = UUID(permission_id)
        except ValueError:
            bad_request(resp, "Invalid permission ID")
            return

        events = await self._list.execute(permission_id=pid)
        resp.media = {"items": [event_media(e) for e in events]}
        resp.status = falcon.HTTP_200


class EventsResource:
    """GET /v1/events?principal= or ?start=&end= - audit trail queries."""

    def __init__(self, list_events: ListPermissionEventsUseCase) -> None:
        self._list = list_events

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        if not req.context.actor:
            unauthorized(resp)
            return
        try:
            start = req.get_param("start")
            end = req.get_param("end")
            start = parse_timestamp(start) if start else None
            end = parse_timestamp(end) if end else None
        except ValueError as e:
            bad_request(resp, str(e))
            return

        try:
            events = await self._list.execute(
                principal=req.get_param("principal"), start=start, end=end
            )
        except DbGrantError as e:
            error_response(resp, e)
            return

        resp.media = {"items": [event_media(e) for e in events]}
        resp.status = falcon.HTTP_200
