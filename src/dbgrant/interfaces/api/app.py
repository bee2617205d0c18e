"""Falcon ASGI application."""

import logging

import falcon
import falcon.asgi
from falcon.asgi import App

from dbgrant.interfaces.api.resources.events import EventsResource, PermissionEventsResource
from dbgrant.interfaces.api.resources.health import HealthResource
from dbgrant.interfaces.api.resources.permissions import (
    BulkPermissionsResource,
    ExpiringPermissionsResource,
    PermissionResource,
    PermissionsResource,
)
from dbgrant.interfaces.api.resources.principals import PrincipalResource, PrincipalsResource

logger = logging.getLogger(__name__)


async def _log_exception(req, resp, ex, params) -> None:
    logger.exception("Unhandled error on %s %s", req.method, req.path, exc_info=ex)
    resp.status = falcon.HTTP_500
    resp.media = {"title": "500 Internal Server Error"}


def create_app(
    permissions_resource: PermissionsResource,
    permission_resource: PermissionResource,
    permission_events_resource: PermissionEventsResource,
    events_resource: EventsResource,
    health_resource: HealthResource,
    bulk_permissions_resource: BulkPermissionsResource,
    expiring_permissions_resource: ExpiringPermissionsResource,
    principals_resource: PrincipalsResource,
    principal_resource: PrincipalResource,
    middleware: list | None = None,
) -> App:
    """Create Falcon ASGI app with routes."""
    app = falcon.asgi.App(middleware=middleware or [])
    app.add_error_handler(Exception, _log_exception)
    app.add_route("/v1/health", health_resource)
    app.add_route("/v1/health/ready", health_resource, suffix="ready")
    app.add_route("/v1/permissions", permissions_resource)
    app.add_route("/v1/permissions/bulk", bulk_permissions_resource)
    app.add_route("/v1/permissions/expiring", expiring_permissions_resource)
    app.add_route("/v1/permissions/{permission_id}", permission_resource)
    for action in ("approve", "activate", "revoke", "extend"):
        app.add_route(
            f"/v1/permissions/{{permission_id}}/{action}", permission_resource, suffix=action
        )
    app.add_route("/v1/permissions/{permission_id}/events", permission_events_resource)
    app.add_route("/v1/events", events_resource)
    app.add_route("/v1/principals", principals_resource)
    app.add_route("/v1/principals/{name}", principal_resource)
    for action in ("credential", "active"):
        app.add_route(f"/v1/principals/{{name}}/{action}", principal_resource, suffix=action)
    return app
