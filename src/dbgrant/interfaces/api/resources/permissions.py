"""Permission lifecycle API resources."""

from uuid import UUID

import falcon.asgi

from dbgrant.application.dto.permission_dto import BulkPermissionInput, PermissionCreateInput
from dbgrant.application.use_cases.permission.activate_permission import (
    ActivatePermissionUseCase,
)
from dbgrant.application.use_cases.permission.approve_permission import (
    ApprovePermissionUseCase,
)
from dbgrant.application.use_cases.permission.bulk_grant_permissions import (
    BulkGrantPermissionsUseCase,
)
from dbgrant.application.use_cases.permission.create_permission import (
    CreatePermissionUseCase,
)
from dbgrant.application.use_cases.permission.extend_permission import (
    ExtendPermissionUseCase,
)
from dbgrant.application.use_cases.permission.get_permission import (
    GetPermissionUseCase,
    ListExpiringPermissionsUseCase,
    ListPermissionsUseCase,
)
from dbgrant.application.use_cases.permission.revoke_permission import (
    RevokePermissionUseCase,
)
from dbgrant.domain.entities import Permission
from dbgrant.domain.exceptions import DbGrantError
from dbgrant.domain.value_objects import PermissionStatus, PrivilegeKind
from dbgrant.interfaces.api.resources.errors import (
    bad_request,
    error_response,
    parse_timestamp,
    string_field,
    unauthorized,
)


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def permission_media(p: Permission) -> dict:
    return {
        "id": str(p.id),
        "principal": p.principal,
        "host": p.host,
        "resource": p.resource,
        "privilege_kind": p.privilege_kind.value,
        "start_time": p.start_time.isoformat(),
        "end_time": p.end_time.isoformat(),
        "status": p.status.value,
        "description": p.description,
        "created_by": p.created_by,
        "created_at": p.created_at.isoformat(),
        "updated_at": p.updated_at.isoformat(),
        "approved_by": p.approved_by,
        "approved_at": _iso(p.approved_at),
        "revoked_by": p.revoked_by,
        "revoked_at": _iso(p.revoked_at),
    }


class PermissionsResource:
    """GET/POST /v1/permissions - list and request permissions."""

    def __init__(
        self,
        create_permission: CreatePermissionUseCase,
        list_permissions: ListPermissionsUseCase,
    ) -> None:
        self._create = create_permission
        self._list = list_permissions

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """List permissions by ?principal= and/or ?status=."""
        if not req.context.actor:
            unauthorized(resp)
            return

        status = req.get_param("status")
        try:
            status = PermissionStatus(status.upper()) if status else None
        except ValueError:
            bad_request(resp, f"Unknown status: {status}")
            return

        try:
            permissions = await self._list.execute(
                principal=req.get_param("principal"), status=status
            )
        except DbGrantError as e:
            error_response(resp, e)
            return

        resp.media = {"items": [permission_media(p) for p in permissions]}
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Request a time-bounded grant. It starts out PENDING."""
        actor = req.context.actor
        if not actor:
            unauthorized(resp)
            return

        try:
            body = await req.get_media()
            data = PermissionCreateInput(
                principal=string_field(body, "principal"),
                resource=string_field(body, "resource"),
                privilege_kind=PrivilegeKind(str(body["privilege_kind"]).upper()),
                start_time=parse_timestamp(body["start_time"]),
                end_time=parse_timestamp(body["end_time"]),
                host=string_field(body, "host", required=False),
                description=string_field(body, "description", required=False),
            )
        except KeyError as e:
            bad_request(resp, f"Missing required field: {e}")
            return
        except (TypeError, ValueError) as e:
            bad_request(resp, str(e))
            return

        try:
            permission = await self._create.execute(actor.name, data)
        except DbGrantError as e:
            error_response(resp, e)
            return

        resp.media = permission_media(permission)
        resp.status = falcon.HTTP_201


def _string_list(body: dict, name: str) -> list[str]:
    value = body[name]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise TypeError(f"{name} must be a list of strings")
    return value


class BulkPermissionsResource:
    """POST /v1/permissions/bulk - grant several resources and kinds for a number of days."""

    def __init__(self, bulk_grant: BulkGrantPermissionsUseCase) -> None:
        self._bulk = bulk_grant

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        actor = req.context.actor
        if not actor:
            unauthorized(resp)
            return

        try:
            body = await req.get_media()
            duration_days = body["duration_days"]
            if isinstance(duration_days, bool) or not isinstance(duration_days, int):
                raise TypeError("duration_days must be an integer")
            data = BulkPermissionInput(
                principal=string_field(body, "principal"),
                resources=_string_list(body, "resources"),
                privilege_kinds=[
                    PrivilegeKind(k.upper()) for k in _string_list(body, "privilege_kinds")
                ],
                duration_days=duration_days,
                host=string_field(body, "host", required=False),
                description=string_field(body, "description", required=False),
            )
        except KeyError as e:
            bad_request(resp, f"Missing required field: {e}")
            return
        except (TypeError, ValueError) as e:
            bad_request(resp, str(e))
            return

        try:
            permissions = await self._bulk.execute(actor.name, data)
        except DbGrantError as e:
            error_response(resp, e)
            return

        resp.media = {"items": [permission_media(p) for p in permissions]}
        resp.status = falcon.HTTP_201


class ExpiringPermissionsResource:
    """GET /v1/permissions/expiring?start=&end= - ACTIVE permissions ending in the window."""

    def __init__(self, list_expiring: ListExpiringPermissionsUseCase) -> None:
        self._list = list_expiring

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        if not req.context.actor:
            unauthorized(resp)
            return
        start, end = req.get_param("start"), req.get_param("end")
        if not start or not end:
            bad_request(resp, "Both start and end are required")
            return
        try:
            start_time, end_time = parse_timestamp(start), parse_timestamp(end)
        except ValueError as e:
            bad_request(resp, str(e))
            return

        try:
            permissions = await self._list.execute(start_time, end_time)
        except DbGrantError as e:
            error_response(resp, e)
            return

        resp.media = {"items": [permission_media(p) for p in permissions]}
        resp.status = falcon.HTTP_200


class PermissionResource:
    """GET /v1/permissions/{id} and its POST lifecycle actions."""

    def __init__(
        self,
        get_permission: GetPermissionUseCase,
        approve_permission: ApprovePermissionUseCase,
        activate_permission: ActivatePermissionUseCase,
        revoke_permission: RevokePermissionUseCase,
        extend_permission: ExtendPermissionUseCase,
    ) -> None:
        self._get = get_permission
        self._approve = approve_permission
        self._activate = activate_permission
        self._revoke = revoke_permission
        self._extend = extend_permission

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_id: str
    ) -> None:
        await self._respond(req, resp, permission_id, self._get.execute)

    async def on_post_approve(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_id: str
    ) -> None:
        await self._respond(
            req, resp, permission_id, lambda pid: self._approve.execute(pid, req.context.actor.name)
        )

    async def on_post_activate(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_id: str
    ) -> None:
        await self._respond(
            req, resp, permission_id, lambda pid: self._activate.execute(pid, req.context.actor.name)
        )

    async def on_post_revoke(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_id: str
    ) -> None:
        await self._respond(
            req, resp, permission_id, lambda pid: self._revoke.execute(pid, req.context.actor.name)
        )

    async def on_post_extend(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_id: str
    ) -> None:
        """Body: {"end_time": "<ISO 8601>"}."""
        if not req.context.actor:
            unauthorized(resp)
            return
        try:
            body = await req.get_media()
            new_end_time = parse_timestamp(body["end_time"])
        except KeyError as e:
            bad_request(resp, f"Missing required field: {e}")
            return
        except (TypeError, ValueError) as e:
            bad_request(resp, str(e))
            return

        await self._respond(
            req,
            resp,
            permission_id,
            lambda pid: self._extend.execute(pid, new_end_time, req.context.actor.name),
        )

    async def _respond(self, req, resp, permission_id: str, action) -> None:
        if not req.context.actor:
            unauthorized(resp)
            return
        try:
            pid = UUID(permission_id)
        except ValueError:
            bad_request(resp, "Invalid permission ID")
            return
        try:
            permission = await action(pid)
        except DbGrantError as e:
            error_response(resp, e)
            return
        resp.media = permission_media(permission)
        resp.status = falcon.HTTP_200
