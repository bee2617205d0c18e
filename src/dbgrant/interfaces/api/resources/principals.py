"""Principal directory API resources."""

import falcon.asgi

from dbgrant.application.dto.principal_dto import PrincipalCreateInput
from dbgrant.application.use_cases.permission.get_permission import ListPermissionsUseCase
from dbgrant.application.use_cases.principal.change_credential import (
    ChangePrincipalCredentialUseCase,
)
from dbgrant.application.use_cases.principal.drop_principal import DropPrincipalUseCase
from dbgrant.application.use_cases.principal.get_principal import (
    GetPrincipalUseCase,
    ListPrincipalsUseCase,
)
from dbgrant.application.use_cases.principal.register_principal import (
    RegisterPrincipalUseCase,
)
from dbgrant.domain.entities import Principal
from dbgrant.domain.exceptions import DbGrantError
from dbgrant.domain.value_objects import PermissionStatus
from dbgrant.interfaces.api.resources.errors import (
    bad_request,
    error_response,
    string_field,
    unauthorized,
)
from dbgrant.interfaces.api.resources.permissions import permission_media


def principal_media(p: Principal) -> dict:
    return {
        "name": p.name,
        "display_name": p.display_name,
        "created_at": p.created_at.isoformat(),
    }


class PrincipalsResource:
    """GET/POST /v1/principals - list and register principals."""

    def __init__(
        self,
        list_principals: ListPrincipalsUseCase,
        register_principal: RegisterPrincipalUseCase,
    ) -> None:
        self._list = list_principals
        self._register = register_principal

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        if not req.context.actor:
            unauthorized(resp)
            return
        try:
            summaries = await self._list.execute()
        except DbGrantError as e:
            error_response(resp, e)
            return
        resp.media = {
            "items": [{**principal_media(s.principal), "hosts": s.hosts} for s in summaries]
        }
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Register a name. With a credential its account is created right away."""
        actor = req.context.actor
        if not actor:
            unauthorized(resp)
            return

        try:
            body = await req.get_media()
            data = PrincipalCreateInput(
                name=string_field(body, "name"),
                host=string_field(body, "host", required=False),
                credential=string_field(body, "credential", required=False),
                display_name=string_field(body, "display_name", required=False),
            )
        except KeyError as e:
            bad_request(resp, f"Missing required field: {e}")
            return
        except TypeError as e:
            bad_request(resp, str(e))
            return

        try:
            principal = await self._register.execute(actor.name, data)
        except DbGrantError as e:
            error_response(resp, e)
            return

        resp.media = principal_media(principal)
        resp.status = falcon.HTTP_201


class PrincipalResource:
    """GET/DELETE /v1/principals/{name}, its credential and its active permissions.

    ``?host=`` selects the account; the configured default host is used otherwise.
    """

    def __init__(
        self,
        get_principal: GetPrincipalUseCase,
        drop_principal: DropPrincipalUseCase,
        change_credential: ChangePrincipalCredentialUseCase,
        list_permissions: ListPermissionsUseCase,
    ) -> None:
        self._get = get_principal
        self._drop = drop_principal
        self._change_credential = change_credential
        self._list_permissions = list_permissions

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, name: str
    ) -> None:
        if not req.context.actor:
            unauthorized(resp)
            return
        try:
            details = await self._get.execute(name, host=req.get_param("host"))
        except DbGrantError as e:
            error_response(resp, e)
            return

        account = details.account
        resp.media = {
            **principal_media(details.principal),
            "host": details.host,
            "account": {"principal": account.principal, "host": account.host} if account else None,
            "grants": details.grants,
        }
        resp.status = falcon.HTTP_200

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, name: str
    ) -> None:
        actor = req.context.actor
        if not actor:
            unauthorized(resp)
            return
        try:
            await self._drop.execute(name, actor.name, host=req.get_param("host"))
        except DbGrantError as e:
            error_response(resp, e)
            return
        resp.status = falcon.HTTP_204

    async def on_post_credential(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, name: str
    ) -> None:
        """Body: {"credential": "..."}. The value is never echoed back."""
        actor = req.context.actor
        if not actor:
            unauthorized(resp)
            return
        try:
            body = await req.get_media()
            credential = string_field(body, "credential")
        except KeyError as e:
            bad_request(resp, f"Missing required field: {e}")
            return
        except TypeError as e:
            bad_request(resp, str(e))
            return

        try:
            await self._change_credential.execute(
                name, credential, actor.name, host=req.get_param("host")
            )
        except DbGrantError as e:
            error_response(resp, e)
            return
        resp.status = falcon.HTTP_204

    async def on_get_active(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, name: str
    ) -> None:
        if not req.context.actor:
            unauthorized(resp)
            return
        try:
            permissions = await self._list_permissions.execute(
                principal=name, status=PermissionStatus.ACTIVE
            )
        except DbGrantError as e:
            error_response(resp, e)
            return
        resp.media = {"items": [permission_media(p) for p in permissions]}
        resp.status = falcon.HTTP_200
