"""Mapping of dbgrant errors to HTTP responses."""

from datetime import UTC, datetime

import falcon
import falcon.asgi

from dbgrant.domain.exceptions import DbGrantError, ErrorKind

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: falcon.HTTP_400,
    ErrorKind.INVALID_ARGUMENT: falcon.HTTP_400,
    ErrorKind.NOT_FOUND: falcon.HTTP_404,
    ErrorKind.INVALID_STATE: falcon.HTTP_409,
}


def error_response(resp: falcon.asgi.Response, error: DbGrantError) -> None:
    resp.status = _STATUS_BY_KIND.get(error.kind, falcon.HTTP_500)
    resp.media = {"error": error.message, "kind": error.kind.value}


def unauthorized(resp: falcon.asgi.Response) -> None:
    resp.status = falcon.HTTP_401
    resp.media = {"error": "Unauthorized"}


def bad_request(resp: falcon.asgi.Response, message: str) -> None:
    resp.status = falcon.HTTP_400
    resp.media = {"error": message}


def parse_timestamp(value: str) -> datetime:
    """ISO 8601; values without an offset are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def string_field(body: dict, name: str, required: bool = True) -> str | None:
    """Body field that must be a JSON string; KeyError when a required one is missing."""
    value = body[name] if required else body.get(name)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"{name} must be a string")
    return value
