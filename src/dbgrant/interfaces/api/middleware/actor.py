"""Actor middleware - identifies who is performing a lifecycle operation.

Authentication happens upstream. The gateway forwards the authenticated
identity in ``X-Actor``; requests without it have no actor.
"""

from dataclasses import dataclass

import falcon.asgi

ACTOR_HEADER = "X-Actor"


@dataclass
class RequestActor:
    """Actor from request context."""

    name: str


class ActorMiddleware:
    """Middleware that sets req.context.actor from the actor header."""

    def __init__(self, header: str = ACTOR_HEADER) -> None:
        self._header = header

    async def process_request(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        name = (req.get_header(self._header) or "").strip()
        req.context.actor = RequestActor(name=name) if name else None
