"""Event publisher port - hands committed domain events to their consumer."""

from typing import Protocol

from dbgrant.domain.events import DomainEvent


class EventPublisher(Protocol):
    """Fire-and-forget publication; must not block the caller."""

    def publish(self, event: DomainEvent) -> None: ...
