"""Application ports - interfaces for external adapters."""

from dbgrant.application.ports.event_publisher import EventPublisher
from dbgrant.application.ports.grant_executor import GrantExecutor
from dbgrant.application.ports.managed_store import DataAccessError, ManagedStoreConnection
from dbgrant.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "DataAccessError",
    "EventPublisher",
    "GrantExecutor",
    "ManagedStoreConnection",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
