"""Event orchestrator - turns committed lifecycle events into managed-store changes.

Each event is handled once. Managed-store work runs inside an explicit retry
loop: every attempt is classified into an ``AttemptOutcome`` and only
``RETRY`` outcomes are attempted again, after the policy's backoff delay. The
final outcome is appended to the audit trail either way.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum

from dbgrant.application.ports import GrantExecutor
from dbgrant.application.retry_policy import RetryPolicy
from dbgrant.domain.entities import Permission, PermissionEvent
from dbgrant.domain.events import DomainEvent
from dbgrant.domain.exceptions import DbGrantError, ErrorKind
from dbgrant.domain.value_objects import EventKind, PermissionStatus

logger = logging.getLogger(__name__)

Operation = Callable[[Permission], Awaitable[None]]


class AttemptOutcome(StrEnum):
    """Result of one attempt at a managed-store operation."""

    SUCCESS = "success"
    RETRY = "retry"
    TERMINAL = "terminal"


def classify(error: BaseException) -> AttemptOutcome:
    """Map a failed attempt to RETRY or TERMINAL."""
    if not isinstance(error, DbGrantError):
        return AttemptOutcome.TERMINAL
    if error.kind in (ErrorKind.VALIDATION, ErrorKind.NOT_FOUND):
        return AttemptOutcome.TERMINAL
    if error.kind in (ErrorKind.PERMISSION_OPERATION, ErrorKind.OPERATION) and error.retryable:
        return AttemptOutcome.RETRY
    return AttemptOutcome.TERMINAL


class EventOrchestrator:
    """Consumes domain events and drives the grant executor."""

    def __init__(
        self,
        executor: GrantExecutor,
        unit_of_work_factory: type,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._executor = executor
        self._uow_factory = unit_of_work_factory
        self._policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    async def handle(self, event: DomainEvent) -> None:
        permission = event.permission
        if event.kind == EventKind.ACTIVATED:
            await self._handle_activated(event)
        elif event.kind == EventKind.REVOKED:
            await self._handle_revoked(event)
        elif event.kind == EventKind.EXTENDED:
            await self._handle_extended(event)
        elif event.kind == EventKind.EXPIRED:
            await self._audit(
                permission,
                EventKind.EXPIRED,
                f"Expired at end time {permission.end_time.isoformat()}",
                event.actor,
            )
        else:
            # CREATED and APPROVED are audited by their use cases
            logger.debug("No action for %s on permission %s", event.kind, permission.id)

    async def _handle_activated(self, event: DomainEvent) -> None:
        p = event.permission
        await self._run(
            event,
            self._executor.grant_with_auto_revoke,
            success_kind=EventKind.ACTIVATED,
            failure_kind=EventKind.ACTIVATED,
            action="grant",
            success_detail=(
                f"Granted {', '.join(p.privilege_kind.privileges)} on {p.resource} "
                f"to {p.account}; auto-revoke '{p.auto_revoke_name}' "
                f"at {p.end_time.isoformat()}"
            ),
        )

    async def _handle_revoked(self, event: DomainEvent) -> None:
        p = event.permission
        if event.previous_status in (PermissionStatus.PENDING, PermissionStatus.APPROVED):
            # never activated, so nothing was granted or scheduled
            await self._audit(
                p,
                EventKind.REVOKED,
                f"Revoked by {event.actor} while {event.previous_status}; nothing was granted",
                event.actor,
            )
            return
        await self._run(
            event,
            self._executor.revoke_now,
            success_kind=EventKind.REVOKED,
            failure_kind=EventKind.REVOKED,
            action="revoke",
            success_detail=(
                f"Revoked {', '.join(p.privilege_kind.privileges)} on {p.resource} "
                f"from {p.account} by {event.actor}"
            ),
        )

    async def _handle_extended(self, event: DomainEvent) -> None:
        p = event.permission
        if p.status != PermissionStatus.ACTIVE:
            logger.debug(
                "Permission %s is %s; auto-revoke is scheduled at activation", p.id, p.status
            )
            return
        previous = event.previous_end_time.isoformat() if event.previous_end_time else "unknown"
        await self._run(
            event,
            self._executor.reschedule_auto_revoke,
            success_kind=EventKind.MODIFIED,
            failure_kind=EventKind.EXTENDED,
            action="reschedule auto-revoke",
            success_detail=(
                f"Auto-revoke '{p.auto_revoke_name}' rescheduled from {previous} "
                f"to {p.end_time.isoformat()}"
            ),
        )

    async def _run(
        self,
        event: DomainEvent,
        operation: Operation,
        *,
        success_kind: EventKind,
        failure_kind: EventKind,
        action: str,
        success_detail: str,
    ) -> AttemptOutcome:
        permission = event.permission
        attempt = 0
        while True:
            attempt += 1
            try:
                await operation(permission)
            except Exception as e:
                outcome = classify(e)
                if outcome is AttemptOutcome.RETRY and self._policy.should_retry(attempt):
                    delay = self._policy.delay_for(attempt)
                    logger.warning(
                        "Attempt %d to %s permission %s failed, retrying in %.1fs: %s",
                        attempt,
                        action,
                        permission.id,
                        delay,
                        e,
                    )
                    await self._sleep(delay)
                    continue
                logger.error(
                    "Failed to %s permission %s after %d attempt(s): %s",
                    action,
                    permission.id,
                    attempt,
                    e,
                )
                kind = e.kind.value if isinstance(e, DbGrantError) else type(e).__name__
                await self._audit(
                    permission,
                    failure_kind,
                    f"Failed to {action} after {attempt} attempt(s) [{kind}]: {e}",
                    event.actor,
                )
                return outcome
            await self._audit(permission, success_kind, success_detail, event.actor)
            return AttemptOutcome.SUCCESS

    async def _audit(
        self, permission: Permission, kind: EventKind, detail: str, actor: str
    ) -> None:
        async with self._uow_factory() as uow:
            await uow.events.append(
                PermissionEvent.record(permission.id, kind, detail, actor=actor)
            )
