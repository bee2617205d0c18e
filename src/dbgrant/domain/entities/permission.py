"""Permission entity - a time-bounded grant to a managed-store principal."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from dbgrant.domain.exceptions import InvalidArgumentError, InvalidStateError
from dbgrant.domain.value_objects import PermissionStatus, PrivilegeKind

AUTO_REVOKE_PREFIX = "revoke_perm_"


@dataclass
class Permission:
    """Grant of ``privilege_kind`` on ``resource`` to ``principal``@``host``.

    Status and its timestamps change only through the transition methods
    below; each one checks the source state and raises ``InvalidStateError``
    when the state graph does not allow the move.
    """

    id: UUID
    principal: str
    host: str
    resource: str
    privilege_kind: PrivilegeKind
    start_time: datetime
    end_time: datetime
    created_at: datetime
    updated_at: datetime
    status: PermissionStatus = PermissionStatus.PENDING
    description: str | None = None
    created_by: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    revoked_by: str | None = None
    revoked_at: datetime | None = None

    @property
    def auto_revoke_name(self) -> str:
        """Deterministic name of the scheduled revoke on the managed store."""
        return f"{AUTO_REVOKE_PREFIX}{self.id.hex}"

    @property
    def account(self) -> str:
        return f"'{self.principal}'@'{self.host}'"

    def approve(self, actor: str, now: datetime) -> None:
        self._require(PermissionStatus.PENDING, "approved")
        self.status = PermissionStatus.APPROVED
        self.approved_by = actor
        self.approved_at = now
        self.updated_at = now

    def activate(self, now: datetime) -> None:
        self._require(PermissionStatus.APPROVED, "activated")
        self.status = PermissionStatus.ACTIVE
        self.updated_at = now

    def revoke(self, actor: str, now: datetime) -> None:
        if self.status.is_terminal:
            raise InvalidStateError(
                f"Permission {self.id} is {self.status} and cannot be revoked"
            )
        self.status = PermissionStatus.REVOKED
        self.revoked_by = actor
        self.revoked_at = now
        self.updated_at = now

    def extend(self, new_end_time: datetime, now: datetime) -> datetime:
        """Move end time forward. Returns the previous end time."""
        if self.status.is_terminal:
            raise InvalidStateError(
                f"Permission {self.id} is {self.status} and cannot be extended"
            )
        if new_end_time <= self.end_time:
            raise InvalidArgumentError(
                "New end time must be after current end time "
                f"({self.end_time.isoformat()})"
            )
        previous = self.end_time
        self.end_time = new_end_time
        self.updated_at = now
        return previous

    def expire(self, now: datetime) -> None:
        self._require(PermissionStatus.ACTIVE, "expired")
        if self.end_time > now:
            raise InvalidStateError(
                f"Permission {self.id} ends at {self.end_time.isoformat()} and has not expired"
            )
        self.status = PermissionStatus.EXPIRED
        self.updated_at = now

    def _require(self, expected: PermissionStatus, verb: str) -> None:
        if self.status != expected:
            raise InvalidStateError(
                f"Only {expected.lower()} permissions can be {verb}; "
                f"permission {self.id} is {self.status}"
            )
