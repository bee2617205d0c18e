"""Permission lifecycle states."""

from enum import StrEnum


class PermissionStatus(StrEnum):
    """States of a time-bounded grant."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"

    @property
    def is_terminal(self) -> bool:
        return self in (PermissionStatus.EXPIRED, PermissionStatus.REVOKED)
