"""Coarse privilege categories and their MariaDB privilege lists."""

from enum import StrEnum


class PrivilegeKind(StrEnum):
    """Privilege kinds a grant can carry."""

    READ = "READ"
    WRITE = "WRITE"
    DELETE = "DELETE"
    EXECUTE = "EXECUTE"
    ADMIN = "ADMIN"

    @property
    def privileges(self) -> tuple[str, ...]:
        """Ordered low-level privileges for this kind."""
        return _PRIVILEGES[self]


_PRIVILEGES: dict[PrivilegeKind, tuple[str, ...]] = {
    PrivilegeKind.READ: ("SELECT",),
    PrivilegeKind.WRITE: ("SELECT", "INSERT", "UPDATE"),
    PrivilegeKind.DELETE: ("SELECT", "DELETE"),
    PrivilegeKind.EXECUTE: ("EXECUTE",),
    PrivilegeKind.ADMIN: ("ALL PRIVILEGES",),
}
