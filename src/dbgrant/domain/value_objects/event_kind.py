"""Kinds of permission events, shared by domain events and the audit trail."""

from enum import StrEnum


class EventKind(StrEnum):
    """Permission event kinds."""

    CREATED = "CREATED"
    APPROVED = "APPROVED"
    ACTIVATED = "ACTIVATED"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"
    EXTENDED = "EXTENDED"
    MODIFIED = "MODIFIED"
