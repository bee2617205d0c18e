"""Principal entity - an account name that may receive grants."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Principal:
    """Directory entry for a managed-store account name."""

    name: str
    created_at: datetime
    display_name: str | None = None


@dataclass(frozen=True)
class PrincipalInfo:
    """Account row from the managed store's ``mysql.user``."""

    principal: str
    host: str
