"""Principal DTOs."""

from dataclasses import dataclass, field

from dbgrant.domain.entities import Principal, PrincipalInfo


@dataclass
class PrincipalCreateInput:
    """Input for registering a principal.

    With a credential the account is also created on the managed store.
    Without one it is created with a generated credential at first activation.
    """

    name: str
    host: str | None = None
    credential: str | None = None
    display_name: str | None = None


@dataclass
class PrincipalSummary:
    """Directory entry plus the host patterns it has accounts for."""

    principal: Principal
    hosts: list[str] = field(default_factory=list)


@dataclass
class PrincipalDetails:
    """Directory entry plus one managed-store account and its grants."""

    principal: Principal
    host: str
    account: PrincipalInfo | None = None
    grants: list[str] = field(default_factory=list)
