"""Scope of a grant on the managed store."""

from dataclasses import dataclass
from enum import StrEnum

GLOBAL_RESOURCE = "*"


class ScopeType(StrEnum):
    """Level a grant applies at."""

    GLOBAL = "GLOBAL"
    DATABASE = "DATABASE"
    TABLE = "TABLE"


@dataclass(frozen=True)
class ResourceScope:
    """Parsed resource descriptor: ``*``, ``db``, ``db.*`` or ``db.table``."""

    type: ScopeType
    database: str | None = None
    table: str | None = None

    @classmethod
    def parse(cls, resource: str) -> "ResourceScope":
        """Infer the scope from a resource descriptor (no validation)."""
        if resource == GLOBAL_RESOURCE:
            return cls(ScopeType.GLOBAL)
        if "." in resource:
            database, table = resource.split(".", 1)
            if table == GLOBAL_RESOURCE:
                return cls(ScopeType.DATABASE, database=database)
            return cls(ScopeType.TABLE, database=database, table=table)
        return cls(ScopeType.DATABASE, database=resource)
