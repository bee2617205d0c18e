"""Input validation for MariaDB principal, resource and time-range values.

Every ``validate_*`` function returns ``None`` on success and raises
``ValidationError`` naming the offending field otherwise. Validation runs
before any statement is built, and the statement builder checks again.
"""

import logging
import re
from datetime import UTC, datetime, timedelta

from dbgrant.domain.exceptions import ValidationError
from dbgrant.domain.value_objects import GLOBAL_RESOURCE

logger = logging.getLogger(__name__)

MAX_IDENTIFIER_LENGTH = 64
MAX_PRINCIPAL_LENGTH = 32
MIN_CREDENTIAL_LENGTH = 8
MAX_CREDENTIAL_LENGTH = 256

PRINCIPAL_PATTERN = re.compile(r"[A-Za-z0-9_$.]+")
IDENTIFIER_PATTERN = re.compile(r"[A-Za-z0-9_$]+")
HOST_PATTERN = re.compile(r"[%A-Za-z0-9._-]+")

SYSTEM_DATABASES = frozenset({"mysql", "information_schema", "performance_schema", "sys"})


def _require(field: str, value: str | None) -> str:
    if not value:
        raise ValidationError(field, "required parameter is missing or empty")
    if not isinstance(value, str):
        raise ValidationError(field, f"must be a string, got {type(value).__name__}")
    return value


def _check_name(
    field: str,
    value: str | None,
    *,
    max_length: int,
    pattern: re.Pattern[str],
    allowed: str,
) -> str:
    value = _require(field, value)
    if len(value) > max_length:
        raise ValidationError(
            field, f"'{value}' exceeds maximum length of {max_length} characters"
        )
    if not pattern.fullmatch(value):
        raise ValidationError(
            field, f"'{value}' contains invalid characters. Only {allowed} are allowed"
        )
    if value[0].isdigit():
        raise ValidationError(field, f"'{value}' cannot start with a digit")
    return value


def validate_identifier(value: str | None, field: str = "identifier") -> None:
    """Database, table or other schema object name."""
    _check_name(
        field,
        value,
        max_length=MAX_IDENTIFIER_LENGTH,
        pattern=IDENTIFIER_PATTERN,
        allowed="alphanumeric, underscore and dollar sign",
    )


def validate_principal(principal: str | None) -> None:
    """Account name of a managed-store principal."""
    principal = _check_name(
        "principal",
        principal,
        max_length=MAX_PRINCIPAL_LENGTH,
        pattern=PRINCIPAL_PATTERN,
        allowed="alphanumeric, underscore, dot and dollar sign",
    )
    if principal.lower() in ("root", "mysql") or principal.startswith("mysql."):
        logger.warning("Principal '%s' matches a system account name", principal)


def validate_host(host: str | None) -> None:
    """Host pattern: ``%``, a hostname, an IP or an IP pattern."""
    host = _require("host", host)
    if len(host) > MAX_IDENTIFIER_LENGTH:
        raise ValidationError(
            "host", f"'{host}' exceeds maximum length of {MAX_IDENTIFIER_LENGTH} characters"
        )
    if not HOST_PATTERN.fullmatch(host):
        raise ValidationError(
            "host",
            f"'{host}' contains invalid characters. "
            "Only alphanumeric, dot, hyphen, underscore and percent are allowed",
        )


def validate_database(database: str | None) -> None:
    validate_identifier(database, "database")
    if database.lower() in SYSTEM_DATABASES:
        logger.warning("Database '%s' is a system database", database)


def validate_table(table: str | None) -> None:
    validate_identifier(table, "table")


def validate_resource(resource: str | None) -> None:
    """``*``, ``db``, ``db.*`` or ``db.table``."""
    resource = _require("resource", resource)
    if resource == GLOBAL_RESOURCE:
        return
    if "." not in resource:
        validate_database(resource)
        return
    database, table = resource.split(".", 1)
    if not database or not table:
        raise ValidationError(
            "resource", f"'{resource}' has invalid format. Expected 'database.table'"
        )
    validate_database(database)
    if table != GLOBAL_RESOURCE:
        validate_table(table)


def validate_credential(credential: str | None) -> None:
    """Password for a managed-store principal."""
    credential = _require("credential", credential)
    if len(credential) < MIN_CREDENTIAL_LENGTH:
        raise ValidationError(
            "credential", f"must be at least {MIN_CREDENTIAL_LENGTH} characters long"
        )
    if len(credential) > MAX_CREDENTIAL_LENGTH:
        raise ValidationError(
            "credential", f"exceeds maximum length of {MAX_CREDENTIAL_LENGTH} characters"
        )
    if not any(c.isalpha() for c in credential) or not any(c.isdigit() for c in credential):
        raise ValidationError("credential", "must contain at least one letter and one digit")


def validate_event_name(name: str | None) -> None:
    """Name of a scheduled event."""
    name = _require("event name", name)
    if len(name) > MAX_IDENTIFIER_LENGTH:
        raise ValidationError(
            "event name",
            f"'{name}' exceeds maximum length of {MAX_IDENTIFIER_LENGTH} characters",
        )
    if not IDENTIFIER_PATTERN.fullmatch(name):
        raise ValidationError(
            "event name",
            f"'{name}' contains invalid characters. "
            "Only alphanumeric, underscore and dollar sign are allowed",
        )


def validate_time_range(
    start_time: datetime | None,
    end_time: datetime | None,
    now: datetime | None = None,
) -> None:
    """End strictly after start and not already past.

    A start in the past, a duration over one year or under one hour only log a
    warning.
    """
    if start_time is None:
        raise ValidationError("start_time", "required parameter is missing")
    if end_time is None:
        raise ValidationError("end_time", "required parameter is missing")
    now = now or datetime.now(UTC)

    if end_time <= start_time:
        raise ValidationError("time range", "end time must be after start time")
    if end_time < now:
        raise ValidationError("time range", "end time cannot be in the past")

    if start_time < now:
        logger.warning("Permission start time %s is in the past", start_time.isoformat())
    if end_time - start_time > timedelta(days=365):
        logger.warning(
            "Permission duration exceeds 1 year. Start: %s, End: %s",
            start_time.isoformat(),
            end_time.isoformat(),
        )
    if end_time - start_time < timedelta(hours=1):
        logger.warning(
            "Permission duration is less than 1 hour. Start: %s, End: %s",
            start_time.isoformat(),
            end_time.isoformat(),
        )


def validate_identity(principal: str | None, host: str | None, resource: str | None) -> None:
    """Principal, host and resource; stops at the first violation."""
    validate_principal(principal)
    validate_host(host)
    validate_resource(resource)


def validate_permission(permission, now: datetime | None = None) -> None:
    """Composite check of a Permission; stops at the first violation."""
    if permission is None:
        raise ValidationError("permission", "required parameter is missing")
    validate_identity(permission.principal, permission.host, permission.resource)
    validate_time_range(permission.start_time, permission.end_time, now)
    if permission.privilege_kind is None:
        raise ValidationError("privilege_kind", "required parameter is missing")
