"""Safe construction of MariaDB administrative statements.

All functions are pure. Identifiers are backtick-quoted and string literals are
single-quoted with backslashes and quotes doubled. Credentials never appear in
statement text; they travel in ``Statement.params`` and are bound by the
driver. Statements that carry params use the driver's ``pyformat`` style, so
literal percent signs in their text are doubled.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from dbgrant.domain import validation
from dbgrant.domain.exceptions import ValidationError
from dbgrant.domain.value_objects import PrivilegeKind, ResourceScope, ScopeType

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
PLACEHOLDER = "%s"

SYSTEM_PRINCIPALS = ("root", "mysql.sys", "mysql.session", "mysql.infoschema")


@dataclass(frozen=True)
class Statement:
    """Statement text plus out-of-band parameter values."""

    sql: str
    params: tuple[str, ...] = field(default=(), repr=False)


def quote_identifier(identifier: str) -> str:
    """Wrap in backticks, doubling embedded backticks."""
    if not identifier:
        raise ValidationError("identifier", "cannot be empty")
    if len(identifier) > validation.MAX_IDENTIFIER_LENGTH:
        raise ValidationError(
            "identifier",
            f"'{identifier}' exceeds maximum length of "
            f"{validation.MAX_IDENTIFIER_LENGTH} characters",
        )
    return "`" + identifier.replace("`", "``") + "`"


def unquote_identifier(quoted: str) -> str:
    if len(quoted) < 2 or quoted[0] != "`" or quoted[-1] != "`":
        raise ValueError(f"Not a quoted identifier: {quoted!r}")
    return quoted[1:-1].replace("``", "`")


def escape_literal(value: str) -> str:
    """Escape for use inside single quotes, without the quotes."""
    return value.replace("\\", "\\\\").replace("'", "''")


def quote_literal(value: str | None) -> str:
    if value is None:
        return "NULL"
    return "'" + escape_literal(value) + "'"


def unquote_literal(quoted: str) -> str:
    if len(quoted) < 2 or quoted[0] != "'" or quoted[-1] != "'":
        raise ValueError(f"Not a quoted literal: {quoted!r}")
    out: list[str] = []
    body = quoted[1:-1]
    i = 0
    while i < len(body):
        pair = body[i : i + 2]
        if pair in ("\\\\", "''"):
            out.append(pair[0])
            i += 2
        else:
            out.append(body[i])
            i += 1
    return "".join(out)


def format_timestamp(moment: datetime) -> str:
    """``YYYY-MM-DD HH:MM:SS`` in UTC; naive values are taken as UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.strftime(TIMESTAMP_FORMAT)


def privileges_for(kind: PrivilegeKind) -> tuple[str, ...]:
    return kind.privileges


def resource_scope(resource: str) -> ResourceScope:
    """Infer GLOBAL / DATABASE / TABLE scope from a resource descriptor."""
    if not resource:
        raise ValidationError("resource", "cannot be empty")
    return ResourceScope.parse(resource)


def resource_specifier(scope: ResourceScope) -> str:
    """``*.*``, ```db`.*`` or ```db`.`table``` for GRANT/REVOKE."""
    if scope.type == ScopeType.GLOBAL:
        return "*.*"
    validation.validate_identifier(scope.database, "database")
    if scope.type == ScopeType.DATABASE:
        return f"{quote_identifier(scope.database)}.*"
    validation.validate_identifier(scope.table, "table")
    return f"{quote_identifier(scope.database)}.{quote_identifier(scope.table)}"


def account(principal: str, host: str) -> str:
    validation.validate_principal(principal)
    validation.validate_host(host)
    return f"{quote_literal(principal)}@{quote_literal(host)}"


def _bindable(text: str) -> str:
    return text.replace("%", "%%")


def _privilege_list(privileges: Sequence[str]) -> str:
    if not privileges:
        raise ValidationError("privileges", "list cannot be empty")
    return ", ".join(privileges)


def build_create_user(principal: str, host: str, credential: str) -> Statement:
    return Statement(
        f"CREATE USER IF NOT EXISTS {_bindable(account(principal, host))} "
        f"IDENTIFIED BY {PLACEHOLDER}",
        (credential,),
    )


def build_drop_user(principal: str, host: str) -> Statement:
    return Statement(f"DROP USER IF EXISTS {account(principal, host)}")


def build_alter_user_credential(principal: str, host: str, credential: str) -> Statement:
    return Statement(
        f"ALTER USER {_bindable(account(principal, host))} IDENTIFIED BY {PLACEHOLDER}",
        (credential,),
    )


def build_grant(
    privileges: Sequence[str], scope: ResourceScope, principal: str, host: str
) -> Statement:
    return Statement(
        f"GRANT {_privilege_list(privileges)} ON {resource_specifier(scope)} "
        f"TO {account(principal, host)}"
    )


def build_revoke(
    privileges: Sequence[str], scope: ResourceScope, principal: str, host: str
) -> Statement:
    return Statement(
        f"REVOKE {_privilege_list(privileges)} ON {resource_specifier(scope)} "
        f"FROM {account(principal, host)}"
    )


def build_create_revoke_event(
    event_name: str,
    run_at: datetime,
    privileges: Sequence[str],
    scope: ResourceScope,
    principal: str,
    host: str,
) -> Statement:
    """One-shot event that runs the matching REVOKE at ``run_at``."""
    validation.validate_event_name(event_name)
    if run_at is None:
        raise ValidationError("schedule time", "required parameter is missing")
    revoke = build_revoke(privileges, scope, principal, host)
    return Statement(
        f"CREATE EVENT {quote_identifier(event_name)} "
        f"ON SCHEDULE AT {quote_literal(format_timestamp(run_at))} "
        f"DO BEGIN {revoke.sql}; END"
    )


def build_drop_event(event_name: str) -> Statement:
    validation.validate_event_name(event_name)
    return Statement(f"DROP EVENT IF EXISTS {quote_identifier(event_name)}")


def build_user_exists() -> Statement:
    return Statement(
        f"SELECT COUNT(*) FROM mysql.user WHERE user = {PLACEHOLDER} AND host = {PLACEHOLDER}"
    )


def build_list_users() -> Statement:
    excluded = ", ".join(quote_literal(name) for name in SYSTEM_PRINCIPALS)
    return Statement(
        "SELECT user, host FROM mysql.user "
        f"WHERE user NOT IN ({excluded}) ORDER BY user, host"
    )


def build_user_info() -> Statement:
    return Statement(
        "SELECT user, host FROM mysql.user "
        f"WHERE user = {PLACEHOLDER} AND host = {PLACEHOLDER}"
    )


def build_show_grants(principal: str, host: str) -> Statement:
    return Statement(f"SHOW GRANTS FOR {account(principal, host)}")


def build_database_exists() -> Statement:
    return Statement(
        f"SELECT SCHEMA_NAME FROM information_schema.SCHEMATA WHERE SCHEMA_NAME = {PLACEHOLDER}"
    )


def build_table_exists() -> Statement:
    return Statement(
        "SELECT TABLE_NAME FROM information_schema.TABLES "
        f"WHERE TABLE_SCHEMA = {PLACEHOLDER} AND TABLE_NAME = {PLACEHOLDER}"
    )


def build_event_scheduler_status() -> Statement:
    return Statement("SHOW VARIABLES LIKE 'event_scheduler'")


def build_enable_event_scheduler() -> Statement:
    return Statement("SET GLOBAL event_scheduler = ON")
