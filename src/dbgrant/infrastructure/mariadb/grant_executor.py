"""Grant/revoke executor for MariaDB principals.

Composes validation and statement building and runs the result on the managed
store. Backend failures are translated into the dbgrant error taxonomy:
``ValidationError`` and ``NotFoundError`` pass through, driver failures become
``PermissionOperationError`` (retryable when the cause looks transient) and
anything else becomes a non-retryable ``OperationError``.
"""

import logging
import secrets
import string
from collections.abc import Awaitable
from typing import TypeVar

from dbgrant.application.ports.managed_store import DataAccessError, ManagedStoreConnection
from dbgrant.domain import validation
from dbgrant.domain.entities import Permission, PrincipalInfo
from dbgrant.domain.exceptions import (
    DbGrantError,
    NotFoundError,
    OperationError,
    PermissionOperationError,
    ValidationError,
)
from dbgrant.domain.value_objects import GLOBAL_RESOURCE, ScopeType
from dbgrant.infrastructure.mariadb import statement_builder as sb

logger = logging.getLogger(__name__)

T = TypeVar("T")

# 1205 lock wait timeout, 1213 deadlock, 2003 can't connect,
# 2006 server has gone away, 2013 lost connection during query
TRANSIENT_CODES = frozenset({1205, 1213, 2003, 2006, 2013})
TRANSIENT_MARKERS = (
    "connection refused",
    "communications link failure",
    "timeout",
    "lock wait timeout",
    "deadlock",
    "gone away",
    "lost connection",
)

CREDENTIAL_ALPHABET = string.ascii_letters + string.digits


def is_transient(error: BaseException | None) -> bool:
    """Whether a driver failure is worth retrying."""
    if error is None:
        return False
    if isinstance(error, DataAccessError) and error.code in TRANSIENT_CODES:
        return True
    text = str(error).lower()
    return any(marker in text for marker in TRANSIENT_MARKERS)


class MariaDBGrantExecutor:
    """Executes grants, revokes and auto-revoke schedules on the managed store."""

    def __init__(
        self,
        connection: ManagedStoreConnection,
        *,
        credential_length: int = 20,
    ) -> None:
        if not (
            validation.MIN_CREDENTIAL_LENGTH
            <= credential_length
            <= validation.MAX_CREDENTIAL_LENGTH
        ):
            raise ValueError(
                f"credential_length must be between {validation.MIN_CREDENTIAL_LENGTH} "
                f"and {validation.MAX_CREDENTIAL_LENGTH}."
            )
        self._conn = connection
        self._credential_length = credential_length

    # --- lifecycle operations ---

    async def grant_with_auto_revoke(self, permission: Permission) -> None:
        """Ensure the principal exists, grant, then schedule the revoke at end time.

        A failure while ensuring the principal or granting skips the schedule.
        Every step is safe to re-run.
        """
        validation.validate_permission(permission)
        logger.info(
            "Granting %s on %s to %s with auto-revoke at %s",
            permission.privilege_kind,
            permission.resource,
            permission.account,
            permission.end_time.isoformat(),
        )
        await self.ensure_principal_exists(permission.principal, permission.host)
        await self._guard(
            self._grant(permission),
            f"Failed to grant permission on '{permission.resource}' to '{permission.principal}'",
        )
        await self._guard(
            self._schedule_revoke(permission),
            f"Failed to schedule auto-revoke '{permission.auto_revoke_name}'",
        )
        logger.info(
            "Granted %s on %s to %s", permission.privilege_kind, permission.resource, permission.account
        )

    async def revoke_now(self, permission: Permission) -> None:
        """Revoke immediately and cancel the scheduled revoke."""
        validation.validate_identity(permission.principal, permission.host, permission.resource)
        logger.info(
            "Revoking %s on %s from %s", permission.privilege_kind, permission.resource, permission.account
        )
        privileges = sb.privileges_for(permission.privilege_kind)
        scope = sb.resource_scope(permission.resource)
        revoke = sb.build_revoke(privileges, scope, permission.principal, permission.host)
        drop = sb.build_drop_event(permission.auto_revoke_name)
        await self._guard(
            self._conn.execute(revoke.sql),
            f"Failed to revoke permission on '{permission.resource}' from '{permission.principal}'",
        )
        await self._guard(
            self._conn.execute(drop.sql),
            f"Failed to drop auto-revoke '{permission.auto_revoke_name}'",
        )
        logger.info("Revoked %s on %s from %s", ", ".join(privileges), permission.resource, permission.account)

    async def reschedule_auto_revoke(self, permission: Permission) -> None:
        """Recreate the scheduled revoke at the permission's current end time."""
        validation.validate_permission(permission)
        await self._guard(
            self._schedule_revoke(permission),
            f"Failed to reschedule auto-revoke '{permission.auto_revoke_name}'",
        )

    # --- principal management ---

    async def ensure_principal_exists(self, principal: str, host: str) -> None:
        """Create the principal with a generated credential if it is missing."""
        validation.validate_principal(principal)
        validation.validate_host(host)

        async def _ensure() -> None:
            if await self._principal_exists(principal, host):
                logger.debug("Principal '%s'@'%s' already exists", principal, host)
                return
            statement = sb.build_create_user(principal, host, self._generate_credential())
            await self._conn.update(statement.sql, statement.params)
            logger.info("Created principal '%s'@'%s'", principal, host)
            logger.warning(
                "Generated credential for '%s' must be delivered to its owner out of band", principal
            )

        await self._guard(_ensure(), f"Failed to create or verify principal '{principal}'")

    async def create_principal(self, principal: str, host: str, credential: str) -> None:
        validation.validate_principal(principal)
        validation.validate_host(host)
        validation.validate_credential(credential)

        async def _create() -> None:
            if await self._principal_exists(principal, host):
                raise OperationError(f"Principal '{principal}'@'{host}' already exists")
            statement = sb.build_create_user(principal, host, credential)
            await self._conn.update(statement.sql, statement.params)

        await self._guard(_create(), f"Failed to create principal '{principal}'")
        logger.info("Created principal '%s'@'%s'", principal, host)

    async def drop_principal(self, principal: str, host: str) -> None:
        validation.validate_principal(principal)
        validation.validate_host(host)

        async def _drop() -> None:
            await self._require_principal(principal, host)
            await self._conn.execute(sb.build_drop_user(principal, host).sql)

        await self._guard(_drop(), f"Failed to drop principal '{principal}'")
        logger.info("Dropped principal '%s'@'%s'", principal, host)

    async def alter_principal_credential(self, principal: str, host: str, credential: str) -> None:
        validation.validate_principal(principal)
        validation.validate_host(host)
        validation.validate_credential(credential)

        async def _alter() -> None:
            await self._require_principal(principal, host)
            statement = sb.build_alter_user_credential(principal, host, credential)
            await self._conn.update(statement.sql, statement.params)

        await self._guard(_alter(), f"Failed to change credential for '{principal}'")
        logger.info("Changed credential for '%s'@'%s'", principal, host)

    async def principal_exists(self, principal: str, host: str) -> bool:
        """Lookup that reports ``False`` when the store cannot be queried."""
        validation.validate_principal(principal)
        validation.validate_host(host)
        try:
            return await self._principal_exists(principal, host)
        except DataAccessError as e:
            logger.error("Could not check principal '%s'@'%s': %s", principal, host, e)
            return False

    async def list_principals(self) -> list[PrincipalInfo]:
        rows = await self._guard(
            self._conn.query(sb.build_list_users().sql), "Failed to list principals"
        )
        return [PrincipalInfo(principal=r[0], host=r[1]) for r in rows]

    async def get_principal_info(self, principal: str, host: str) -> PrincipalInfo:
        validation.validate_principal(principal)
        validation.validate_host(host)
        rows = await self._guard(
            self._conn.query(sb.build_user_info().sql, (principal, host)),
            f"Failed to get principal '{principal}'",
        )
        if not rows:
            raise NotFoundError("Principal", f"{principal}@{host}")
        return PrincipalInfo(principal=rows[0][0], host=rows[0][1])

    async def list_grants(self, principal: str, host: str) -> list[str]:
        validation.validate_principal(principal)
        validation.validate_host(host)

        async def _list() -> list[str]:
            await self._require_principal(principal, host)
            rows = await self._conn.query(sb.build_show_grants(principal, host).sql)
            return [r[0] for r in rows]

        return await self._guard(_list(), f"Failed to list grants for '{principal}'")

    async def resource_exists(self, resource: str) -> bool:
        """Whether the database (or table) behind a resource descriptor exists."""
        validation.validate_resource(resource)
        if resource == GLOBAL_RESOURCE:
            return True
        scope = sb.resource_scope(resource)
        try:
            if scope.type == ScopeType.TABLE:
                rows = await self._conn.query(
                    sb.build_table_exists().sql, (scope.database, scope.table)
                )
            else:
                rows = await self._conn.query(sb.build_database_exists().sql, (scope.database,))
        except DataAccessError as e:
            logger.error("Could not check resource '%s': %s", resource, e)
            return False
        return bool(rows)

    # --- event scheduler ---

    async def is_event_scheduler_enabled(self) -> bool:
        try:
            rows = await self._conn.query(sb.build_event_scheduler_status().sql)
        except DataAccessError as e:
            logger.error("Error checking event scheduler status: %s", e)
            return False
        return bool(rows) and str(rows[0][1]).upper() == "ON"

    async def enable_event_scheduler(self) -> None:
        await self._guard(
            self._conn.execute(sb.build_enable_event_scheduler().sql),
            "Failed to enable event scheduler",
        )
        logger.info("Enabled managed store event scheduler")

    # --- internals ---

    async def _grant(self, permission: Permission) -> None:
        privileges = sb.privileges_for(permission.privilege_kind)
        scope = sb.resource_scope(permission.resource)
        statement = sb.build_grant(privileges, scope, permission.principal, permission.host)
        await self._conn.execute(statement.sql)

    async def _schedule_revoke(self, permission: Permission) -> None:
        """Drop any schedule of the same name, then create it at end time."""
        name = permission.auto_revoke_name
        privileges = sb.privileges_for(permission.privilege_kind)
        scope = sb.resource_scope(permission.resource)
        drop = sb.build_drop_event(name)
        create = sb.build_create_revoke_event(
            name, permission.end_time, privileges, scope, permission.principal, permission.host
        )
        await self._conn.execute(drop.sql)
        await self._conn.execute(create.sql)
        logger.info("Scheduled auto-revoke '%s' at %s", name, sb.format_timestamp(permission.end_time))

    async def _principal_exists(self, principal: str, host: str) -> bool:
        rows = await self._conn.query(sb.build_user_exists().sql, (principal, host))
        return bool(rows) and int(rows[0][0]) > 0

    async def _require_principal(self, principal: str, host: str) -> None:
        if not await self._principal_exists(principal, host):
            raise NotFoundError("Principal", f"{principal}@{host}")

    def _generate_credential(self) -> str:
        while True:
            credential = "".join(
                secrets.choice(CREDENTIAL_ALPHABET) for _ in range(self._credential_length)
            )
            try:
                validation.validate_credential(credential)
            except ValidationError:
                continue
            return credential

    async def _guard(self, operation: Awaitable[T], message: str) -> T:
        """Await ``operation`` and translate failures into the error taxonomy."""
        try:
            return await operation
        except DbGrantError as e:
            if isinstance(e, DataAccessError):
                retryable = is_transient(e)
                logger.error("%s: %s (retryable=%s)", message, e, retryable)
                raise PermissionOperationError(
                    f"{message}: {e}", retryable=retryable, cause=e
                ) from e
            raise
        except Exception as e:
            logger.exception("Unexpected error: %s", message)
            raise OperationError(f"{message}: {e}", cause=e) from e
