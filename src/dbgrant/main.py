"""Application entry point and composition root."""

import logging

from dbgrant import __version__
from dbgrant.application.retry_policy import RetryPolicy
from dbgrant.application.services.event_orchestrator import EventOrchestrator
from dbgrant.application.services.expiration_sweeper import ExpirationSweeper
from dbgrant.application.use_cases.history.list_events import ListPermissionEventsUseCase
from dbgrant.application.use_cases.permission.activate_permission import (
    ActivatePermissionUseCase,
)
from dbgrant.application.use_cases.permission.approve_permission import (
    ApprovePermissionUseCase,
)
from dbgrant.application.use_cases.permission.bulk_grant_permissions import (
    BulkGrantPermissionsUseCase,
)
from dbgrant.application.use_cases.permission.create_permission import (
    CreatePermissionUseCase,
)
from dbgrant.application.use_cases.permission.expire_permission import (
    ExpirePermissionUseCase,
)
from dbgrant.application.use_cases.permission.extend_permission import (
    ExtendPermissionUseCase,
)
from dbgrant.application.use_cases.permission.get_permission import (
    GetPermissionUseCase,
    ListExpiringPermissionsUseCase,
    ListPermissionsUseCase,
)
from dbgrant.application.use_cases.permission.revoke_permission import (
    RevokePermissionUseCase,
)
from dbgrant.application.use_cases.principal.change_credential import (
    ChangePrincipalCredentialUseCase,
)
from dbgrant.application.use_cases.principal.drop_principal import DropPrincipalUseCase
from dbgrant.application.use_cases.principal.get_principal import (
    GetPrincipalUseCase,
    ListPrincipalsUseCase,
)
from dbgrant.application.use_cases.principal.register_principal import (
    RegisterPrincipalUseCase,
)
from dbgrant.config import get_settings
from dbgrant.infrastructure.events.keyed_dispatcher import KeyedDispatcher
from dbgrant.infrastructure.mariadb.connection import MariaDBConnection
from dbgrant.infrastructure.mariadb.grant_executor import MariaDBGrantExecutor
from dbgrant.infrastructure.persistence.postgres.connection import create_pool
from dbgrant.infrastructure.persistence.postgres.unit_of_work import create_uow_factory
from dbgrant.interfaces.api.app import create_app
from dbgrant.interfaces.api.middleware.actor import ActorMiddleware
from dbgrant.interfaces.api.middleware.lifespan import ResourceLifespanMiddleware
from dbgrant.interfaces.api.resources.events import EventsResource, PermissionEventsResource
from dbgrant.interfaces.api.resources.health import HealthResource
from dbgrant.interfaces.api.resources.permissions import (
    BulkPermissionsResource,
    ExpiringPermissionsResource,
    PermissionResource,
    PermissionsResource,
)
from dbgrant.interfaces.api.resources.principals import PrincipalResource, PrincipalsResource
from dbgrant.logging_config import configure_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("dbgrant v%s (%s)", __version__, settings.environment)
    run_server()


def create_dbgrant_app():
    """Composition root - build Falcon app with all dependencies."""
    settings = get_settings()
    pool = create_pool(
        settings.database_url,
        min_size=settings.database_pool_min_size,
        max_size=settings.database_pool_max_size,
    )
    uow_factory = create_uow_factory(pool)

    managed_store = MariaDBConnection(
        host=settings.managed_db_host,
        port=settings.managed_db_port,
        user=settings.managed_db_user,
        password=settings.managed_db_password,
        database=settings.managed_db_name,
        min_size=settings.managed_db_pool_min_size,
        max_size=settings.managed_db_pool_max_size,
        connect_timeout=settings.managed_db_connect_timeout,
    )
    executor = MariaDBGrantExecutor(
        managed_store, credential_length=settings.generated_credential_length
    )

    orchestrator = EventOrchestrator(
        executor,
        uow_factory,
        retry_policy=RetryPolicy(
            max_attempts=settings.retry_max_attempts,
            initial_delay=settings.retry_initial_delay_seconds,
            multiplier=settings.retry_multiplier,
            max_delay=settings.retry_max_delay_seconds,
        ),
    )
    dispatcher = KeyedDispatcher(orchestrator.handle, workers=settings.dispatcher_workers)

    activate_permission = ActivatePermissionUseCase(uow_factory, dispatcher)
    default_host = settings.default_principal_host
    create_permission = CreatePermissionUseCase(
        uow_factory, dispatcher, default_host=default_host, executor=executor
    )
    approve_permission = ApprovePermissionUseCase(uow_factory, dispatcher, activate_permission)
    revoke_permission = RevokePermissionUseCase(uow_factory, dispatcher)
    extend_permission = ExtendPermissionUseCase(uow_factory, dispatcher)
    expire_permission = ExpirePermissionUseCase(uow_factory, dispatcher)
    list_events = ListPermissionEventsUseCase(uow_factory)
    list_permissions = ListPermissionsUseCase(uow_factory)

    sweeper = ExpirationSweeper(
        uow_factory,
        expire_permission,
        executor,
        sweep_interval=settings.sweep_interval_seconds,
        scheduler_check_interval=settings.scheduler_check_interval_seconds,
    )

    return create_app(
        permissions_resource=PermissionsResource(create_permission, list_permissions),
        permission_resource=PermissionResource(
            GetPermissionUseCase(uow_factory),
            approve_permission,
            activate_permission,
            revoke_permission,
            extend_permission,
        ),
        permission_events_resource=PermissionEventsResource(list_events),
        events_resource=EventsResource(list_events),
        health_resource=HealthResource(executor),
        bulk_permissions_resource=BulkPermissionsResource(
            BulkGrantPermissionsUseCase(create_permission, approve_permission)
        ),
        expiring_permissions_resource=ExpiringPermissionsResource(
            ListExpiringPermissionsUseCase(uow_factory)
        ),
        principals_resource=PrincipalsResource(
            ListPrincipalsUseCase(uow_factory, executor),
            RegisterPrincipalUseCase(uow_factory, executor, default_host=default_host),
        ),
        principal_resource=PrincipalResource(
            GetPrincipalUseCase(uow_factory, executor, default_host=default_host),
            DropPrincipalUseCase(uow_factory, executor, default_host=default_host),
            ChangePrincipalCredentialUseCase(uow_factory, executor, default_host=default_host),
            list_permissions,
        ),
        middleware=[
            ResourceLifespanMiddleware(pool, managed_store, dispatcher, sweeper),
            ActorMiddleware(),
        ],
    )


def run_server() -> None:
    """Run uvicorn server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        create_dbgrant_app(),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
