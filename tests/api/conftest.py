"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

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
from dbgrant.infrastructure.mariadb.grant_executor import MariaDBGrantExecutor
from dbgrant.interfaces.api.app import create_app
from dbgrant.interfaces.api.middleware.actor import ActorMiddleware
from dbgrant.interfaces.api.resources.events import EventsResource, PermissionEventsResource
from dbgrant.interfaces.api.resources.health import HealthResource
from dbgrant.interfaces.api.resources.permissions import (
    BulkPermissionsResource,
    ExpiringPermissionsResource,
    PermissionResource,
    PermissionsResource,
)
from dbgrant.interfaces.api.resources.principals import PrincipalResource, PrincipalsResource


@pytest.fixture
def app(uow_factory, publisher, mock_executor, managed_store):
    """Falcon ASGI app over the in-memory unit of work and managed store."""
    executor = MariaDBGrantExecutor(managed_store)
    activate = ActivatePermissionUseCase(uow_factory, publisher)
    create = CreatePermissionUseCase(uow_factory, publisher)
    approve = ApprovePermissionUseCase(uow_factory, publisher, activate)
    list_permissions = ListPermissionsUseCase(uow_factory)
    list_events = ListPermissionEventsUseCase(uow_factory)
    return create_app(
        permissions_resource=PermissionsResource(create, list_permissions),
        permission_resource=PermissionResource(
            GetPermissionUseCase(uow_factory),
            approve,
            activate,
            RevokePermissionUseCase(uow_factory, publisher),
            ExtendPermissionUseCase(uow_factory, publisher),
        ),
        permission_events_resource=PermissionEventsResource(list_events),
        events_resource=EventsResource(list_events),
        health_resource=HealthResource(mock_executor),
        bulk_permissions_resource=BulkPermissionsResource(
            BulkGrantPermissionsUseCase(create, approve)
        ),
        expiring_permissions_resource=ExpiringPermissionsResource(
            ListExpiringPermissionsUseCase(uow_factory)
        ),
        principals_resource=PrincipalsResource(
            ListPrincipalsUseCase(uow_factory, executor),
            RegisterPrincipalUseCase(uow_factory, executor),
        ),
        principal_resource=PrincipalResource(
            GetPrincipalUseCase(uow_factory, executor),
            DropPrincipalUseCase(uow_factory, executor),
            ChangePrincipalCredentialUseCase(uow_factory, executor),
            list_permissions,
        ),
        middleware=[ActorMiddleware()],
    )


@pytest.fixture
def client(app):
    """Falcon ASGI test client."""
    return TestClient(app)
