"""Pytest fixtures for dbgrant tests."""

from __future__ import annotations

import re
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

import pytest

from dbgrant.application.ports.managed_store import DataAccessError
from dbgrant.domain.entities import Permission, PermissionEvent, Principal
from dbgrant.domain.events import DomainEvent
from dbgrant.domain.value_objects import PermissionStatus, PrivilegeKind

_ACCOUNT = re.compile(r"'((?:[^']|'')*)'@'((?:[^']|'')*)'")
_EVENT_NAME = re.compile(r"EVENT (?:IF EXISTS )?`([^`]*)`")


# --- Fake repositories ---


class FakePermissionRepository:
    """In-memory permission repository. Stores and returns copies."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, Permission] = {}
        self.locked: list[UUID] = []

    async def get_by_id(self, permission_id: UUID) -> Permission | None:
        p = self._by_id.get(permission_id)
        return replace(p) if p else None

    async def get_for_update(self, permission_id: UUID) -> Permission | None:
        self.locked.append(permission_id)
        return await self.get_by_id(permission_id)

    async def list_by_principal(self, principal: str) -> list[Permission]:
        return [replace(p) for p in self._by_id.values() if p.principal == principal]

    async def list_by_status(self, status: PermissionStatus) -> list[Permission]:
        return [replace(p) for p in self._by_id.values() if p.status == status]

    async def list_active_expired_as_of(self, moment: datetime) -> list[Permission]:
        return [
            replace(p)
            for p in self._by_id.values()
            if p.status == PermissionStatus.ACTIVE and p.end_time <= moment
        ]

    async def list_active_expiring_between(
        self, start: datetime, end: datetime
    ) -> list[Permission]:
        return sorted(
            (
                replace(p)
                for p in self._by_id.values()
                if p.status == PermissionStatus.ACTIVE and start <= p.end_time <= end
            ),
            key=lambda p: p.end_time,
        )

    async def create(self, permission: Permission) -> Permission:
        self._by_id[permission.id] = replace(permission)
        return permission

    async def update(self, permission: Permission) -> None:
        self._by_id[permission.id] = replace(permission)

    def add(self, permission: Permission) -> None:
        """Helper to seed a permission for tests."""
        self._by_id[permission.id] = replace(permission)

    def stored(self, permission_id: UUID) -> Permission:
        """Helper returning the persisted row."""
        return self._by_id[permission_id]


class FakePermissionEventRepository:
    """In-memory append-only audit trail."""

    def __init__(self, permissions: FakePermissionRepository | None = None) -> None:
        self._store: list[PermissionEvent] = []
        self._permissions = permissions

    async def append(self, event: PermissionEvent) -> PermissionEvent:
        self._store.append(event)
        return event

    async def list_by_permission(self, permission_id: UUID) -> list[PermissionEvent]:
        return [e for e in self._store if e.permission_id == permission_id]

    async def list_by_principal(self, principal: str) -> list[PermissionEvent]:
        ids = set()
        if self._permissions:
            ids = {p.id for p in await self._permissions.list_by_principal(principal)}
        return [e for e in self._store if e.permission_id in ids]

    async def list_between(self, start: datetime, end: datetime) -> list[PermissionEvent]:
        return [e for e in self._store if start <= e.event_time < end]

    @property
    def all(self) -> list[PermissionEvent]:
        return list(self._store)

    def kinds(self, permission_id: UUID | None = None) -> list[str]:
        """Helper: event kinds in append order."""
        return [
            e.kind.value
            for e in self._store
            if permission_id is None or e.permission_id == permission_id
        ]


class FakePrincipalRepository:
    """In-memory principal directory."""

    def __init__(self, names: set[str] | None = None) -> None:
        self._by_name: dict[str, Principal] = {}
        for name in names or ():
            self.seed(name)

    async def exists(self, name: str) -> bool:
        return name in self._by_name

    async def get(self, name: str) -> Principal | None:
        return self._by_name.get(name)

    async def list_all(self) -> list[Principal]:
        return [self._by_name[n] for n in sorted(self._by_name)]

    async def add(self, principal: Principal) -> Principal:
        self._by_name[principal.name] = principal
        return principal

    async def remove(self, name: str) -> None:
        self._by_name.pop(name, None)

    def seed(self, name: str) -> None:
        """Helper to register a name for tests."""
        self._by_name[name] = Principal(name=name, created_at=datetime.now(UTC))


# --- Fake UnitOfWork ---


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories."""

    def __init__(self) -> None:
        self.permissions = FakePermissionRepository()
        self.events = FakePermissionEventRepository(self.permissions)
        self.principals = FakePrincipalRepository({"alice", "dave"})
        self.commits = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        pass


def make_uow_factory(uow: FakeUnitOfWork):
    """Factory yielding the same UoW for every call, committing on clean exit."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUnitOfWork]:
        yield uow
        await uow.commit()

    return _factory


# --- Fake managed store ---


class FakeManagedStore:
    """Records statements and simulates accounts, grants and scheduled events.

    ``fail_on`` maps a statement prefix to a list of exceptions; each matching
    call pops and raises the next one.
    """

    def __init__(self) -> None:
        self.statements: list[str] = []
        self.params: list[tuple] = []
        self.users: set[tuple[str, str]] = set()
        self.events: dict[str, str] = {}
        self.grants: list[str] = []
        self.scheduler_on = True
        self.databases: set[str] = {"sales"}
        self.tables: set[tuple[str, str]] = {("sales", "orders")}
        self.fail_on: dict[str, list[BaseException]] = {}

    def _maybe_fail(self, sql: str) -> None:
        for prefix, errors in self.fail_on.items():
            if sql.startswith(prefix) and errors:
                raise errors.pop(0)

    @staticmethod
    def _account(sql: str) -> tuple[str, str]:
        m = _ACCOUNT.search(sql.replace("%%", "%"))
        return m.group(1), m.group(2)

    async def execute(self, statement: str) -> None:
        self._maybe_fail(statement)
        self.statements.append(statement)
        if statement.startswith("DROP EVENT"):
            self.events.pop(_EVENT_NAME.search(statement).group(1), None)
        elif statement.startswith("CREATE EVENT"):
            name = _EVENT_NAME.search(statement).group(1)
            if name in self.events:
                raise DataAccessError(f"Event '{name}' already exists", code=1537)
            self.events[name] = statement
        elif statement.startswith("GRANT"):
            self.grants.append(statement)
        elif statement.startswith("DROP USER"):
            self.users.discard(self._account(statement))
        elif statement.startswith("SET GLOBAL event_scheduler"):
            self.scheduler_on = True

    async def query(self, statement: str, params: Sequence[Any] = ()) -> list[tuple]:
        self._maybe_fail(statement)
        self.statements.append(statement)
        if statement.startswith("SELECT COUNT(*) FROM mysql.user"):
            return [(1 if tuple(params) in self.users else 0,)]
        if statement.startswith("SHOW VARIABLES LIKE 'event_scheduler'"):
            return [("event_scheduler", "ON" if self.scheduler_on else "OFF")]
        if statement.startswith("SHOW GRANTS"):
            return [(g,) for g in self.grants if self._account(g) == self._account(statement)]
        if statement.startswith("SELECT user, host FROM mysql.user WHERE user ="):
            return [u for u in self.users if u == tuple(params)]
        if statement.startswith("SELECT user, host FROM mysql.user"):
            return sorted(self.users)
        if "information_schema.SCHEMATA" in statement:
            return [(params[0],)] if params[0] in self.databases else []
        if "information_schema.TABLES" in statement:
            return [(params[1],)] if tuple(params) in self.tables else []
        return []

    async def update(self, statement: str, params: Sequence[Any]) -> int:
        self._maybe_fail(statement)
        self.statements.append(statement)
        self.params.append(tuple(params))
        if statement.startswith("CREATE USER"):
            self.users.add(self._account(statement))
        return 1

    def matching(self, prefix: str) -> list[str]:
        """Helper: recorded statements starting with prefix."""
        return [s for s in self.statements if s.startswith(prefix)]


def transient_error(message: str = "Lost connection to MySQL server during query") -> DataAccessError:
    return DataAccessError(message, code=2013)


def permanent_error(message: str = "Access denied for user 'dbgrant'@'%'") -> DataAccessError:
    return DataAccessError(message, code=1045)


# --- Event publisher ---


class RecordingPublisher:
    """EventPublisher that keeps published events in order."""

    def __init__(self) -> None:
        self.events: list[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [e.kind.value for e in self.events]

    def drain(self) -> list[DomainEvent]:
        events, self.events = self.events, []
        return events


# --- Builders ---


def make_permission(**overrides) -> Permission:
    """Permission with sensible defaults: alice READ on sales for one hour from now."""
    now = datetime.now(UTC)
    fields = dict(
        id=uuid4(),
        principal="alice",
        host="%",
        resource="sales",
        privilege_kind=PrivilegeKind.READ,
        start_time=now,
        end_time=now + timedelta(hours=1),
        created_at=now,
        updated_at=now,
        status=PermissionStatus.PENDING,
        created_by="alice",
    )
    fields.update(overrides)
    return Permission(**fields)


# --- Fixtures ---


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    """Fresh in-memory UnitOfWork for each test."""
    return FakeUnitOfWork()


@pytest.fixture
def uow_factory(fake_uow: FakeUnitOfWork):
    """Factory returning async context manager yielding the test's FakeUnitOfWork."""
    return make_uow_factory(fake_uow)


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def managed_store() -> FakeManagedStore:
    return FakeManagedStore()


@pytest.fixture
def mock_executor():
    """AsyncMock for GrantExecutor - every operation succeeds by default."""
    from unittest.mock import AsyncMock

    mock = AsyncMock()
    mock.is_event_scheduler_enabled.return_value = True
    return mock


@pytest.fixture
def no_sleep():
    """Replacement for asyncio.sleep that records requested delays."""
    delays: list[float] = []

    async def _sleep(delay: float) -> None:
        delays.append(delay)

    _sleep.delays = delays
    return _sleep
