"""API resource tests."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from falcon.testing import TestClient

from dbgrant.domain.value_objects import PermissionStatus
from dbgrant.interfaces.api.resources.errors import parse_timestamp

from tests.conftest import FakeManagedStore, FakeUnitOfWork, RecordingPublisher, make_permission

ACTOR = {"X-Actor": "bob"}


def _body(**overrides) -> dict:
    now = datetime.now(UTC)
    body = {
        "principal": "alice",
        "resource": "sales",
        "privilege_kind": "read",
        "start_time": (now + timedelta(hours=1)).isoformat(),
        "end_time": (now + timedelta(hours=3)).isoformat(),
    }
    body.update(overrides)
    return body


def _q(moment: datetime) -> str:
    """Query-string timestamp: naive, read back as UTC."""
    return moment.replace(tzinfo=None).isoformat()


class TestActor:
    def test_missing_actor_is_unauthorized(self, client: TestClient) -> None:
        assert client.simulate_post("/v1/permissions", json=_body()).status_code == 401
        assert client.simulate_get("/v1/permissions", params={"principal": "alice"}).status_code == 401
        assert client.simulate_get(f"/v1/permissions/{uuid4()}").status_code == 401
        assert client.simulate_post(f"/v1/permissions/{uuid4()}/approve").status_code == 401
        assert client.simulate_get("/v1/events", params={"principal": "alice"}).status_code == 401

    def test_blank_actor_is_unauthorized(self, client: TestClient) -> None:
        result = client.simulate_post("/v1/permissions", json=_body(), headers={"X-Actor": "  "})
        assert result.status_code == 401


class TestCreateAndGet:
    def test_create_returns_pending_permission(
        self, client: TestClient, fake_uow: FakeUnitOfWork, publisher: RecordingPublisher
    ) -> None:
        result = client.simulate_post("/v1/permissions", json=_body(), headers=ACTOR)

        assert result.status_code == 201
        assert result.json["status"] == "PENDING"
        assert result.json["privilege_kind"] == "READ"
        assert result.json["host"] == "%"
        assert result.json["created_by"] == "bob"
        assert publisher.kinds() == ["CREATED"]
        assert fake_uow.events.kinds() == ["CREATED"]

        fetched = client.simulate_get(f"/v1/permissions/{result.json['id']}", headers=ACTOR)
        assert fetched.status_code == 200
        assert fetched.json == result.json

    def test_missing_field_is_bad_request(self, client: TestClient) -> None:
        body = _body()
        del body["resource"]
        result = client.simulate_post("/v1/permissions", json=body, headers=ACTOR)
        assert result.status_code == 400
        assert "resource" in result.json["error"]

    @pytest.mark.parametrize(
        ("field", "value"),
        [("principal", 5), ("resource", ["sales"]), ("host", 10), ("principal", None)],
    )
    def test_non_string_field_is_bad_request(
        self, client: TestClient, fake_uow: FakeUnitOfWork, field: str, value
    ) -> None:
        result = client.simulate_post("/v1/permissions", json=_body(**{field: value}), headers=ACTOR)
        assert result.status_code == 400
        assert fake_uow.events.all == []

    def test_unknown_privilege_kind_is_bad_request(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/permissions", json=_body(privilege_kind="OWNER"), headers=ACTOR
        )
        assert result.status_code == 400

    def test_validation_error_is_bad_request(self, client: TestClient) -> None:
        result = client.simulate_post("/v1/permissions", json=_body(resource="1db"), headers=ACTOR)
        assert result.status_code == 400
        assert result.json["kind"] == "VALIDATION"
        assert "cannot start with a digit" in result.json["error"]

    def test_end_before_start_is_bad_request(self, client: TestClient) -> None:
        now = datetime.now(UTC)
        result = client.simulate_post(
            "/v1/permissions",
            json=_body(
                start_time=(now + timedelta(hours=2)).isoformat(),
                end_time=(now + timedelta(hours=1)).isoformat(),
            ),
            headers=ACTOR,
        )
        assert result.status_code == 400

    def test_unknown_principal_is_not_found(self, client: TestClient) -> None:
        result = client.simulate_post("/v1/permissions", json=_body(principal="mallory"), headers=ACTOR)
        assert result.status_code == 404
        assert result.json["kind"] == "NOT_FOUND"

    def test_get_unknown_permission(self, client: TestClient) -> None:
        assert client.simulate_get(f"/v1/permissions/{uuid4()}", headers=ACTOR).status_code == 404
        assert client.simulate_get("/v1/permissions/not-a-uuid", headers=ACTOR).status_code == 400

    def test_list_by_principal_and_status(self, client: TestClient, fake_uow: FakeUnitOfWork) -> None:
        fake_uow.permissions.add(make_permission())
        fake_uow.permissions.add(make_permission(status=PermissionStatus.ACTIVE))
        fake_uow.permissions.add(make_permission(principal="dave"))

        by_principal = client.simulate_get(
            "/v1/permissions", params={"principal": "alice"}, headers=ACTOR
        )
        active = client.simulate_get(
            "/v1/permissions", params={"principal": "alice", "status": "active"}, headers=ACTOR
        )

        assert len(by_principal.json["items"]) == 2
        assert [p["status"] for p in active.json["items"]] == ["ACTIVE"]

    def test_list_requires_a_filter(self, client: TestClient) -> None:
        result = client.simulate_get("/v1/permissions", headers=ACTOR)
        assert result.status_code == 400
        assert result.json["kind"] == "INVALID_ARGUMENT"

    def test_list_unknown_status(self, client: TestClient) -> None:
        result = client.simulate_get("/v1/permissions", params={"status": "frozen"}, headers=ACTOR)
        assert result.status_code == 400


class TestLifecycleActions:
    def test_approve_future_start_stays_approved(
        self, client: TestClient, publisher: RecordingPublisher
    ) -> None:
        created = client.simulate_post("/v1/permissions", json=_body(), headers=ACTOR).json

        result = client.simulate_post(f"/v1/permissions/{created['id']}/approve", headers=ACTOR)

        assert result.status_code == 200
        assert result.json["status"] == "APPROVED"
        assert result.json["approved_by"] == "bob"
        assert publisher.kinds() == ["CREATED", "APPROVED"]

    def test_approve_due_start_activates(
        self, client: TestClient, publisher: RecordingPublisher
    ) -> None:
        now = datetime.now(UTC)
        created = client.simulate_post(
            "/v1/permissions",
            json=_body(start_time=(now - timedelta(minutes=1)).isoformat()),
            headers=ACTOR,
        ).json

        result = client.simulate_post(f"/v1/permissions/{created['id']}/approve", headers=ACTOR)

        assert result.json["status"] == "ACTIVE"
        assert publisher.kinds() == ["CREATED", "APPROVED", "ACTIVATED"]

    def test_approve_twice_is_conflict(self, client: TestClient, fake_uow: FakeUnitOfWork) -> None:
        p = make_permission(status=PermissionStatus.ACTIVE)
        fake_uow.permissions.add(p)

        result = client.simulate_post(f"/v1/permissions/{p.id}/approve", headers=ACTOR)

        assert result.status_code == 409
        assert result.json["kind"] == "INVALID_STATE"

    def test_activate_approved(self, client: TestClient, fake_uow: FakeUnitOfWork) -> None:
        p = make_permission(status=PermissionStatus.APPROVED)
        fake_uow.permissions.add(p)

        result = client.simulate_post(f"/v1/permissions/{p.id}/activate", headers=ACTOR)

        assert result.status_code == 200
        assert result.json["status"] == "ACTIVE"

    def test_revoke(
        self, client: TestClient, fake_uow: FakeUnitOfWork, publisher: RecordingPublisher
    ) -> None:
        p = make_permission(status=PermissionStatus.ACTIVE)
        fake_uow.permissions.add(p)

        result = client.simulate_post(f"/v1/permissions/{p.id}/revoke", headers=ACTOR)
        again = client.simulate_post(f"/v1/permissions/{p.id}/revoke", headers=ACTOR)

        assert result.status_code == 200
        assert result.json["status"] == "REVOKED"
        assert result.json["revoked_by"] == "bob"
        assert publisher.kinds() == ["REVOKED"]
        assert again.status_code == 409

    def test_extend(self, client: TestClient, fake_uow: FakeUnitOfWork) -> None:
        p = make_permission(status=PermissionStatus.ACTIVE)
        fake_uow.permissions.add(p)
        new_end = p.end_time + timedelta(days=1)

        result = client.simulate_post(
            f"/v1/permissions/{p.id}/extend", json={"end_time": new_end.isoformat()}, headers=ACTOR
        )

        assert result.status_code == 200
        assert parse_timestamp(result.json["end_time"]) == new_end
        assert fake_uow.events.kinds(p.id) == ["EXTENDED"]

    def test_extend_requires_end_time(self, client: TestClient, fake_uow: FakeUnitOfWork) -> None:
        p = make_permission(status=PermissionStatus.ACTIVE)
        fake_uow.permissions.add(p)

        result = client.simulate_post(f"/v1/permissions/{p.id}/extend", json={}, headers=ACTOR)

        assert result.status_code == 400

    def test_extend_earlier_end_is_rejected(self, client: TestClient, fake_uow: FakeUnitOfWork) -> None:
        p = make_permission(status=PermissionStatus.ACTIVE)
        fake_uow.permissions.add(p)

        result = client.simulate_post(
            f"/v1/permissions/{p.id}/extend",
            json={"end_time": (p.end_time - timedelta(minutes=5)).isoformat()},
            headers=ACTOR,
        )

        assert result.status_code == 400
        assert fake_uow.events.kinds(p.id) == []


class TestEvents:
    def test_events_of_permission(self, client: TestClient) -> None:
        created = client.simulate_post("/v1/permissions", json=_body(), headers=ACTOR).json
        client.simulate_post(f"/v1/permissions/{created['id']}/approve", headers=ACTOR)

        result = client.simulate_get(f"/v1/permissions/{created['id']}/events", headers=ACTOR)

        assert result.status_code == 200
        assert [e["kind"] for e in result.json["items"]] == ["CREATED", "APPROVED"]
        assert result.json["items"][1]["actor"] == "bob"

    def test_events_by_principal(self, client: TestClient) -> None:
        client.simulate_post("/v1/permissions", json=_body(), headers=ACTOR)
        client.simulate_post("/v1/permissions", json=_body(principal="dave"), headers=ACTOR)

        result = client.simulate_get("/v1/events", params={"principal": "dave"}, headers=ACTOR)

        assert len(result.json["items"]) == 1

    def test_events_in_window(self, client: TestClient) -> None:
        before = datetime.now(UTC) - timedelta(minutes=1)
        client.simulate_post("/v1/permissions", json=_body(), headers=ACTOR)
        after = datetime.now(UTC) + timedelta(minutes=1)

        inside = client.simulate_get(
            "/v1/events",
            params={"start": _q(before), "end": _q(after)},
            headers=ACTOR,
        )
        outside = client.simulate_get(
            "/v1/events",
            params={
                "start": _q(after + timedelta(hours=1)),
                "end": _q(after + timedelta(hours=2)),
            },
            headers=ACTOR,
        )

        assert len(inside.json["items"]) == 1
        assert outside.json["items"] == []

    def test_events_query_needs_exactly_one_filter(self, client: TestClient) -> None:
        now = datetime.now(UTC)
        assert client.simulate_get("/v1/events", headers=ACTOR).status_code == 400
        result = client.simulate_get(
            "/v1/events",
            params={"principal": "alice", "start": _q(now), "end": _q(now)},
            headers=ACTOR,
        )
        assert result.status_code == 400
        only_start = client.simulate_get("/v1/events", params={"start": _q(now)}, headers=ACTOR)
        assert only_start.status_code == 400

    def test_bad_timestamp(self, client: TestClient) -> None:
        result = client.simulate_get(
            "/v1/events", params={"start": "yesterday", "end": "today"}, headers=ACTOR
        )
        assert result.status_code == 400


class TestBulkAndExpiring:
    def test_bulk_grant_activates_every_combination(
        self, client: TestClient, publisher: RecordingPublisher
    ) -> None:
        result = client.simulate_post(
            "/v1/permissions/bulk",
            json={
                "principal": "alice",
                "resources": ["sales", "sales.orders"],
                "privilege_kinds": ["read", "write"],
                "duration_days": 3,
            },
            headers=ACTOR,
        )

        assert result.status_code == 201
        items = result.json["items"]
        assert len(items) == 4
        assert {i["status"] for i in items} == {"ACTIVE"}
        assert {i["approved_by"] for i in items} == {"bob"}
        assert publisher.kinds().count("ACTIVATED") == 4

    @pytest.mark.parametrize(
        "overrides",
        [
            {"resources": []},
            {"resources": "sales"},
            {"privilege_kinds": ["OWNER"]},
            {"duration_days": 0},
            {"duration_days": "7"},
            {"principal": 5},
        ],
    )
    def test_bulk_grant_bad_input(
        self, client: TestClient, fake_uow: FakeUnitOfWork, overrides: dict
    ) -> None:
        body = {
            "principal": "alice",
            "resources": ["sales"],
            "privilege_kinds": ["read"],
            "duration_days": 1,
        }
        body.update(overrides)

        result = client.simulate_post("/v1/permissions/bulk", json=body, headers=ACTOR)

        assert result.status_code == 400
        assert fake_uow.events.all == []

    def test_bulk_grant_requires_actor(self, client: TestClient) -> None:
        assert client.simulate_post("/v1/permissions/bulk", json={}).status_code == 401

    def test_expiring_lists_active_in_window(
        self, client: TestClient, fake_uow: FakeUnitOfWork
    ) -> None:
        now = datetime.now(UTC)
        soon = make_permission(status=PermissionStatus.ACTIVE, end_time=now + timedelta(hours=2))
        later = make_permission(status=PermissionStatus.ACTIVE, end_time=now + timedelta(days=2))
        for p in (soon, later):
            fake_uow.permissions.add(p)

        result = client.simulate_get(
            "/v1/permissions/expiring",
            params={"start": _q(now), "end": _q(now + timedelta(hours=6))},
            headers=ACTOR,
        )

        assert result.status_code == 200
        assert [i["id"] for i in result.json["items"]] == [str(soon.id)]

    def test_expiring_needs_both_bounds(self, client: TestClient) -> None:
        now = datetime.now(UTC)
        result = client.simulate_get(
            "/v1/permissions/expiring", params={"start": _q(now)}, headers=ACTOR
        )
        assert result.status_code == 400
        reversed_window = client.simulate_get(
            "/v1/permissions/expiring",
            params={"start": _q(now), "end": _q(now - timedelta(hours=1))},
            headers=ACTOR,
        )
        assert reversed_window.status_code == 400


class TestPrincipals:
    def test_register_and_list(self, client: TestClient, managed_store: FakeManagedStore) -> None:
        result = client.simulate_post(
            "/v1/principals",
            json={"name": "report_bot", "credential": "Sup3rSecret", "display_name": "Reports"},
            headers=ACTOR,
        )

        assert result.status_code == 201
        assert result.json["name"] == "report_bot"
        assert "credential" not in result.json
        assert ("report_bot", "%") in managed_store.users

        listed = client.simulate_get("/v1/principals", headers=ACTOR)
        assert listed.status_code == 200
        by_name = {i["name"]: i for i in listed.json["items"]}
        assert set(by_name) == {"alice", "dave", "report_bot"}
        assert by_name["report_bot"]["hosts"] == ["%"]

    def test_register_duplicate_is_conflict(self, client: TestClient) -> None:
        result = client.simulate_post("/v1/principals", json={"name": "alice"}, headers=ACTOR)
        assert result.status_code == 409

    @pytest.mark.parametrize("body", [{}, {"name": 5}, {"name": "bad name"}])
    def test_register_bad_input(self, client: TestClient, body: dict) -> None:
        assert client.simulate_post("/v1/principals", json=body, headers=ACTOR).status_code == 400

    def test_get_principal_with_grants(
        self, client: TestClient, managed_store: FakeManagedStore
    ) -> None:
        managed_store.users.add(("alice", "%"))
        managed_store.grants.append("GRANT SELECT ON `sales`.* TO 'alice'@'%'")

        result = client.simulate_get("/v1/principals/alice", headers=ACTOR)

        assert result.status_code == 200
        assert result.json["account"] == {"principal": "alice", "host": "%"}
        assert result.json["grants"] == ["GRANT SELECT ON `sales`.* TO 'alice'@'%'"]

    def test_get_principal_other_host_without_account(self, client: TestClient) -> None:
        result = client.simulate_get(
            "/v1/principals/dave", params={"host": "localhost"}, headers=ACTOR
        )
        assert result.status_code == 200
        assert result.json["host"] == "localhost"
        assert result.json["account"] is None

    def test_get_unknown_principal(self, client: TestClient) -> None:
        assert client.simulate_get("/v1/principals/mallory", headers=ACTOR).status_code == 404

    def test_change_credential(self, client: TestClient, managed_store: FakeManagedStore) -> None:
        managed_store.users.add(("alice", "%"))

        result = client.simulate_post(
            "/v1/principals/alice/credential", json={"credential": "N3wSecret9"}, headers=ACTOR
        )

        assert result.status_code == 204
        assert managed_store.params[-1] == ("N3wSecret9",)

    def test_change_credential_rejects_weak_value(
        self, client: TestClient, managed_store: FakeManagedStore
    ) -> None:
        managed_store.users.add(("alice", "%"))
        result = client.simulate_post(
            "/v1/principals/alice/credential", json={"credential": "short"}, headers=ACTOR
        )
        assert result.status_code == 400

    def test_drop_blocked_by_live_permission(
        self, client: TestClient, fake_uow: FakeUnitOfWork
    ) -> None:
        fake_uow.permissions.add(make_permission(principal="dave", status=PermissionStatus.ACTIVE))
        assert client.simulate_delete("/v1/principals/dave", headers=ACTOR).status_code == 409

    def test_drop(self, client: TestClient, fake_uow: FakeUnitOfWork) -> None:
        assert client.simulate_delete("/v1/principals/dave", headers=ACTOR).status_code == 204
        assert client.simulate_get("/v1/principals/dave", headers=ACTOR).status_code == 404

    def test_active_permissions_of_principal(
        self, client: TestClient, fake_uow: FakeUnitOfWork
    ) -> None:
        active = make_permission(status=PermissionStatus.ACTIVE)
        others = make_permission(principal="dave", status=PermissionStatus.ACTIVE)
        for p in (active, make_permission(), others):
            fake_uow.permissions.add(p)

        result = client.simulate_get("/v1/principals/alice/active", headers=ACTOR)

        assert result.status_code == 200
        assert [i["id"] for i in result.json["items"]] == [str(active.id)]

    def test_principal_routes_require_actor(self, client: TestClient) -> None:
        assert client.simulate_get("/v1/principals").status_code == 401
        assert client.simulate_get("/v1/principals/alice").status_code == 401
        assert client.simulate_delete("/v1/principals/alice").status_code == 401
        assert client.simulate_get("/v1/principals/alice/active").status_code == 401
