"""End-to-end tests for admin endpoints."""

import pytest

from tests.e2e.api_client import ADMIN_EMAIL, make_client, send_invite


@pytest.fixture
def client(monkeypatch):
    """Create test client with test container."""
    return make_client(monkeypatch)


class TestSetAdminEndpoint:
    """Tests for POST /admin/set-admin."""

    def test_toggle_round_trip(self, client):
        """Admin on lets a user send freely; off restores a finite pool."""
        send_invite(client, "root", ADMIN_EMAIL)
        send_invite(client, "u1")

        promoted = client.post(
            "/admin/set-admin", json={"caller_uid": "root", "uid": "u1", "admin": True}
        )
        assert promoted.status_code == 200
        assert promoted.json()["unlimited"] is True
        assert promoted.json()["can_send"] is True

        for _ in range(12):
            send_invite(client, "u1")

        demoted = client.post(
            "/admin/set-admin", json={"caller_uid": "root", "uid": "u1", "admin": False}
        )
        data = demoted.json()
        assert demoted.status_code == 200
        assert data["unlimited"] is False
        assert data["remaining"] == 10
        assert data["outstanding"] == 13
        assert data["granted"] == data["remaining"] + data["redeemed"] + data["outstanding"]

    def test_non_admin_caller_is_forbidden(self, client):
        send_invite(client, "u1")

        response = client.post(
            "/admin/set-admin", json={"caller_uid": "u1", "uid": "u1", "admin": True}
        )

        assert response.status_code == 403
        assert response.json()["error"] == "NotAuthorized"
        assert client.get("/quota/u1").json()["unlimited"] is False

    def test_provisioned_admin_is_unlimited(self, client):
        sent = send_invite(client, "root", ADMIN_EMAIL)

        assert sent["quota"]["unlimited"] is True
        assert sent["quota"]["remaining"] == 10


class TestReconcileEndpoint:
    """Tests for POST /admin/reconcile."""

    def test_nothing_to_reconcile(self, client):
        send_invite(client, "root", ADMIN_EMAIL)

        response = client.post("/admin/reconcile", json={"caller_uid": "root"})

        assert response.status_code == 200
        assert response.json() == {"reconciled": [], "total": 0}

    def test_forbidden_for_members(self, client):
        response = client.post("/admin/reconcile", json={"caller_uid": "u1"})

        assert response.status_code == 403
