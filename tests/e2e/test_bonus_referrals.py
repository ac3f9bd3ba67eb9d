"""End-to-end tests for bonus, referral and health endpoints."""

import pytest

from tests.e2e.api_client import make_client, redeem, send_invite


@pytest.fixture
def client(monkeypatch):
    """Create test client with test container."""
    return make_client(monkeypatch)


class TestBonusEndpoints:
    """Tests for /bonus endpoints."""

    def test_address_book_sync_once(self, client):
        send_invite(client, "u1")

        first = client.post("/bonus/address-book-sync", json={"uid": "u1"})
        second = client.post("/bonus/address-book-sync", json={"uid": "u1"})

        assert first.status_code == 200
        assert first.json()["unlocked"] is True
        assert first.json()["quota"]["remaining"] == 14
        assert second.json()["unlocked"] is False
        assert second.json()["quota"]["remaining"] == 14

    def test_connections_unlock(self, client):
        send_invite(client, "u1")

        response = client.post(
            "/bonus/connections", json={"uid": "u1", "connection_count": 12}
        )

        assert response.status_code == 200
        assert response.json()["unlocked"] is True
        assert response.json()["amount"] == 5

    def test_negative_count_rejected(self, client):
        response = client.post(
            "/bonus/connections", json={"uid": "u1", "connection_count": -1}
        )

        assert response.status_code == 422

    def test_unknown_user(self, client):
        response = client.post("/bonus/address-book-sync", json={"uid": "ghost"})

        assert response.status_code == 404


class TestReferralEndpoints:
    """Tests for /referrals endpoints."""

    def test_tree_and_user_edges(self, client):
        sent = send_invite(client, "alice")
        redeem(client, sent["code"], "bob")
        sent = send_invite(client, "bob")
        redeem(client, sent["code"], "carol")

        tree = client.get("/referrals/tree").json()
        bob = client.get("/referrals/bob").json()

        assert tree["total_users"] == 3
        assert tree["roots"][0]["user_id"] == "alice"
        assert tree["roots"][0]["children"][0]["user_id"] == "bob"
        assert bob["invited_by"] == "alice"
        assert [edge["to_uid"] for edge in bob["invited"]] == ["carol"]
        assert bob["connection_count"] == 2

    def test_empty_tree(self, client):
        response = client.get("/referrals/tree")

        assert response.status_code == 200
        assert response.json() == {"roots": [], "total_users": 0}


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
