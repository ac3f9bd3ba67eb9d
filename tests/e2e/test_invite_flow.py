"""End-to-end tests for the invite lifecycle."""

import pytest

from tests.e2e.api_client import make_client, redeem, send_invite


@pytest.fixture
def client(monkeypatch):
    """Create test client with test container."""
    return make_client(monkeypatch)


class TestInviteFlow:
    """Send, check and redeem a code over HTTP."""

    def test_sender_receiver_scenario(self, client):
        """u1 sends, u2 redeems, u3 is refused."""
        # Act
        sent = send_invite(client, "u1", "ada@example.com")

        # Assert
        assert sent["quota"]["remaining"] == 9
        assert sent["link"].endswith(f"/redeem?code={sent['code']}")

        response = redeem(client, sent["code"], "u2")
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["sender_uid"] == "u1"
        assert data["new_quota"]["remaining"] == 10

        sender = client.get("/quota/u1").json()
        assert sender["redeemed"] == 1
        assert sender["outstanding"] == 0

        refused = redeem(client, sent["code"], "u3")
        assert refused.status_code == 409
        assert refused.json()["error"] == "AlreadyRedeemed"

    def test_replay_is_reported(self, client):
        sent = send_invite(client, "u1")
        redeem(client, sent["code"], "u2")

        response = redeem(client, sent["code"], "u2")

        assert response.status_code == 200
        assert response.json()["replay"] is True
        assert client.get("/quota/u2").json()["remaining"] == 10

    def test_self_redemption(self, client):
        sent = send_invite(client, "u1")

        response = redeem(client, sent["code"], "u1")

        assert response.status_code == 400
        assert response.json()["error"] == "SelfRedemption"

    def test_unknown_code(self, client):
        response = redeem(client, "NOPENOPE22", "u2")

        assert response.status_code == 404
        assert response.json()["error"] == "InvalidCode"

    def test_quota_exhausted(self, client):
        for _ in range(10):
            send_invite(client, "u1")

        response = client.post("/invites/generate", json={"sender_uid": "u1"})

        assert response.status_code == 409
        assert response.json()["error"] == "QuotaExhausted"

    def test_missing_sender_is_rejected(self, client):
        response = client.post("/invites/generate", json={"sender_uid": ""})

        assert response.status_code == 422


class TestInviteStatus:
    """Tests for GET /invites/status."""

    def test_valid_code_is_cacheable(self, client):
        sent = send_invite(client, "u1", "ada@example.com")

        response = client.get("/invites/status", params={"code": sent["code"]})

        assert response.status_code == 200
        assert response.headers["Cache-Control"] == "max-age=30"
        data = response.json()
        assert data["valid"] is True
        assert data["state"] == "valid"
        assert data["inviter_id"] == "u1"
        assert data["inviter_name"] == "ada"

    def test_redeemed_code(self, client):
        sent = send_invite(client, "u1")
        redeem(client, sent["code"], "u2")

        data = client.get("/invites/status", params={"code": sent["code"]}).json()

        assert data["valid"] is False
        assert data["state"] == "redeemed"
        assert data["inviter_name"] == "A friend"

    def test_malformed_code_is_not_an_error(self, client):
        response = client.get("/invites/status", params={"code": "??"})

        assert response.status_code == 200
        assert response.json()["reason"] == "malformed"


class TestInviteLists:
    """Tests for GET /invites/mine and /invites/received."""

    def test_mine_with_status_filter(self, client):
        first = send_invite(client, "u1")
        send_invite(client, "u1")
        redeem(client, first["code"], "u2")

        everything = client.get("/invites/mine", params={"uid": "u1"}).json()
        redeemed = client.get(
            "/invites/mine", params={"uid": "u1", "status": "redeemed"}
        ).json()

        assert everything["total"] == 2
        assert everything["quota"]["outstanding"] == 1
        assert [item["code"] for item in redeemed["invites"]] == [first["code"]]

    def test_mine_for_unknown_user(self, client):
        response = client.get("/invites/mine", params={"uid": "ghost"})

        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"

    def test_mine_rejects_bad_limit(self, client):
        response = client.get("/invites/mine", params={"uid": "u1", "limit": 0})

        assert response.status_code == 422

    def test_received(self, client):
        sent = send_invite(client, "u1")
        redeem(client, sent["code"], "u2")

        data = client.get("/invites/received", params={"uid": "u2"}).json()

        assert data["total"] == 1
        assert data["invites"][0]["sender_uid"] == "u1"
