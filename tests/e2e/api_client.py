"""Helpers for end-to-end API tests."""

from fastapi.testclient import TestClient

from referral.interface.api.app import create_app
from tests.di import build_test_container

ADMIN_EMAIL = "root@example.com"


def make_client(monkeypatch) -> TestClient:
    """Test client over an in-memory container.

    ``root@example.com`` is on the admin list, so the first send from that
    address provisions an admin.
    """
    monkeypatch.setenv("INVITATIONS__ADMIN_EMAILS", f'["{ADMIN_EMAIL}"]')
    return TestClient(create_app(build_test_container()))


def send_invite(client: TestClient, sender_uid: str, sender_email: str = "") -> dict:
    """Generate an invite and return the response body."""
    response = client.post(
        "/invites/generate",
        json={"sender_uid": sender_uid, "sender_email": sender_email},
    )
    assert response.status_code == 200, response.text
    return response.json()


def redeem(client: TestClient, code: str, redeemer_uid: str):
    return client.post(
        "/invites/redeem", json={"code": code, "redeemer_uid": redeemer_uid}
    )
