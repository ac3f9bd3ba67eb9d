"""Unit tests for the event publisher adapters."""

from uuid import uuid4

import pytest

from referral.adapter.events import (
    BufferedEventPublisher,
    InMemoryEventPublisher,
    LogfireEventPublisher,
)
from referral.adapter.events import publisher as publisher_module
from referral.domain.event import InviteRedeemed, InviteSent, QuotaChanged
from referral.domain.model import QuotaSnapshot
from referral.domain.value import InviteId, UserId


@pytest.fixture
def logged(monkeypatch):
    """Capture logfire.info calls made by the publisher."""
    records = []

    def fake_info(message, **attributes):
        records.append((message, attributes))

    monkeypatch.setattr(publisher_module.logfire, "info", fake_info)
    return records


class TestLogfireEventPublisher:
    """Tests for LogfireEventPublisher."""

    @pytest.mark.asyncio
    async def test_event_fields_become_attributes(self, logged):
        invite_id = InviteId(uuid4())

        await LogfireEventPublisher().publish(
            InviteSent(invite_id=invite_id, sender_uid=UserId("u1"))
        )

        assert len(logged) == 1
        _, attributes = logged[0]
        assert attributes["event"] == "invite_sent"
        assert attributes["invite_id"] == str(invite_id)
        assert attributes["sender_uid"] == "u1"
        assert "name" not in attributes

    @pytest.mark.asyncio
    async def test_quota_snapshot_is_flattened(self, logged):
        snapshot = QuotaSnapshot(uid=UserId("u1"), remaining=4, granted=5, redeemed=1)

        await LogfireEventPublisher().publish(
            QuotaChanged(reason="debit", snapshot=snapshot)
        )

        _, attributes = logged[0]
        assert attributes["event"] == "quota_changed"
        assert attributes["quota_remaining"] == 4
        assert attributes["quota_granted"] == 5
        assert "snapshot" not in attributes


class TestInMemoryEventPublisher:
    """Tests for InMemoryEventPublisher."""

    @pytest.mark.asyncio
    async def test_filters_by_type_in_order(self):
        publisher = InMemoryEventPublisher()
        first, second = InviteId(uuid4()), InviteId(uuid4())

        await publisher.publish(InviteSent(invite_id=first, sender_uid=UserId("a")))
        await publisher.publish(
            InviteRedeemed(
                invite_id=first, sender_uid=UserId("a"), redeemer_uid=UserId("b")
            )
        )
        await publisher.publish(InviteSent(invite_id=second, sender_uid=UserId("a")))

        sent = publisher.of_type(InviteSent)
        assert [event.invite_id for event in sent] == [first, second]
        assert len(publisher.events) == 3

        publisher.clear()
        assert publisher.events == []


class TestBufferedEventPublisher:
    """Tests for BufferedEventPublisher."""

    @pytest.mark.asyncio
    async def test_nothing_delivered_before_flush(self):
        target = InMemoryEventPublisher()
        buffer = BufferedEventPublisher(target)
        first, second = InviteId(uuid4()), InviteId(uuid4())

        await buffer.publish(InviteSent(invite_id=first, sender_uid=UserId("a")))
        await buffer.publish(InviteSent(invite_id=second, sender_uid=UserId("a")))
        assert target.events == []

        await buffer.flush()
        assert [event.invite_id for event in target.events] == [first, second]
        assert buffer.pending == []

    @pytest.mark.asyncio
    async def test_discarded_events_are_never_delivered(self):
        target = InMemoryEventPublisher()
        buffer = BufferedEventPublisher(target)

        await buffer.publish(InviteSent(invite_id=InviteId(uuid4()), sender_uid=UserId("a")))
        buffer.discard()
        await buffer.flush()

        assert target.events == []
