"""Integration tests against PostgreSQL.

Run with ``TEST_DATABASE_URL=postgresql+asyncpg://...`` pointing at a
disposable database. Tables are created before and dropped after each test.
"""

import asyncio
import os
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from referral.domain.error import AlreadyRedeemedError
from referral.domain.model import AppliedOperation
from referral.domain.repository import AppliedOperationRepository, UserRepository
from referral.domain.service import (
    InviteLedger,
    QuotaAccountant,
    RedemptionCoordinator,
    TokenStore,
)
from referral.domain.value import InviteCode, InviteId, QuotaOperation, UserId
from referral.persistence.tables import metadata
from tests.conftest import assert_conserved, seed_user
from tests.di import build_test_container
from tests.harness import create_env_fixture

DATABASE_URL = os.environ.get("TEST_DATABASE_URL")

pytestmark = pytest.mark.skipif(
    not DATABASE_URL, reason="TEST_DATABASE_URL not set"
)

ENUM_TYPES = {
    "invite_status": ("sent", "redeemed"),
    "quota_operation": ("debit", "refund", "credit_sender", "grant_fresh"),
}

# Integration test fixture
integration_env = create_env_fixture(unmock={"persistence"})


@pytest_asyncio.fixture(autouse=True)
async def schema(monkeypatch):
    """Create the schema for one test and drop it afterwards."""
    monkeypatch.setenv("DATABASE__URL", DATABASE_URL)
    engine = create_async_engine(DATABASE_URL)
    async with engine.begin() as conn:
        for name, values in ENUM_TYPES.items():
            labels = ", ".join(f"'{value}'" for value in values)
            await conn.execute(text(f"CREATE TYPE {name} AS ENUM ({labels})"))
        await conn.run_sync(metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        for name in ENUM_TYPES:
            await conn.execute(text(f"DROP TYPE IF EXISTS {name}"))
    await engine.dispose()


class TestPostgresRepositories:
    """Conditional updates and idempotency records in one transaction."""

    @pytest.mark.asyncio
    async def test_decrement_stops_at_zero(self, integration_env):
        users = await integration_env.get(UserRepository)
        await seed_user(users, "u1", remaining=1)

        first = await users.decrement_remaining(UserId("u1"))
        second = await users.decrement_remaining(UserId("u1"))

        assert first is not None
        assert first.invites_remaining == 0
        assert second is None

    @pytest.mark.asyncio
    async def test_operation_claimed_once(self, integration_env):
        operations = await integration_env.get(AppliedOperationRepository)
        operation = AppliedOperation(
            invite_id=InviteId(uuid4()),
            operation=QuotaOperation.GRANT_FRESH,
            uid=UserId("u2"),
            amount=10,
        )

        assert await operations.claim(operation) is True
        assert await operations.claim(operation) is False
        found = await operations.find(operation.invite_id, QuotaOperation.GRANT_FRESH)
        assert found is not None
        assert found.amount == 10

    @pytest.mark.asyncio
    async def test_generate_and_redeem(self, integration_env):
        coordinator = await integration_env.get(RedemptionCoordinator)
        ledger = await integration_env.get(InviteLedger)
        await seed_user(await integration_env.get(UserRepository), "u1")

        generated = await coordinator.generate(UserId("u1"), "u1@example.com")
        result = await coordinator.redeem(
            generated.invite.token.root, UserId("u2"), "u2@example.com"
        )

        assert result.new_quota.remaining == 10
        sender = await coordinator.quota_accountant.snapshot(UserId("u1"))
        assert sender.redeemed == 1
        assert_conserved(sender)
        edges = await ledger.edges_for_user(UserId("u2"))
        assert [(e.from_uid, e.to_uid) for e in edges] == [("u1", "u2")]
        status = await coordinator.status(generated.invite.token.root)
        assert status.reason == "already_redeemed"

    @pytest.mark.asyncio
    async def test_redeemed_cannot_exceed_granted(self, integration_env):
        users = await integration_env.get(UserRepository)
        await seed_user(users, "u1", remaining=0)

        with pytest.raises(IntegrityError):
            await users.increment_redeemed(UserId("u1"))
        await (await integration_env.get(AsyncSession)).rollback()

    @pytest.mark.asyncio
    async def test_admin_sends_then_revoke_stay_conserved(self, integration_env):
        coordinator = await integration_env.get(RedemptionCoordinator)
        accountant = await integration_env.get(QuotaAccountant)
        await seed_user(
            await integration_env.get(UserRepository), "root", remaining=1, admin=True
        )

        for i in range(3):
            generated = await coordinator.generate(UserId("root"), "")
            await coordinator.redeem(generated.invite.token.root, UserId(f"r{i}"), "")
        await coordinator.generate(UserId("root"), "")
        sender = await accountant.set_admin(UserId("root"), False)

        assert sender.redeemed == 3
        assert sender.outstanding == 1
        assert_conserved(sender)

    @pytest.mark.asyncio
    async def test_claimed_token_is_pending_settlement(self, integration_env):
        coordinator = await integration_env.get(RedemptionCoordinator)
        token_store = await integration_env.get(TokenStore)
        await seed_user(await integration_env.get(UserRepository), "u1")
        generated = await coordinator.generate(UserId("u1"), "u1@example.com")

        await token_store.mark_used(
            InviteCode(generated.invite.token.root), UserId("u2"), ""
        )
        pending = await token_store.find_pending_settlement()

        assert [t.invite_id for t in pending] == [generated.invite.id]
        await coordinator.reconcile_pending()
        assert await token_store.find_pending_settlement() == []


class TestConcurrentRedemption:
    """Racing redemptions in separate transactions."""

    @pytest.mark.asyncio
    async def test_exactly_one_redeemer_wins(self):
        container = build_test_container(unmock={"persistence"})
        try:
            async with container() as request_container:
                await seed_user(await request_container.get(UserRepository), "u1")
                coordinator = await request_container.get(RedemptionCoordinator)
                generated = await coordinator.generate(UserId("u1"), "")
                code = generated.invite.token.root

            async def attempt(uid: str):
                async with container() as request_container:
                    coordinator = await request_container.get(RedemptionCoordinator)
                    return await coordinator.redeem(code, UserId(uid), "")

            results = await asyncio.gather(
                *(attempt(f"r{i}") for i in range(8)), return_exceptions=True
            )

            winners = [r for r in results if not isinstance(r, Exception)]
            losers = [r for r in results if isinstance(r, AlreadyRedeemedError)]
            assert len(winners) == 1
            assert len(losers) == 7

            async with container() as request_container:
                accountant = await request_container.get(QuotaAccountant)
                sender = await accountant.snapshot(UserId("u1"))
                assert sender.redeemed == 1
                assert sender.outstanding == 0
                assert_conserved(sender)
        finally:
            await container.close()
