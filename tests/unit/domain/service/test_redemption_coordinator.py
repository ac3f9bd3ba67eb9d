"""Unit tests for RedemptionCoordinator."""

import asyncio

import pytest

from referral.adapter.events import InMemoryEventPublisher
from referral.config import InvitationSettings
from referral.domain.error import (
    AlreadyRedeemedError,
    InconsistentRedemptionError,
    InvalidCodeError,
    NotFoundError,
    QuotaExhaustedError,
    RetryableError,
    SelfRedemptionError,
    TokenAlreadyExistsError,
)
from referral.domain.event import InviteRedeemed, InviteSent
from referral.domain.repository import UserRepository
from referral.domain.service import (
    BonusUnlockEvaluator,
    InviteLedger,
    QuotaAccountant,
    RedemptionCoordinator,
    TokenStore,
)
from referral.domain.value import InviteStatus, RedemptionState, UserId
from referral.persistence.repository.inmemory import (
    InMemoryAppliedOperationRepository,
    InMemoryDatabase,
    InMemoryInviteEdgeRepository,
    InMemoryInviteRepository,
    InMemoryInviteTokenRepository,
    InMemoryUserRepository,
)
from tests.conftest import assert_conserved, seed_user
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


# ============================================================================
# Fault injection
# ============================================================================


class FailingInviteRepository(InMemoryInviteRepository):
    """Invite repository that fails the next N calls of chosen operations."""

    def __init__(self, db: InMemoryDatabase, fail_insert: int = 0, fail_redeem: int = 0):
        super().__init__(db)
        self.fail_insert = fail_insert
        self.fail_redeem = fail_redeem

    async def insert(self, invite):
        if self.fail_insert:
            self.fail_insert -= 1
            raise ConnectionResetError("store went away")
        return await super().insert(invite)

    async def mark_redeemed(self, invite_id, by_uid, by_email, at):
        if self.fail_redeem:
            self.fail_redeem -= 1
            raise ConnectionResetError("store went away")
        return await super().mark_redeemed(invite_id, by_uid, by_email, at)


class FailingUserRepository(InMemoryUserRepository):
    """User repository whose next N grants fail."""

    def __init__(self, db: InMemoryDatabase, fail_grant: int = 0):
        super().__init__(db)
        self.fail_grant = fail_grant

    async def grant(self, user_id, amount):
        if self.fail_grant:
            self.fail_grant -= 1
            raise ConnectionResetError("store went away")
        return await super().grant(user_id, amount)


class CollidingTokenRepository(InMemoryInviteTokenRepository):
    """Token repository where every generated code already exists."""

    async def insert(self, token):
        raise TokenAlreadyExistsError(token.token.redacted)


def build_coordinator(
    db: InMemoryDatabase,
    invite_repository=None,
    user_repository=None,
    token_repository=None,
) -> RedemptionCoordinator:
    """Wire a coordinator over one in-memory database, with overrides."""
    settings = InvitationSettings()
    publisher = InMemoryEventPublisher()
    ledger = InviteLedger(
        invite_repository=invite_repository or InMemoryInviteRepository(db),
        edge_repository=InMemoryInviteEdgeRepository(db),
    )
    accountant = QuotaAccountant(
        user_repository=user_repository or InMemoryUserRepository(db),
        operation_repository=InMemoryAppliedOperationRepository(db),
        invite_ledger=ledger,
        event_publisher=publisher,
        settings=settings,
    )
    return RedemptionCoordinator(
        token_store=TokenStore(
            token_repository or InMemoryInviteTokenRepository(db),
            code_length=settings.code_length,
        ),
        invite_ledger=ledger,
        quota_accountant=accountant,
        bonus_evaluator=BonusUnlockEvaluator(
            quota_accountant=accountant,
            invite_ledger=ledger,
            event_publisher=publisher,
            settings=settings,
        ),
        event_publisher=publisher,
        settings=settings,
    )


async def _generate(coordinator: RedemptionCoordinator, sender: str = "u1"):
    generated = await coordinator.generate(UserId(sender), f"{sender}@example.com")
    return generated.invite.token.root


# ============================================================================
# Generate
# ============================================================================


class TestGenerate:
    """Tests for issuing invite codes."""

    @pytest.mark.asyncio
    async def test_generate_debits_and_records(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        publisher = await unit_env.get(InMemoryEventPublisher)
        await seed_user(await unit_env.get(UserRepository), "u1", remaining=10)

        generated = await coordinator.generate(UserId("u1"), "u1@example.com")

        assert generated.quota.remaining == 9
        assert generated.quota.outstanding == 1
        assert_conserved(generated.quota)
        assert generated.invite.status == InviteStatus.SENT
        token = await coordinator.token_store.get(generated.invite.token)
        assert token.used is False
        assert token.invite_id == generated.invite.id
        assert len(publisher.of_type(InviteSent)) == 1

    @pytest.mark.asyncio
    async def test_generate_with_nothing_left_raises(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(await unit_env.get(UserRepository), "u1", remaining=0)

        with pytest.raises(QuotaExhaustedError):
            await coordinator.generate(UserId("u1"), "u1@example.com")

    @pytest.mark.asyncio
    async def test_last_invite_can_be_sent(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(await unit_env.get(UserRepository), "u1", remaining=1)

        generated = await coordinator.generate(UserId("u1"), "u1@example.com")

        assert generated.quota.remaining == 0
        assert generated.quota.can_send is False
        with pytest.raises(QuotaExhaustedError):
            await coordinator.generate(UserId("u1"), "u1@example.com")

    @pytest.mark.asyncio
    async def test_concurrent_sends_never_overdraw(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(await unit_env.get(UserRepository), "u1", remaining=3)

        results = await asyncio.gather(
            *(coordinator.generate(UserId("u1"), "u1@example.com") for _ in range(6)),
            return_exceptions=True,
        )

        sent = [r for r in results if not isinstance(r, Exception)]
        refused = [r for r in results if isinstance(r, QuotaExhaustedError)]
        assert len(sent) == 3
        assert len(refused) == 3
        quota = await coordinator.quota_accountant.snapshot(UserId("u1"))
        assert quota.remaining == 0
        assert quota.outstanding == 3
        assert_conserved(quota)

    @pytest.mark.asyncio
    async def test_admin_sends_without_quota(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(
            await unit_env.get(UserRepository), "root", remaining=0, admin=True
        )

        for _ in range(3):
            generated = await coordinator.generate(UserId("root"), "root@example.com")

        assert generated.quota.remaining == 0
        assert generated.quota.outstanding == 3
        assert generated.quota.can_send is True
        assert_conserved(generated.quota)

    @pytest.mark.asyncio
    async def test_failed_send_refunds_and_discards_token(self):
        db = InMemoryDatabase()
        coordinator = build_coordinator(
            db, invite_repository=FailingInviteRepository(db, fail_insert=1)
        )
        await seed_user(coordinator.quota_accountant.user_repository, "u1", remaining=5)

        with pytest.raises(ConnectionResetError):
            await coordinator.generate(UserId("u1"), "u1@example.com")

        quota = await coordinator.quota_accountant.snapshot(UserId("u1"))
        assert quota.remaining == 5
        assert quota.outstanding == 0
        assert db.tokens == {}
        assert db.invites == {}

    @pytest.mark.asyncio
    async def test_exhausted_code_attempts_are_retryable(self):
        db = InMemoryDatabase()
        coordinator = build_coordinator(
            db, token_repository=CollidingTokenRepository(db)
        )
        await seed_user(coordinator.quota_accountant.user_repository, "u1", remaining=5)

        with pytest.raises(RetryableError):
            await coordinator.generate(UserId("u1"), "u1@example.com")

        quota = await coordinator.quota_accountant.snapshot(UserId("u1"))
        assert quota.remaining == 5


# ============================================================================
# Redeem
# ============================================================================


class TestRedeem:
    """Tests for redeeming invite codes."""

    @pytest.mark.asyncio
    async def test_sender_receiver_scenario(self, unit_env):
        """u1 sends C1, u2 redeems it, u3 is refused."""
        coordinator = await unit_env.get(RedemptionCoordinator)
        ledger = await unit_env.get(InviteLedger)
        await seed_user(await unit_env.get(UserRepository), "u1", remaining=10)

        generated = await coordinator.generate(UserId("u1"), "u1@example.com")
        assert generated.quota.remaining == 9
        code = generated.invite.token.root

        result = await coordinator.redeem(code, UserId("u2"), "u2@example.com")

        assert result.success is True
        assert result.replay is False
        assert result.sender_uid == "u1"
        assert result.new_quota.remaining == 10
        sender = await coordinator.quota_accountant.snapshot(UserId("u1"))
        assert sender.redeemed == 1
        assert sender.outstanding == 0
        assert_conserved(sender)
        assert_conserved(result.new_quota)
        edges = await ledger.list_edges()
        assert [(e.from_uid, e.to_uid) for e in edges] == [("u1", "u2")]
        invite = await ledger.get(generated.invite.id)
        assert invite.status == InviteStatus.REDEEMED
        assert invite.redeemed_by_uid == "u2"

        with pytest.raises(AlreadyRedeemedError):
            await coordinator.redeem(code, UserId("u3"), "u3@example.com")

    @pytest.mark.asyncio
    async def test_code_is_case_insensitive(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(await unit_env.get(UserRepository), "u1")
        code = await _generate(coordinator)

        result = await coordinator.redeem(
            f"  {code.lower()} ", UserId("u2"), "u2@example.com"
        )

        assert result.success is True

    @pytest.mark.asyncio
    async def test_self_redemption_is_refused(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(await unit_env.get(UserRepository), "u1")
        code = await _generate(coordinator)

        with pytest.raises(SelfRedemptionError):
            await coordinator.redeem(code, UserId("u1"), "u1@example.com")

        token = await coordinator.token_store.get(code)
        assert token.used is False

    @pytest.mark.asyncio
    async def test_unknown_code_is_invalid(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)

        with pytest.raises(InvalidCodeError):
            await coordinator.redeem("ZZZZZZZZZZ", UserId("u2"), "u2@example.com")

    @pytest.mark.asyncio
    async def test_replay_returns_same_result_without_regranting(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        publisher = await unit_env.get(InMemoryEventPublisher)
        await seed_user(await unit_env.get(UserRepository), "u1")
        code = await _generate(coordinator)
        first = await coordinator.redeem(code, UserId("u2"), "u2@example.com")

        second = await coordinator.redeem(code, UserId("u2"), "u2@example.com")

        assert second.replay is True
        assert second.invite_id == first.invite_id
        assert second.new_quota.remaining == first.new_quota.remaining == 10
        sender = await coordinator.quota_accountant.snapshot(UserId("u1"))
        assert sender.redeemed == 1
        assert len(publisher.of_type(InviteRedeemed)) == 1

    @pytest.mark.asyncio
    async def test_existing_member_gets_fresh_pool_on_top(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        users = await unit_env.get(UserRepository)
        await seed_user(users, "u1")
        await seed_user(users, "u2", remaining=3)
        code = await _generate(coordinator)

        result = await coordinator.redeem(code, UserId("u2"), "u2@example.com")

        assert result.new_quota.remaining == 13
        assert_conserved(result.new_quota)

    @pytest.mark.asyncio
    async def test_concurrent_redeemers_exactly_one_wins(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        ledger = await unit_env.get(InviteLedger)
        await seed_user(await unit_env.get(UserRepository), "u1")
        code = await _generate(coordinator)

        results = await asyncio.gather(
            *(
                coordinator.redeem(code, UserId(f"r{i}"), f"r{i}@example.com")
                for i in range(10)
            ),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, Exception)]
        losers = [r for r in results if isinstance(r, AlreadyRedeemedError)]
        assert len(winners) == 1
        assert len(losers) == 9
        assert len(await ledger.list_edges()) == 1
        sender = await coordinator.quota_accountant.snapshot(UserId("u1"))
        assert sender.redeemed == 1

    @pytest.mark.asyncio
    async def test_concurrent_retries_by_same_user_apply_once(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(await unit_env.get(UserRepository), "u1")
        code = await _generate(coordinator)

        results = await asyncio.gather(
            *(coordinator.redeem(code, UserId("u2"), "u2@example.com") for _ in range(4))
        )

        assert all(r.success for r in results)
        assert sum(not r.replay for r in results) == 1
        quota = await coordinator.quota_accountant.snapshot(UserId("u2"))
        assert quota.remaining == 10

    @pytest.mark.asyncio
    async def test_tenth_redemption_unlocks_sender_bonus(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(await unit_env.get(UserRepository), "u1", remaining=10)
        codes = [await _generate(coordinator) for _ in range(10)]

        for i, code in enumerate(codes):
            await coordinator.redeem(code, UserId(f"r{i}"), f"r{i}@example.com")

        sender = await coordinator.quota_accountant.snapshot(UserId("u1"))
        assert sender.redeemed == 10
        assert sender.bonus_unlocked is True
        assert sender.remaining == 5
        assert_conserved(sender)


# ============================================================================
# Admin senders
# ============================================================================


class TestAdminSenders:
    """Counters of unlimited senders, including while the flag changes."""

    @pytest.mark.asyncio
    async def test_redemptions_never_outrun_grants(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(
            await unit_env.get(UserRepository), "root", remaining=10, admin=True
        )

        for i in range(16):
            code = await _generate(coordinator, "root")
            await coordinator.redeem(code, UserId(f"r{i}"), f"r{i}@example.com")

        sender = await coordinator.quota_accountant.snapshot(UserId("root"))
        assert sender.redeemed == 16
        assert sender.granted >= sender.redeemed
        assert_conserved(sender)

    @pytest.mark.parametrize("delay", range(8))
    @pytest.mark.asyncio
    async def test_revoke_racing_redemption_stays_conserved(self, delay):
        db = InMemoryDatabase()
        coordinator = build_coordinator(db)
        accountant = coordinator.quota_accountant
        await seed_user(accountant.user_repository, "root", remaining=10, admin=True)
        code = await _generate(coordinator, "root")

        async def revoke_after_delay():
            for _ in range(delay):
                await asyncio.sleep(0)
            return await accountant.set_admin(UserId("root"), False)

        await asyncio.gather(
            revoke_after_delay(),
            coordinator.redeem(code, UserId("r1"), "r1@example.com"),
        )

        sender = await accountant.snapshot(UserId("root"))
        assert sender.unlimited is False
        assert sender.redeemed == 1
        assert sender.outstanding == 0
        assert_conserved(sender)

    @pytest.mark.asyncio
    async def test_failed_admin_send_takes_back_grant(self):
        db = InMemoryDatabase()
        coordinator = build_coordinator(
            db, invite_repository=FailingInviteRepository(db, fail_insert=1)
        )
        await seed_user(
            coordinator.quota_accountant.user_repository, "root", remaining=2, admin=True
        )

        with pytest.raises(ConnectionResetError):
            await coordinator.generate(UserId("root"), "root@example.com")

        quota = await coordinator.quota_accountant.snapshot(UserId("root"))
        assert quota.granted == 2
        assert_conserved(quota)


# ============================================================================
# Recovery
# ============================================================================


class TestRecovery:
    """Tests for completing interrupted redemptions."""

    @pytest.mark.asyncio
    async def test_replay_completes_interrupted_effects(self):
        db = InMemoryDatabase()
        users = FailingUserRepository(db, fail_grant=1)
        coordinator = build_coordinator(db, user_repository=users)
        await seed_user(users, "u1")
        code = await _generate(coordinator)

        with pytest.raises(InconsistentRedemptionError):
            await coordinator.redeem(code, UserId("u2"), "u2@example.com")

        # Code is claimed, so nobody else can take it
        with pytest.raises(AlreadyRedeemedError):
            await coordinator.redeem(code, UserId("u3"), "u3@example.com")

        result = await coordinator.redeem(code, UserId("u2"), "u2@example.com")

        assert result.replay is True
        assert result.new_quota.remaining == 10
        sender = await coordinator.quota_accountant.snapshot(UserId("u1"))
        assert sender.redeemed == 1

    @pytest.mark.asyncio
    async def test_reconcile_pending_settles_claimed_codes(self):
        db = InMemoryDatabase()
        invites = FailingInviteRepository(db, fail_redeem=1)
        coordinator = build_coordinator(db, invite_repository=invites)
        await seed_user(coordinator.quota_accountant.user_repository, "u1")
        generated = await coordinator.generate(UserId("u1"), "u1@example.com")

        with pytest.raises(InconsistentRedemptionError):
            await coordinator.redeem(
                generated.invite.token.root, UserId("u2"), "u2@example.com"
            )
        assert db.invites[generated.invite.id].status == InviteStatus.SENT

        results = await coordinator.reconcile_pending()

        assert [r.invite_id for r in results] == [generated.invite.id]
        assert db.invites[generated.invite.id].status == InviteStatus.REDEEMED
        assert len(db.edges) == 1
        redeemer = await coordinator.quota_accountant.snapshot(UserId("u2"))
        assert redeemer.remaining == 10
        assert await coordinator.reconcile_pending() == []

    @pytest.mark.asyncio
    async def test_reconcile_unredeemed_invite_is_not_found(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(await unit_env.get(UserRepository), "u1")
        generated = await coordinator.generate(UserId("u1"), "u1@example.com")

        with pytest.raises(NotFoundError):
            await coordinator.reconcile(generated.invite.id)

    @pytest.mark.asyncio
    async def test_reconcile_settled_redemption_is_noop(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(await unit_env.get(UserRepository), "u1")
        generated = await coordinator.generate(UserId("u1"), "u1@example.com")
        await coordinator.redeem(
            generated.invite.token.root, UserId("u2"), "u2@example.com"
        )

        result = await coordinator.reconcile(generated.invite.id)

        assert result.replay is True
        sender = await coordinator.quota_accountant.snapshot(UserId("u1"))
        assert sender.redeemed == 1


# ============================================================================
# Status
# ============================================================================


class TestStatus:
    """Tests for read-only code status."""

    @pytest.mark.asyncio
    async def test_valid_code_names_inviter(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(
            await unit_env.get(UserRepository), "u1", email="ada.lovelace@example.com"
        )
        generated = await coordinator.generate(
            UserId("u1"), "ada.lovelace@example.com"
        )

        status = await coordinator.status(generated.invite.token.root)

        assert status.valid is True
        assert status.state == RedemptionState.VALID
        assert status.inviter_id == "u1"
        assert status.inviter_name == "ada.lovelace"

    @pytest.mark.asyncio
    async def test_redeemed_code(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(await unit_env.get(UserRepository), "u1")
        code = await _generate(coordinator)
        await coordinator.redeem(code, UserId("u2"), "u2@example.com")

        status = await coordinator.status(code)

        assert status.valid is False
        assert status.state == RedemptionState.REDEEMED
        assert status.reason == "already_redeemed"

    @pytest.mark.asyncio
    async def test_unknown_code(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)

        status = await coordinator.status("ZZZZZZZZZZ")

        assert status.valid is False
        assert status.state == RedemptionState.INVALID
        assert status.reason == "not_found"

    @pytest.mark.asyncio
    async def test_malformed_code(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)

        status = await coordinator.status("<script>")

        assert status.state == RedemptionState.INVALID
        assert status.reason == "malformed"

    @pytest.mark.asyncio
    async def test_status_never_changes_state(self, unit_env):
        coordinator = await unit_env.get(RedemptionCoordinator)
        await seed_user(await unit_env.get(UserRepository), "u1")
        code = await _generate(coordinator)

        for _ in range(3):
            await coordinator.status(code)

        assert (await coordinator.token_store.get(code)).used is False
