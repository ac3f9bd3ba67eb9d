"""Quota accountant domain service."""

from typing import Awaitable, Callable

import logfire

from referral.config import InvitationSettings
from referral.domain.error import NotFoundError, QuotaExhaustedError
from referral.domain.event import EventPublisher, QuotaChanged
from referral.domain.model.quota import AppliedOperation, QuotaSnapshot
from referral.domain.model.user import User
from referral.domain.repository import AppliedOperationRepository, UserRepository
from referral.domain.value import InviteId, QuotaOperation, UserId

from .base import Service
from .invite_ledger import InviteLedger


class QuotaAccountant(Service):
    """Per-user invite counters.

    Counter changes are conditional updates in the store. Changes tied to an
    invite are claimed in the applied-operations record first, keyed by
    ``(invite_id, operation)``, so a retried call never applies twice.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        operation_repository: AppliedOperationRepository,
        invite_ledger: InviteLedger,
        event_publisher: EventPublisher,
        settings: InvitationSettings,
    ) -> None:
        """Initialize quota accountant.

        Args:
            user_repository: User repository
            operation_repository: Applied operation repository
            invite_ledger: Invite ledger (for outstanding counts)
            event_publisher: Domain event publisher
            settings: Invitation policy
        """
        self.user_repository = user_repository
        self.operation_repository = operation_repository
        self.invite_ledger = invite_ledger
        self.event_publisher = event_publisher
        self.settings = settings

    async def _snapshot_of(self, user: User) -> QuotaSnapshot:
        outstanding = await self.invite_ledger.count_outstanding(user.id)
        return QuotaSnapshot.from_user(user, outstanding=outstanding)

    async def _changed(
        self, user: User, reason: str, invite_id: InviteId | None = None
    ) -> QuotaSnapshot:
        snapshot = await self._snapshot_of(user)
        await self.event_publisher.publish(
            QuotaChanged(reason=reason, snapshot=snapshot, invite_id=invite_id)
        )
        return snapshot

    async def _require_user(self, user_id: UserId) -> User:
        user = await self.user_repository.find_by_id(user_id)
        if user is None:
            logfire.warn("User not found", user_id=user_id)
            raise NotFoundError("User", user_id)
        return user

    async def _apply_claimed(
        self,
        operation: AppliedOperation,
        mutate: Callable[[], Awaitable[User | None]],
    ) -> User | None:
        """Run ``mutate`` under an already claimed operation.

        The claim is released if the mutation raises, so a retry applies it.
        """
        try:
            return await mutate()
        except Exception:
            await self.operation_repository.release(
                operation.invite_id, operation.operation
            )
            raise

    async def can_send(self, user_id: UserId) -> bool:
        """Whether a user may send one more invite.

        Unknown users cannot send.
        """
        user = await self.user_repository.find_by_id(user_id)
        return user is not None and user.can_send()

    async def is_admin(self, user_id: UserId) -> bool:
        """Whether a user exists and is an admin."""
        user = await self.user_repository.find_by_id(user_id)
        return user is not None and user.admin

    async def snapshot(self, user_id: UserId) -> QuotaSnapshot:
        """Get a user's quota snapshot.

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("quota_accountant.snapshot", user_id=user_id):
            return await self._snapshot_of(await self._require_user(user_id))

    async def ensure_account(self, user_id: UserId, email: str = "") -> QuotaSnapshot:
        """Provision a user on first contact.

        New users start with ``initial_quota``. Emails on the admin list are
        provisioned as admins.

        Args:
            user_id: Verified user ID from the identity provider
            email: Verified email

        Returns:
            The user's quota snapshot
        """
        with logfire.span("quota_accountant.ensure_account", user_id=user_id):
            quota = self.settings.initial_quota
            created = await self.user_repository.insert_if_absent(
                User(
                    id=user_id,
                    email=email,
                    admin=self.settings.is_admin_email(email),
                    invites_remaining=quota,
                    invites_granted=quota,
                )
            )
            user = await self._require_user(user_id)
            if created:
                logfire.info(
                    "User provisioned",
                    user_id=user_id,
                    admin=user.admin,
                    initial_quota=quota,
                )
                return await self._changed(user, "provisioned")
            return await self._snapshot_of(user)

    async def debit_on_send(self, user_id: UserId, invite_id: InviteId) -> QuotaSnapshot:
        """Take one invite from the sender for ``invite_id``.

        Admins are not debited; their send is added to ``invites_granted``
        instead. A repeated call for the same invite is a no-op.

        Raises:
            QuotaExhaustedError: If a non-admin sender has nothing left
        """
        with logfire.span(
            "quota_accountant.debit_on_send",
            user_id=user_id,
            invite_id=str(invite_id),
        ):
            user = await self.user_repository.find_by_id(user_id)
            if user is None:
                raise QuotaExhaustedError(user_id)

            # amount 0 marks an admin send, granted instead of debited
            amount = 0 if user.admin else 1
            operation = AppliedOperation(
                invite_id=invite_id,
                operation=QuotaOperation.DEBIT,
                uid=user_id,
                amount=amount,
            )
            if not await self.operation_repository.claim(operation):
                logfire.info("Debit already applied", invite_id=str(invite_id))
                return await self._snapshot_of(user)

            if user.admin:
                updated = await self._apply_claimed(
                    operation,
                    lambda: self.user_repository.record_unlimited_send(user_id),
                )
                if updated is None:
                    # Admin was revoked since the read; debit as a member
                    await self.operation_repository.release(
                        invite_id, QuotaOperation.DEBIT
                    )
                    return await self.debit_on_send(user_id, invite_id)
                return await self._changed(updated, "debit", invite_id)

            updated = await self._apply_claimed(
                operation, lambda: self.user_repository.decrement_remaining(user_id)
            )
            if updated is None:
                await self.operation_repository.release(invite_id, QuotaOperation.DEBIT)
                logfire.info("Quota exhausted", user_id=user_id)
                raise QuotaExhaustedError(user_id)
            return await self._changed(updated, "debit", invite_id)

    async def refund_on_failed_send(
        self, user_id: UserId, invite_id: InviteId
    ) -> QuotaSnapshot | None:
        """Give back the debit for a send that failed.

        Only applies when the debit for ``invite_id`` was applied and has not
        already been refunded.

        Returns:
            The new snapshot, or None when there was nothing to refund
        """
        with logfire.span(
            "quota_accountant.refund_on_failed_send",
            user_id=user_id,
            invite_id=str(invite_id),
        ):
            debit = await self.operation_repository.find(
                invite_id, QuotaOperation.DEBIT
            )
            if debit is None:
                return None
            operation = AppliedOperation(
                invite_id=invite_id,
                operation=QuotaOperation.REFUND,
                uid=debit.uid,
                amount=debit.amount,
            )
            if not await self.operation_repository.claim(operation):
                logfire.info("Refund already applied", invite_id=str(invite_id))
                return None
            if debit.amount == 0:
                updated = await self._apply_claimed(
                    operation,
                    lambda: self.user_repository.revert_unlimited_send(debit.uid),
                )
            else:
                updated = await self._apply_claimed(
                    operation,
                    lambda: self.user_repository.increment_remaining(
                        debit.uid, debit.amount
                    ),
                )
            if updated is None:
                raise NotFoundError("User", debit.uid)
            logfire.info(
                "Debit refunded", user_id=debit.uid, invite_id=str(invite_id)
            )
            return await self._changed(updated, "refund", invite_id)

    async def credit_on_redeem_sender(
        self, user_id: UserId, invite_id: InviteId
    ) -> QuotaSnapshot:
        """Count a redemption for the sender of ``invite_id``."""
        with logfire.span(
            "quota_accountant.credit_on_redeem_sender",
            user_id=user_id,
            invite_id=str(invite_id),
        ):
            operation = AppliedOperation(
                invite_id=invite_id,
                operation=QuotaOperation.CREDIT_SENDER,
                uid=user_id,
                amount=1,
            )
            if not await self.operation_repository.claim(operation):
                return await self.snapshot(user_id)

            updated = await self._apply_claimed(
                operation, lambda: self.user_repository.increment_redeemed(user_id)
            )
            if updated is None:
                raise NotFoundError("User", user_id)
            return await self._changed(updated, "credit_sender", invite_id)

    async def grant_fresh_quota(
        self,
        user_id: UserId,
        amount: int,
        invite_id: InviteId,
        email: str = "",
    ) -> QuotaSnapshot:
        """Give a new member their own invite pool (viral re-grant).

        The redeemer's account is created with an empty pool if it does not
        exist yet, so the grant is the whole of their starting quota.

        Args:
            user_id: Redeeming user
            amount: Invites to grant
            invite_id: Redeemed invite (idempotency key)
            email: Redeeming user's email

        Returns:
            The redeemer's quota snapshot
        """
        with logfire.span(
            "quota_accountant.grant_fresh_quota",
            user_id=user_id,
            amount=amount,
            invite_id=str(invite_id),
        ):
            await self.user_repository.insert_if_absent(
                User(
                    id=user_id,
                    email=email,
                    admin=self.settings.is_admin_email(email),
                )
            )
            operation = AppliedOperation(
                invite_id=invite_id,
                operation=QuotaOperation.GRANT_FRESH,
                uid=user_id,
                amount=amount,
            )
            if not await self.operation_repository.claim(operation):
                return await self.snapshot(user_id)

            updated = await self._apply_claimed(
                operation, lambda: self.user_repository.grant(user_id, amount)
            )
            if updated is None:
                raise NotFoundError("User", user_id)
            logfire.info("Fresh quota granted", user_id=user_id, amount=amount)
            return await self._changed(updated, "grant_fresh", invite_id)

    async def set_admin(self, user_id: UserId, is_admin: bool) -> QuotaSnapshot:
        """Toggle unlimited sending.

        Revoking admin restores ``admin_revoke_quota`` invites and rebases
        ``invites_granted`` so counters stay consistent.

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span(
            "quota_accountant.set_admin", user_id=user_id, is_admin=is_admin
        ):
            if is_admin:
                updated = await self.user_repository.promote_admin(user_id)
            else:
                updated = await self.user_repository.revoke_admin(
                    user_id, self.settings.admin_revoke_quota
                )

            if updated is None:
                # Already in the requested state
                return await self.snapshot(user_id)

            logfire.info("Admin flag changed", user_id=user_id, admin=is_admin)
            return await self._changed(updated, "admin_on" if is_admin else "admin_off")

    async def grant_bonus(self, user_id: UserId, amount: int) -> QuotaSnapshot | None:
        """Grant the engagement bonus once.

        Returns:
            The new snapshot, or None if the bonus was already unlocked
        """
        with logfire.span(
            "quota_accountant.grant_bonus", user_id=user_id, amount=amount
        ):
            updated = await self.user_repository.grant_bonus(user_id, amount)
            if updated is None:
                await self._require_user(user_id)
                return None
            return await self._changed(updated, "bonus")

    async def grant_sync_bonus(
        self, user_id: UserId, amount: int
    ) -> QuotaSnapshot | None:
        """Grant the address-book sync bonus once.

        Returns:
            The new snapshot, or None if the bonus was already used
        """
        with logfire.span(
            "quota_accountant.grant_sync_bonus", user_id=user_id, amount=amount
        ):
            updated = await self.user_repository.grant_sync_bonus(user_id, amount)
            if updated is None:
                await self._require_user(user_id)
                return None
            return await self._changed(updated, "sync_bonus")
