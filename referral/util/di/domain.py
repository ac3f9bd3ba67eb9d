"""Domain layer DI providers."""

from dishka import Scope, provide

from referral.config import InvitationSettings
from referral.domain.event import EventPublisher
from referral.domain.repository import (
    AppliedOperationRepository,
    InviteEdgeRepository,
    InviteRepository,
    InviteTokenRepository,
    UserRepository,
)
from referral.domain.service import (
    BonusUnlockEvaluator,
    InviteLedger,
    QuotaAccountant,
    RedemptionCoordinator,
    ReferralGraphService,
    TokenStore,
)
from referral.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_token_store(
        self,
        token_repository: InviteTokenRepository,
        settings: InvitationSettings,
    ) -> TokenStore:
        """Provide token store."""
        return TokenStore(
            token_repository=token_repository, code_length=settings.code_length
        )

    @provide
    def get_invite_ledger(
        self,
        invite_repository: InviteRepository,
        edge_repository: InviteEdgeRepository,
    ) -> InviteLedger:
        """Provide invite ledger."""
        return InviteLedger(
            invite_repository=invite_repository, edge_repository=edge_repository
        )

    @provide
    def get_quota_accountant(
        self,
        user_repository: UserRepository,
        operation_repository: AppliedOperationRepository,
        invite_ledger: InviteLedger,
        event_publisher: EventPublisher,
        settings: InvitationSettings,
    ) -> QuotaAccountant:
        """Provide quota accountant."""
        return QuotaAccountant(
            user_repository=user_repository,
            operation_repository=operation_repository,
            invite_ledger=invite_ledger,
            event_publisher=event_publisher,
            settings=settings,
        )

    @provide
    def get_bonus_evaluator(
        self,
        quota_accountant: QuotaAccountant,
        invite_ledger: InviteLedger,
        event_publisher: EventPublisher,
        settings: InvitationSettings,
    ) -> BonusUnlockEvaluator:
        """Provide bonus unlock evaluator."""
        return BonusUnlockEvaluator(
            quota_accountant=quota_accountant,
            invite_ledger=invite_ledger,
            event_publisher=event_publisher,
            settings=settings,
        )

    @provide
    def get_redemption_coordinator(
        self,
        token_store: TokenStore,
        invite_ledger: InviteLedger,
        quota_accountant: QuotaAccountant,
        bonus_evaluator: BonusUnlockEvaluator,
        event_publisher: EventPublisher,
        settings: InvitationSettings,
    ) -> RedemptionCoordinator:
        """Provide redemption coordinator."""
        return RedemptionCoordinator(
            token_store=token_store,
            invite_ledger=invite_ledger,
            quota_accountant=quota_accountant,
            bonus_evaluator=bonus_evaluator,
            event_publisher=event_publisher,
            settings=settings,
        )

    @provide
    def get_referral_graph(
        self, user_repository: UserRepository, invite_ledger: InviteLedger
    ) -> ReferralGraphService:
        """Provide referral graph service."""
        return ReferralGraphService(
            user_repository=user_repository, invite_ledger=invite_ledger
        )
