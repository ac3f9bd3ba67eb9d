"""Application layer DI providers."""

from dishka import Scope, provide

from referral.application.usecase.bonus import (
    RecordAddressBookSyncUseCase,
    RecordConnectionsUseCase,
)
from referral.application.usecase.graph import (
    GetReferralTreeUseCase,
    GetReferralsUseCase,
)
from referral.application.usecase.invite import (
    GenerateInviteUseCase,
    GetInviteStatusUseCase,
    GetMyInvitesUseCase,
    GetReceivedInvitesUseCase,
    ReconcileRedemptionsUseCase,
    RedeemInviteUseCase,
)
from referral.application.usecase.quota import GetQuotaUseCase, SetAdminUseCase
from referral.config import Settings
from referral.domain.service import (
    BonusUnlockEvaluator,
    InviteLedger,
    QuotaAccountant,
    RedemptionCoordinator,
    ReferralGraphService,
)
from referral.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Invite use cases
    @provide(scope=Scope.REQUEST)
    def get_generate_invite_use_case(
        self,
        redemption_coordinator: RedemptionCoordinator,
        quota_accountant: QuotaAccountant,
        settings: Settings,
    ) -> GenerateInviteUseCase:
        """Provide generate invite use case."""
        return GenerateInviteUseCase(
            redemption_coordinator=redemption_coordinator,
            quota_accountant=quota_accountant,
            settings=settings,
        )

    @provide(scope=Scope.REQUEST)
    def get_redeem_invite_use_case(
        self, redemption_coordinator: RedemptionCoordinator
    ) -> RedeemInviteUseCase:
        """Provide redeem invite use case."""
        return RedeemInviteUseCase(redemption_coordinator=redemption_coordinator)

    @provide(scope=Scope.REQUEST)
    def get_invite_status_use_case(
        self, redemption_coordinator: RedemptionCoordinator
    ) -> GetInviteStatusUseCase:
        """Provide invite status use case."""
        return GetInviteStatusUseCase(redemption_coordinator=redemption_coordinator)

    @provide(scope=Scope.REQUEST)
    def get_my_invites_use_case(
        self,
        invite_ledger: InviteLedger,
        quota_accountant: QuotaAccountant,
        settings: Settings,
    ) -> GetMyInvitesUseCase:
        """Provide get my invites use case."""
        return GetMyInvitesUseCase(
            invite_ledger=invite_ledger,
            quota_accountant=quota_accountant,
            settings=settings,
        )

    @provide(scope=Scope.REQUEST)
    def get_received_invites_use_case(
        self, invite_ledger: InviteLedger, settings: Settings
    ) -> GetReceivedInvitesUseCase:
        """Provide get received invites use case."""
        return GetReceivedInvitesUseCase(invite_ledger=invite_ledger, settings=settings)

    @provide(scope=Scope.REQUEST)
    def get_reconcile_redemptions_use_case(
        self,
        redemption_coordinator: RedemptionCoordinator,
        quota_accountant: QuotaAccountant,
    ) -> ReconcileRedemptionsUseCase:
        """Provide reconcile redemptions use case."""
        return ReconcileRedemptionsUseCase(
            redemption_coordinator=redemption_coordinator,
            quota_accountant=quota_accountant,
        )

    # Quota use cases
    @provide(scope=Scope.REQUEST)
    def get_get_quota_use_case(
        self, quota_accountant: QuotaAccountant
    ) -> GetQuotaUseCase:
        """Provide get quota use case."""
        return GetQuotaUseCase(quota_accountant=quota_accountant)

    @provide(scope=Scope.REQUEST)
    def get_set_admin_use_case(
        self, quota_accountant: QuotaAccountant
    ) -> SetAdminUseCase:
        """Provide set admin use case."""
        return SetAdminUseCase(quota_accountant=quota_accountant)

    # Bonus use cases
    @provide(scope=Scope.REQUEST)
    def get_record_connections_use_case(
        self, bonus_evaluator: BonusUnlockEvaluator
    ) -> RecordConnectionsUseCase:
        """Provide record connections use case."""
        return RecordConnectionsUseCase(bonus_evaluator=bonus_evaluator)

    @provide(scope=Scope.REQUEST)
    def get_record_address_book_sync_use_case(
        self, bonus_evaluator: BonusUnlockEvaluator
    ) -> RecordAddressBookSyncUseCase:
        """Provide record address book sync use case."""
        return RecordAddressBookSyncUseCase(bonus_evaluator=bonus_evaluator)

    # Referral graph use cases
    @provide(scope=Scope.REQUEST)
    def get_referral_tree_use_case(
        self, referral_graph: ReferralGraphService
    ) -> GetReferralTreeUseCase:
        """Provide referral tree use case."""
        return GetReferralTreeUseCase(referral_graph=referral_graph)

    @provide(scope=Scope.REQUEST)
    def get_referrals_use_case(
        self, referral_graph: ReferralGraphService
    ) -> GetReferralsUseCase:
        """Provide referrals use case."""
        return GetReferralsUseCase(referral_graph=referral_graph)
