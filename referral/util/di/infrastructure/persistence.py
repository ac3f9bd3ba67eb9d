"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from referral.adapter.events import BufferedEventPublisher
from referral.config import Settings
from referral.domain.repository import (
    AppliedOperationRepository,
    InviteEdgeRepository,
    InviteRepository,
    InviteTokenRepository,
    UserRepository,
)
from referral.persistence.database import (
    create_engine,
    create_session_factory,
    transaction,
)
from referral.persistence.repository import (
    PostgresAppliedOperationRepository,
    PostgresInviteEdgeRepository,
    PostgresInviteRepository,
    PostgresInviteTokenRepository,
    PostgresUserRepository,
)
from referral.util.di.base import ProviderBase
from referral.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using PostgreSQL."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def get_engine(self, settings: Settings) -> AsyncEngine:
        """Provide database engine."""
        engine = create_engine(settings)
        instrument_sqlalchemy(engine)
        return engine

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        events: BufferedEventPublisher,
    ) -> AsyncIterator[AsyncSession]:
        """Provide one transaction per request.

        Committed when the request scope closes, rolled back if an exception
        escapes it. Compensations for failed sends are written explicitly by
        the domain, so a handled domain error still commits them. The
        request's events are released after the commit.
        """
        async with transaction(session_factory, events) as session:
            yield session

    @provide(scope=Scope.REQUEST)
    def get_user_repository(self, session: AsyncSession) -> UserRepository:
        """Provide User repository."""
        return PostgresUserRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_invite_repository(self, session: AsyncSession) -> InviteRepository:
        """Provide Invite repository."""
        return PostgresInviteRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_invite_token_repository(
        self, session: AsyncSession
    ) -> InviteTokenRepository:
        """Provide InviteToken repository."""
        return PostgresInviteTokenRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_invite_edge_repository(self, session: AsyncSession) -> InviteEdgeRepository:
        """Provide InviteEdge repository."""
        return PostgresInviteEdgeRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_applied_operation_repository(
        self, session: AsyncSession
    ) -> AppliedOperationRepository:
        """Provide AppliedOperation repository."""
        return PostgresAppliedOperationRepository(session)
