"""Event publishing infrastructure providers."""

from dishka import Scope, provide

from referral.adapter.events import BufferedEventPublisher, LogfireEventPublisher
from referral.domain.event import EventPublisher
from referral.util.di.base import ProviderBase


class EventsProvider(ProviderBase):
    """Events component base."""

    __mock_component__ = "events"


class ProdEventsProvider(EventsProvider):
    """Production events provider publishing to logfire.

    Domain events go to a per-request buffer, flushed by the persistence
    session after it commits.
    """

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_logfire_publisher(self) -> LogfireEventPublisher:
        """Provide the delivering publisher."""
        return LogfireEventPublisher()

    @provide(scope=Scope.REQUEST)
    def get_buffered_publisher(
        self, target: LogfireEventPublisher
    ) -> BufferedEventPublisher:
        """Provide the per-request event buffer."""
        return BufferedEventPublisher(target)

    @provide(scope=Scope.REQUEST)
    def get_event_publisher(self, buffer: BufferedEventPublisher) -> EventPublisher:
        """Provide the buffer as the domain port."""
        return buffer
