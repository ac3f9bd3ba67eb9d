"""Event publisher adapters."""

import logfire

from referral.domain.event import DomainEvent, EventPublisher, QuotaChanged


class LogfireEventPublisher(EventPublisher):
    """Publishes domain events as structured Logfire records.

    Downstream consumers (badge and toast updates, analytics) subscribe to
    the telemetry stream rather than to this process.
    """

    async def publish(self, event: DomainEvent) -> None:
        """Emit the event as a Logfire info record.

        Args:
            event: The event to publish
        """
        payload = event.model_dump(mode="json")
        name = payload.pop("name", type(event).__name__)
        if isinstance(event, QuotaChanged):
            # Flatten the snapshot so it is queryable by field
            payload.update({f"quota_{k}": v for k, v in payload.pop("snapshot").items()})
        logfire.info("Domain event {event}", event=name, **payload)


class InMemoryEventPublisher(EventPublisher):
    """Collects published events in memory.

    Returns deterministic results for assertions in tests.
    """

    def __init__(self) -> None:
        self.events: list[DomainEvent] = []

    async def publish(self, event: DomainEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: type[DomainEvent]) -> list[DomainEvent]:
        """Events of one type, in publication order."""
        return [event for event in self.events if isinstance(event, event_type)]

    def clear(self) -> None:
        self.events.clear()


class BufferedEventPublisher(EventPublisher):
    """Holds a request's events until its transaction commits.

    Events describe committed state only: ``flush`` delivers them to the
    target after the commit, ``discard`` drops them on rollback.
    """

    def __init__(self, target: EventPublisher) -> None:
        self.target = target
        self.pending: list[DomainEvent] = []

    async def publish(self, event: DomainEvent) -> None:
        self.pending.append(event)

    async def flush(self) -> None:
        """Deliver buffered events in publication order."""
        events, self.pending = self.pending, []
        for event in events:
            await self.target.publish(event)

    def discard(self) -> None:
        if self.pending:
            logfire.info("Domain events discarded", count=len(self.pending))
        self.pending = []
