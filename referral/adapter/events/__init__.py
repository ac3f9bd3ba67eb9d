"""Domain event adapters."""

from .publisher import (
    BufferedEventPublisher,
    InMemoryEventPublisher,
    LogfireEventPublisher,
)

__all__ = ["BufferedEventPublisher", "LogfireEventPublisher", "InMemoryEventPublisher"]
