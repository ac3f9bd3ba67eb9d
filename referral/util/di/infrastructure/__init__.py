"""Infrastructure providers."""

# Import bases
from .events import EventsProvider
from .persistence import PersistenceProvider

# Import implementations (needed for __subclasses__())
from .events import ProdEventsProvider  # noqa: F401
from .persistence import ProdPersistenceProvider  # noqa: F401

__all__ = [
    "EventsProvider",
    "PersistenceProvider",
    "ProdEventsProvider",
    "ProdPersistenceProvider",
]
