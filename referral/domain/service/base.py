"""Base service class for domain services."""


class Service:
    """Base class for referral domain services.

    Services coordinate repositories and carry the business rules that span
    more than one record (tokens, invites, edges, quota counters).
    """

    pass
