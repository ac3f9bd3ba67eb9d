"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class InvalidCodeError(DomainError):
    """Raised when an invite code is unknown or malformed."""

    def __init__(self, code: str, reason: str = "not_found"):
        self.code = code
        self.reason = reason
        super().__init__(f"Invalid invite code ({reason})")


class AlreadyRedeemedError(DomainError):
    """Raised when an invite code has already been used by someone else."""

    def __init__(self, code: str):
        self.code = code
        super().__init__("Invite code has already been redeemed")


class SelfRedemptionError(DomainError):
    """Raised when a user tries to redeem their own invite."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("Users cannot redeem their own invite")


class QuotaExhaustedError(DomainError):
    """Raised when a non-admin sender has no invites left."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id} has no invites remaining")


class RetryableError(DomainError):
    """Raised on store timeouts or contention. Callers retry with backoff."""

    def __init__(self, message: str, retry_after: int = 1):
        self.retry_after = retry_after
        super().__init__(message)


class InconsistentRedemptionError(DomainError):
    """Raised when redemption state for an invite disagrees across records."""

    def __init__(self, invite_id: str, message: str):
        self.invite_id = invite_id
        super().__init__(f"Invite {invite_id}: {message}")


class TokenAlreadyExistsError(DomainError):
    """Raised when a generated code collides with an existing token."""

    def __init__(self, code: str):
        self.code = code
        super().__init__("Invite code already exists")


class NotAuthorizedError(DomainError):
    """Raised when a caller lacks the privilege for an operation."""

    def __init__(self, user_id: str, action: str):
        self.user_id = user_id
        self.action = action
        super().__init__(f"User {user_id} is not authorized to {action}")


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")
