"""Domain error to HTTP response mapping."""

import logfire
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from referral.domain.error import (
    AlreadyRedeemedError,
    DomainError,
    InconsistentRedemptionError,
    InvalidCodeError,
    NotAuthorizedError,
    NotFoundError,
    QuotaExhaustedError,
    RetryableError,
    SelfRedemptionError,
)

# Status code and client-facing error name per domain error
ERROR_RESPONSES: dict[type[DomainError], tuple[int, str]] = {
    InvalidCodeError: (status.HTTP_404_NOT_FOUND, "InvalidCode"),
    AlreadyRedeemedError: (status.HTTP_409_CONFLICT, "AlreadyRedeemed"),
    SelfRedemptionError: (status.HTTP_400_BAD_REQUEST, "SelfRedemption"),
    QuotaExhaustedError: (status.HTTP_409_CONFLICT, "QuotaExhausted"),
    RetryableError: (status.HTTP_503_SERVICE_UNAVAILABLE, "Retryable"),
    InconsistentRedemptionError: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Inconsistent",
    ),
    NotFoundError: (status.HTTP_404_NOT_FOUND, "NotFound"),
    NotAuthorizedError: (status.HTTP_403_FORBIDDEN, "NotAuthorized"),
}


def error_response(exc: DomainError) -> tuple[int, str]:
    """Find the HTTP status and error name for a domain error.

    Unmapped errors are internal failures.
    """
    for error_type in type(exc).__mro__:
        if error_type in ERROR_RESPONSES:
            return ERROR_RESPONSES[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal"


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render a domain error as ``{"detail": ..., "error": ...}``."""
    status_code, name = error_response(exc)

    headers = None
    if isinstance(exc, RetryableError):
        headers = {"Retry-After": str(exc.retry_after)}

    if status_code >= 500:
        logfire.error(
            "Request failed",
            path=request.url.path,
            error=name,
            detail=str(exc),
        )
    else:
        logfire.info("Request refused", path=request.url.path, error=name)

    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": name},
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register domain error handlers on the app."""
    app.add_exception_handler(DomainError, domain_error_handler)
