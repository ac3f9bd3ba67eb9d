"""FastAPI application."""

from dishka import AsyncContainer
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from referral.config import Settings
from referral.interface.api.errors import register_error_handlers
from referral.interface.api.routes import (
    admin,
    bonus,
    health,
    invites,
    quota,
    referrals,
)
from referral.util.di.container import create_container, setup_di
from referral.util.observability import instrument_fastapi


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        container: DI container to use. Defaults to the production container.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.
    """
    settings = Settings()

    app_instance = FastAPI(
        title="Referral Engine API",
        description="Invite codes, quotas and the referral graph",
        version="0.1.0",
    )

    instrument_fastapi(app_instance)

    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=[
            settings.api.frontend_url,
            "http://localhost:3000",  # Local development
            "http://localhost:5173",  # Vite default
        ],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "Cache-Control"],
        expose_headers=["Content-Length", "Content-Type", "Retry-After"],
        max_age=600,
    )

    # Settings are loaded from environment automatically
    setup_di(app_instance, container or create_container())

    register_error_handlers(app_instance)

    app_instance.include_router(health.router)
    app_instance.include_router(invites.router)
    app_instance.include_router(quota.router)
    app_instance.include_router(admin.router)
    app_instance.include_router(bonus.router)
    app_instance.include_router(referrals.router)

    return app_instance


# Create app instance for uvicorn
# Note: Logfire must be configured before this module is imported
app = create_app()
