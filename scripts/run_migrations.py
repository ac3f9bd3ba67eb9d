#!/usr/bin/env python3
"""Apply Alembic migrations with Logfire error tracking.

Usage:
    python scripts/run_migrations.py [revision]
"""

import sys
import logfire
from alembic import command
from alembic.config import Config

from referral.config import Settings
from referral.util.observability import configure_logfire


def main() -> int:
    """Upgrade the schema to ``revision`` (default ``head``)."""
    settings = Settings()
    configure_logfire(settings)

    revision = sys.argv[1] if len(sys.argv) > 1 else "head"

    try:
        logfire.info("Starting database migrations", revision=revision)

        alembic_cfg = Config("alembic.ini")
        alembic_cfg.attributes["url_from_caller"] = True
        # ConfigParser interpolation treats % specially
        alembic_cfg.set_main_option(
            "sqlalchemy.url", settings.database_url.replace("%", "%%")
        )
        command.upgrade(alembic_cfg, revision)

        logfire.info("Database migrations completed", revision=revision)
        return 0

    except Exception as e:
        logfire.error(
            "Database migration failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        # Fail the deploy rather than start on a broken schema
        raise


if __name__ == "__main__":
    sys.exit(main())
