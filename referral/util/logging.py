"""Logging configuration for the application."""

import logging
import sys

from referral.config import Settings


def setup_logging(settings: Settings) -> None:
    """Configure standard library logging.

    Application code reports through logfire. This sets levels for the
    third-party libraries that log through ``logging``.

    Args:
        settings: Application settings
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,  # Override any existing configuration
    )

    # Quiet noisy libraries unless debugging
    for name in ("sqlalchemy.engine", "asyncpg", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(level if settings.debug else logging.WARNING)

    logging.getLogger("uvicorn.access").setLevel(
        logging.INFO if settings.environment != "production" else logging.WARNING
    )
    logging.getLogger("referral").setLevel(level)

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging configured: environment=%s, level=%s",
        settings.environment,
        logging.getLevelName(level),
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
