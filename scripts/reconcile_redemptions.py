#!/usr/bin/env python3
"""Complete redemptions whose effects were interrupted.

Finds codes that were claimed but whose invite was never marked redeemed and
replays the remaining effects. Safe to run repeatedly, e.g. from cron.

Usage:
    python scripts/reconcile_redemptions.py [--limit N]
"""

import argparse
import asyncio
import sys

import logfire
from dishka import make_async_container

from referral.config import Settings
from referral.domain.service import RedemptionCoordinator
from referral.util.di import PROVIDERS, get_provider
from referral.util.observability import configure_logfire


async def reconcile(limit: int) -> int:
    """Run one reconciliation pass in its own transaction.

    Returns:
        Number of redemptions completed
    """
    providers = [get_provider(base, use_mock=False)() for base in PROVIDERS]
    container = make_async_container(*providers)
    try:
        async with container() as request_container:
            coordinator = await request_container.get(RedemptionCoordinator)
            results = await coordinator.reconcile_pending(limit)
        return len(results)
    finally:
        await container.close()


def main() -> int:
    """Reconcile pending redemptions and log the outcome to Logfire."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--limit", type=int, default=100)
    args = parser.parse_args()

    settings = Settings()
    configure_logfire(settings)

    try:
        count = asyncio.run(reconcile(args.limit))
        logfire.info("Reconciliation pass finished", reconciled=count)
        return 0

    except Exception as e:
        logfire.error(
            "Reconciliation failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise


if __name__ == "__main__":
    sys.exit(main())
