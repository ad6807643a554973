"""Celery tasks for the pricing cycle (resolve, record, evaluate alerts)."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from app.bullion_tracker.infrastructure.db.session import dispose_engine
from app.bullion_tracker.infrastructure.tasks.celery_app import celery_app
from app.bullion_tracker.infrastructure.tasks.runtime import build_runtime

logger = logging.getLogger(__name__)


async def _run_pricing_cycle_async() -> dict[str, Any]:
    """Async implementation of one pricing cycle.

    Each worker invocation runs in a fresh event loop, so the runtime is
    built and torn down per call and the cache is seeded from history.

    Returns:
        Summary of the cycle.
    """
    runtime = build_runtime()
    try:
        await runtime.seed_cache()
        result = await runtime.run_pricing_cycle()
    finally:
        await runtime.close()
        await dispose_engine()

    snapshot = result.snapshot
    alerts = result.alerts
    return {
        "prices": {
            metal.value: {
                "price": str(price.amount),
                "source": price.provenance.source,
                "provenance": price.provenance.kind.value,
            }
            for metal, price in snapshot.prices.items()
        },
        "all_live": snapshot.all_live,
        "history_written": result.history_written,
        "alerts_checked": alerts.checked if alerts else 0,
        "alerts_triggered": alerts.triggered if alerts else 0,
        "notifications_sent": alerts.sent if alerts else 0,
        "alert_errors": alerts.errors if alerts else 0,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@celery_app.task(
    bind=True,
    name="app.bullion_tracker.infrastructure.tasks.price_tasks.run_pricing_cycle",
)
def run_pricing_cycle(self) -> dict:
    """Resolve spot prices and evaluate alerts.

    This task runs on a schedule (every 5 minutes by default) and:
    1. Resolves every metal through the provider fallback chain
    2. Enriches live prices with day-over-day change
    3. Appends live prices to the price history
    4. Evaluates active alerts and sends push notifications

    Returns:
        Summary of the cycle.
    """
    logger.info("Starting run_pricing_cycle task")
    try:
        return asyncio.run(_run_pricing_cycle_async())
    except Exception as e:
        logger.exception(f"run_pricing_cycle failed: {e}")
        raise
