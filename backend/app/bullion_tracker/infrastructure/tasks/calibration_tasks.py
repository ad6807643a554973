"""Celery tasks for daily proxy ratio calibration."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from app.bullion_tracker.infrastructure.db.session import dispose_engine
from app.bullion_tracker.infrastructure.tasks.celery_app import celery_app
from app.bullion_tracker.infrastructure.tasks.runtime import build_runtime

logger = logging.getLogger(__name__)


async def _calibrate_ratios_async(force: bool = False) -> dict[str, Any]:
    """Async implementation of ratio calibration.

    Args:
        force: Recalibrate even when today's ratio already exists.

    Returns:
        Calibration results keyed by instrument.
    """
    runtime = build_runtime()
    try:
        results = await runtime.run_calibration(force=force)
    finally:
        await runtime.close()
        await dispose_engine()

    return {
        "calibrated": {
            instrument.value: {
                "ratio": str(result.ratio),
                "stale": result.is_stale,
                "default": result.is_default,
            }
            for instrument, result in results.items()
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@celery_app.task(
    bind=True,
    name="app.bullion_tracker.infrastructure.tasks.calibration_tasks.calibrate_ratios",
)
def calibrate_ratios(self, force: bool = False) -> dict:
    """Calibrate proxy ETF ratios against live spot prices.

    Runs hourly; instruments already calibrated today are skipped unless
    ``force`` is set.

    Returns:
        Calibration results keyed by instrument.
    """
    logger.info("Starting calibrate_ratios task")
    try:
        return asyncio.run(_calibrate_ratios_async(force))
    except Exception as e:
        logger.exception(f"calibrate_ratios failed: {e}")
        raise
