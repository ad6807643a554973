"""Celery application configuration.

Alternative deployment to the in-process schedulers: beat fires the same
cycle functions on the same intervals. At-most-once alert firing holds
across workers through the repository's conditional write.
"""

from celery import Celery

from app.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "bullion_tracker",
    broker=str(settings.celery_broker_url),
    backend=str(settings.celery_result_backend),
    include=[
        "app.bullion_tracker.infrastructure.tasks.price_tasks",
        "app.bullion_tracker.infrastructure.tasks.calibration_tasks",
    ],
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    worker_prefetch_multiplier=1,  # Fair task distribution
    # Beat schedule for periodic tasks
    beat_schedule={
        "run-pricing-cycle-every-5m": {
            "task": "app.bullion_tracker.infrastructure.tasks.price_tasks.run_pricing_cycle",
            "schedule": settings.alert_check_interval_seconds,
        },
        "calibrate-ratios-hourly": {
            "task": "app.bullion_tracker.infrastructure.tasks.calibration_tasks.calibrate_ratios",
            "schedule": settings.calibration_interval_seconds,
        },
    },
)
