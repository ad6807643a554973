"""FastAPI application factory and main entry point."""

import os
import subprocess
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.bullion_tracker.infrastructure.db.session import dispose_engine
from app.bullion_tracker.infrastructure.tasks.runtime import BullionRuntime, build_runtime
from app.bullion_tracker.infrastructure.tasks.scheduler import PeriodicScheduler
from app.bullion_tracker.presentation.api import alerts, health, prices, push_tokens
from app.core.config import Settings, get_settings
from app.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


def _run_migrations() -> None:
    """Apply pending Alembic migrations (production deployments)."""
    backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    alembic_ini_path = os.path.join(backend_dir, "alembic.ini")

    if not os.path.exists(alembic_ini_path):
        logger.warning(f"alembic.ini not found at {alembic_ini_path}, skipping migrations")
        return

    logger.info("Running database migrations...")
    result = subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        capture_output=True,
        text=True,
        timeout=60,
        cwd=backend_dir,
    )
    if result.returncode == 0:
        logger.info("Database migrations completed")
        if result.stdout:
            logger.debug(f"Migration output: {result.stdout}")
    else:
        logger.error(f"Migration failed: {result.stderr}")


def create_app(
    settings: Optional[Settings] = None,
    runtime: Optional[BullionRuntime] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings (defaults to ``get_settings()``).
        runtime: Prebuilt runtime; built from settings on startup when omitted.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager for startup/shutdown events."""
        # Startup
        setup_logging(
            level="DEBUG" if settings.debug else settings.log_level.upper(),
            upstream_level=settings.upstream_log_level.upper(),
        )
        logger.info("Bullion Tracker starting up...")
        logger.info(f"Environment: {settings.app_env}")

        if settings.is_production:
            try:
                _run_migrations()
            except (OSError, subprocess.SubprocessError) as e:
                logger.error(f"Migration error (continuing anyway): {e}")

        app_runtime = runtime or build_runtime(settings)
        app.state.runtime = app_runtime

        try:
            await app_runtime.seed_cache()
        except Exception as e:
            logger.error(f"Could not seed price cache from history (continuing anyway): {e}")

        schedulers: list[PeriodicScheduler] = []
        if settings.run_schedulers:
            schedulers = [
                PeriodicScheduler(
                    app_runtime.run_pricing_cycle,
                    interval=settings.alert_check_interval_seconds,
                    clock=app_runtime.clock,
                    name="pricing-cycle",
                ),
                PeriodicScheduler(
                    app_runtime.run_calibration,
                    interval=settings.calibration_interval_seconds,
                    clock=app_runtime.clock,
                    name="calibration",
                ),
            ]
            for scheduler in schedulers:
                scheduler.start()

        yield

        # Shutdown
        logger.info("Bullion Tracker shutting down...")
        for scheduler in schedulers:
            await scheduler.stop()
        await app_runtime.close()
        await dispose_engine()

    app = FastAPI(
        title="Bullion Tracker",
        description="Precious metal spot prices, proxy ETF calibration and price alerts",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/docs" if settings.is_development else None,
        redoc_url="/api/redoc" if settings.is_development else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API routes
    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(prices.router, prefix="/api", tags=["Prices"])
    app.include_router(alerts.router, prefix="/api", tags=["Alerts"])
    app.include_router(push_tokens.router, prefix="/api", tags=["Push Tokens"])

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
    )
