"""FastAPI dependency providers for the control surface.

Routers resolve repositories and services through these functions so
tests can swap them via ``app.dependency_overrides``.
"""

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.bullion_tracker.application.interfaces.notification_transport import (
    NotificationTransport,
)
from app.bullion_tracker.application.use_cases.calibrate_ratios import CalibrationService
from app.bullion_tracker.application.use_cases.run_pricing_cycle import (
    LatestPriceStore,
    PricingCycle,
)
from app.bullion_tracker.domain.repositories.alert_repository import AlertRepository
from app.bullion_tracker.domain.repositories.destination_repository import (
    DestinationRepository,
)
from app.bullion_tracker.infrastructure.db.session import get_db_session
from app.bullion_tracker.infrastructure.repositories import (
    SqlAlertRepository,
    SqlDestinationRepository,
)
from app.bullion_tracker.infrastructure.tasks.runtime import BullionRuntime


def get_runtime(request: Request) -> BullionRuntime:
    """Return the runtime created by the application lifespan.

    Raises:
        HTTPException: 503 if the application has not finished starting.
    """
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up",
        )
    return runtime


def get_latest_store(runtime: BullionRuntime = Depends(get_runtime)) -> LatestPriceStore:
    return runtime.latest_store


def get_pricing_cycle(
    runtime: BullionRuntime = Depends(get_runtime),
    session: AsyncSession = Depends(get_db_session),
) -> PricingCycle:
    """Price-only cycle used to refresh expired spot prices on demand."""
    return runtime.pricing_cycle(session, with_alerts=False)


def get_calibration_service(
    runtime: BullionRuntime = Depends(get_runtime),
    session: AsyncSession = Depends(get_db_session),
) -> CalibrationService:
    return runtime.calibration_service(session)


def get_notification_transport(
    runtime: BullionRuntime = Depends(get_runtime),
) -> NotificationTransport:
    return runtime.transport


def get_alert_repository(
    session: AsyncSession = Depends(get_db_session),
) -> AlertRepository:
    return SqlAlertRepository(session)


def get_destination_repository(
    session: AsyncSession = Depends(get_db_session),
) -> DestinationRepository:
    return SqlDestinationRepository(session)
